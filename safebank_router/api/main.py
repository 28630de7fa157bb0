"""FastAPI application factory"""

from fastapi import FastAPI
from prometheus_client import generate_latest, CONTENT_TYPE_LATEST
from starlette.responses import Response

from safebank_router.api.middleware import RequestIDMiddleware, MetricsMiddleware
from safebank_router.api.v1 import coverage, routing, products
from safebank_router.infrastructure.observability.logging import setup_logging
from safebank_router.config import settings

# Setup structured logging
setup_logging(settings.log_level)


def create_app() -> FastAPI:
    """Create and configure FastAPI application"""
    app = FastAPI(
        title="SafeBank Router",
        description="Deposit-protection coverage and idle cash routing service (reference only)",
        version="0.1.0",
        docs_url="/docs",
        redoc_url="/redoc",
    )

    # Add middleware (order matters: last added = first executed)
    app.add_middleware(MetricsMiddleware)
    app.add_middleware(RequestIDMiddleware)

    # Health check endpoint
    @app.get("/health")
    def health_check():
        return {"status": "ok", "service": settings.service_name}

    # Prometheus metrics endpoint
    @app.get("/metrics")
    def metrics():
        return Response(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)

    # Register API routers
    app.include_router(coverage.router, prefix="/v1", tags=["coverage"])
    app.include_router(routing.router, prefix="/v1", tags=["routing"])
    app.include_router(products.router, prefix="/v1", tags=["sources"])

    return app


app = create_app()
