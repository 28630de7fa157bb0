"""Dependency injection for FastAPI endpoints"""

from fastapi import Request
from safebank_router.infrastructure.clients.kdic import CatalogProvider
from safebank_router.infrastructure.clients.mydata import HoldingsProvider


def get_request_id(request: Request) -> str:
    """Extract request ID from request state"""
    return getattr(request.state, "request_id", "unknown")


def get_catalog_provider() -> CatalogProvider:
    """Provide insured-catalog loader (KDIC API with CSV fallback)"""
    return CatalogProvider()


def get_holdings_provider() -> HoldingsProvider:
    """Provide holdings loader (mock generator or MyData feed)"""
    return HoldingsProvider()
