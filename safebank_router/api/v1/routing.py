"""GET /v1/routing - Idle cash reallocation plan, GET /v1/rates - reference offers"""

import time
import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Request

from safebank_router.api.dependencies import get_catalog_provider, get_holdings_provider, get_request_id
from safebank_router.api.v1.coverage import load_portfolio, resolve_cap
from safebank_router.api.v1.schemas import (
    PlanEntrySchema,
    Policy,
    ProtectionProjectionSchema,
    RateOfferSchema,
    RatesResponse,
    RoutingResponse,
)
from safebank_router.config import settings
from safebank_router.domain.catalog import CatalogIndex
from safebank_router.domain.coverage import aggregate_coverage
from safebank_router.domain.routing import (
    DEFAULT_RATE_OFFERS,
    compute_routing,
    project_protection_ratio,
    rank_offers,
)
from safebank_router.infrastructure.clients.kdic import CatalogProvider
from safebank_router.infrastructure.clients.mydata import HoldingsProvider
from safebank_router.infrastructure.observability.logging import log_routing_plan
from safebank_router.infrastructure.observability.metrics import record_routing

router = APIRouter()


@router.get("/routing", response_model=RoutingResponse)
async def get_routing(
    request: Request,
    policy: Policy = Query("post", description="Cap preset: pre- or post-policy limit"),
    cap: Optional[int] = Query(None, gt=0, description="Explicit per-license cap in KRW"),
    catalog_provider: CatalogProvider = Depends(get_catalog_provider),
    holdings_provider: HoldingsProvider = Depends(get_holdings_provider),
):
    """
    Propose moving idle demand cash into the best-rate insured offers.

    The plan is computed from raw holdings; coverage totals are only used
    for the before/after protection ratio.
    """
    start_time = time.time()
    request_id = get_request_id(request)
    limit, _ = resolve_cap(policy, cap)

    catalog, holdings = await load_portfolio(catalog_provider, holdings_provider, request_id)

    try:
        result = compute_routing(
            limit,
            holdings,
            DEFAULT_RATE_OFFERS,
            liquidity_reserve=settings.liquidity_reserve,
            per_offer_ceiling=settings.per_offer_ceiling,
            default_fx_rate=settings.default_fx_rate,
        )
        report = aggregate_coverage(
            CatalogIndex.from_entries(catalog),
            holdings,
            limit,
            default_fx_rate=settings.default_fx_rate,
        )
        projection = project_protection_ratio(report.totals, result)
    except Exception as e:
        logging.error(f"Unexpected error: {e}", extra={"request_id": request_id})
        raise HTTPException(status_code=500, detail="Internal server error")

    duration_ms = (time.time() - start_time) * 1000
    record_routing(result)
    log_routing_plan(request_id, limit, result, duration_ms)

    return RoutingResponse(
        cap=limit,
        idle_cash=result.idle_cash,
        liquidity_reserve=result.liquidity_reserve,
        plan=[PlanEntrySchema.from_domain(entry) for entry in result.plan],
        projected_interest=result.projected_interest,
        protection_ratio=ProtectionProjectionSchema.from_domain(projection),
    )


@router.get("/rates", response_model=RatesResponse)
def get_rates():
    """Reference deposit offers, best rate first"""
    return RatesResponse(offers=[RateOfferSchema.from_domain(o) for o in rank_offers(DEFAULT_RATE_OFFERS)])
