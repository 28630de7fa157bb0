"""GET /v1/coverage - Deposit-protection coverage per license"""

import time
import logging
from typing import List, Optional, Tuple

from fastapi import APIRouter, Depends, HTTPException, Query, Request

from safebank_router.api.dependencies import get_catalog_provider, get_holdings_provider, get_request_id
from safebank_router.api.v1.schemas import (
    CoverageResponse,
    CoverageRowSchema,
    CoverageTotalsSchema,
    Policy,
    PolicyTotalsSchema,
)
from safebank_router.config import settings
from safebank_router.domain.catalog import CatalogIndex
from safebank_router.domain.coverage import aggregate_coverage, apply_coverage_limit
from safebank_router.domain.exceptions import CatalogSourceError, HoldingsSourceError
from safebank_router.domain.models import CatalogEntry, Holding
from safebank_router.infrastructure.clients.kdic import CatalogProvider
from safebank_router.infrastructure.clients.mydata import HoldingsProvider
from safebank_router.infrastructure.observability.logging import log_coverage_report
from safebank_router.infrastructure.observability.metrics import record_coverage, source_failure_counter

router = APIRouter()


def resolve_cap(policy: Policy, cap: Optional[int]) -> Tuple[int, str]:
    """Explicit cap wins over the policy preset; returns (cap, metric label)"""
    if cap is not None:
        return cap, "custom"
    return settings.cap_for_policy(policy), policy


async def load_portfolio(
    catalog_provider: CatalogProvider,
    holdings_provider: HoldingsProvider,
    request_id: str,
) -> Tuple[List[CatalogEntry], List[Holding]]:
    """
    Load catalog then holdings, translating source failures to HTTP errors.

    Raises:
        HTTPException: 503 when the catalog or the holdings feed is unavailable
    """
    try:
        catalog, source = await catalog_provider.load()
    except CatalogSourceError as e:
        source_failure_counter.labels(source="catalog").inc()
        logging.error(f"Catalog unavailable: {e}", extra={"request_id": request_id})
        raise HTTPException(status_code=503, detail="Insured product catalog unavailable")

    if not catalog:
        # Valid but degraded: every holding will classify as non-protected
        logging.warning("Insured catalog is empty", extra={"request_id": request_id, "source": source})

    try:
        holdings = await holdings_provider.load(catalog)
    except HoldingsSourceError as e:
        source_failure_counter.labels(source="holdings").inc()
        logging.error(f"Holdings feed error: {e}", extra={"request_id": request_id})
        raise HTTPException(status_code=503, detail="Holdings service unavailable")

    return catalog, holdings


@router.get("/coverage", response_model=CoverageResponse)
async def get_coverage(
    request: Request,
    policy: Policy = Query("post", description="Cap preset: pre- or post-policy limit"),
    cap: Optional[int] = Query(None, gt=0, description="Explicit per-license cap in KRW"),
    catalog_provider: CatalogProvider = Depends(get_catalog_provider),
    holdings_provider: HoldingsProvider = Depends(get_holdings_provider),
):
    """
    Classify holdings against the insured catalog and aggregate per license.

    Flow:
    1. Load insured catalog (KDIC API, CSV fallback)
    2. Load holdings (mock generator or MyData feed)
    3. Match, bucket and cap exposure per license
    4. Re-cap the same rows under each policy preset for comparison
    5. Return rows and totals
    """
    start_time = time.time()
    request_id = get_request_id(request)
    limit, label = resolve_cap(policy, cap)

    catalog, holdings = await load_portfolio(catalog_provider, holdings_provider, request_id)

    try:
        report = aggregate_coverage(
            CatalogIndex.from_entries(catalog),
            holdings,
            limit,
            default_fx_rate=settings.default_fx_rate,
        )
        policies = {
            preset: PolicyTotalsSchema(
                cap=settings.cap_for_policy(preset),
                totals=CoverageTotalsSchema.from_domain(
                    apply_coverage_limit(report.rows, settings.cap_for_policy(preset)).totals
                ),
            )
            for preset in ("pre", "post")
        }
    except Exception as e:
        logging.error(f"Unexpected error: {e}", extra={"request_id": request_id})
        raise HTTPException(status_code=500, detail="Internal server error")

    duration_ms = (time.time() - start_time) * 1000
    record_coverage(label, sum(1 for row in report.rows if row.excess > 0))
    log_coverage_report(request_id, limit, len(report.rows), report.totals, duration_ms)

    return CoverageResponse(
        cap=limit,
        rows=[CoverageRowSchema.from_domain(row) for row in report.rows],
        totals=CoverageTotalsSchema.from_domain(report.totals),
        policies=policies,
    )
