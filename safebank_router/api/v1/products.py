"""GET /v1/products and GET /v1/holdings - raw source data"""

import logging
from typing import List

from fastapi import APIRouter, Depends, HTTPException, Request

from safebank_router.api.dependencies import get_catalog_provider, get_holdings_provider, get_request_id
from safebank_router.api.v1.coverage import load_portfolio
from safebank_router.api.v1.schemas import HoldingSchema, ProductSchema, ProductsResponse
from safebank_router.domain.exceptions import CatalogSourceError
from safebank_router.infrastructure.clients.kdic import CatalogProvider
from safebank_router.infrastructure.clients.mydata import HoldingsProvider
from safebank_router.infrastructure.observability.metrics import source_failure_counter

router = APIRouter()


@router.get("/products", response_model=ProductsResponse)
async def get_products(
    request: Request,
    catalog_provider: CatalogProvider = Depends(get_catalog_provider),
):
    """
    Insured-product catalog as currently loaded.

    Returns:
        Catalog entries and which source served them ("api" or "csv")
    """
    try:
        entries, source = await catalog_provider.load()
    except CatalogSourceError as e:
        source_failure_counter.labels(source="catalog").inc()
        logging.error(f"Catalog unavailable: {e}", extra={"request_id": get_request_id(request)})
        raise HTTPException(status_code=503, detail="Insured product catalog unavailable")

    return ProductsResponse(
        source=source,
        count=len(entries),
        products=[ProductSchema.from_domain(e) for e in entries],
    )


@router.get("/holdings", response_model=List[HoldingSchema])
async def get_holdings(
    request: Request,
    catalog_provider: CatalogProvider = Depends(get_catalog_provider),
    holdings_provider: HoldingsProvider = Depends(get_holdings_provider),
):
    """Depositor holdings after validation and category/currency inference"""
    _, holdings = await load_portfolio(catalog_provider, holdings_provider, get_request_id(request))
    return [HoldingSchema.from_domain(h) for h in holdings]
