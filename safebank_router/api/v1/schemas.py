"""Pydantic schemas for API response validation"""

from pydantic import BaseModel
from typing import Dict, List, Literal, Optional

from safebank_router.domain.models import (
    CatalogEntry,
    CoverageRow,
    CoverageTotals,
    Holding,
    ProtectionProjection,
    RateOffer,
    RoutingPlanEntry,
)

Policy = Literal["pre", "post"]


class HoldingSchema(BaseModel):
    """Single depositor holding"""

    id: str
    institution: str
    license: str
    type: str
    currency: str
    balance: float
    fx_rate: Optional[float] = None
    term_months: Optional[int] = None
    product_name: Optional[str] = None

    @classmethod
    def from_domain(cls, holding: Holding) -> "HoldingSchema":
        return cls(
            id=holding.holding_id,
            institution=holding.institution,
            license=holding.license,
            type=holding.category,
            currency=holding.currency,
            balance=holding.balance,
            fx_rate=holding.fx_rate,
            term_months=holding.term_months,
            product_name=holding.product_name,
        )


class ProductSchema(BaseModel):
    """Insured catalog product"""

    institution: str
    product_name: str
    sale_end_date: Optional[str] = None
    registered_date: Optional[str] = None

    @classmethod
    def from_domain(cls, entry: CatalogEntry) -> "ProductSchema":
        return cls(
            institution=entry.institution,
            product_name=entry.product_name,
            sale_end_date=entry.sale_end_date,
            registered_date=entry.registered_date,
        )


class ProductsResponse(BaseModel):
    """Response for GET /v1/products"""

    source: str  # api | csv
    count: int
    products: List[ProductSchema]


class CoverageRowSchema(BaseModel):
    """Aggregated exposure for one license"""

    license: str
    institution: str
    products: List[str]
    tier: str
    eligible: float
    protected: float
    excess: float
    non_protected: float
    holdings: List[HoldingSchema]

    @classmethod
    def from_domain(cls, row: CoverageRow) -> "CoverageRowSchema":
        return cls(
            license=row.license,
            institution=row.institution,
            products=list(row.products),
            tier=row.tier,
            eligible=row.eligible,
            protected=row.protected,
            excess=row.excess,
            non_protected=row.non_protected,
            holdings=[HoldingSchema.from_domain(h) for h in row.holdings],
        )


class CoverageTotalsSchema(BaseModel):
    eligible: float = 0
    protected: float = 0
    excess: float = 0
    non_protected: float = 0
    tier1: float = 0
    tier2: float = 0

    @classmethod
    def from_domain(cls, totals: CoverageTotals) -> "CoverageTotalsSchema":
        return cls(
            eligible=totals.eligible,
            protected=totals.protected,
            excess=totals.excess,
            non_protected=totals.non_protected,
            tier1=totals.tier1,
            tier2=totals.tier2,
        )


class PolicyTotalsSchema(BaseModel):
    """Totals re-capped under one policy preset"""

    cap: int
    totals: CoverageTotalsSchema


class CoverageResponse(BaseModel):
    """Response for GET /v1/coverage"""

    cap: int
    rows: List[CoverageRowSchema]
    totals: CoverageTotalsSchema
    policies: Dict[str, PolicyTotalsSchema]


class RateOfferSchema(BaseModel):
    institution: str
    license: str
    product: str
    term_months: int
    rate: float

    @classmethod
    def from_domain(cls, offer: RateOffer) -> "RateOfferSchema":
        return cls(
            institution=offer.institution,
            license=offer.license,
            product=offer.product,
            term_months=offer.term_months,
            rate=offer.rate,
        )


class RatesResponse(BaseModel):
    """Response for GET /v1/rates"""

    offers: List[RateOfferSchema]


class PlanEntrySchema(BaseModel):
    """Single allocation in a routing plan"""

    institution: str
    license: str
    product: str
    rate: float
    term_months: int
    allocated: float
    reason: str

    @classmethod
    def from_domain(cls, entry: RoutingPlanEntry) -> "PlanEntrySchema":
        return cls(
            institution=entry.institution,
            license=entry.license,
            product=entry.product,
            rate=entry.rate,
            term_months=entry.term_months,
            allocated=entry.allocated,
            reason=entry.reason,
        )


class ProtectionProjectionSchema(BaseModel):
    before: float
    after: float

    @classmethod
    def from_domain(cls, projection: ProtectionProjection) -> "ProtectionProjectionSchema":
        return cls(before=projection.before, after=projection.after)


class RoutingResponse(BaseModel):
    """Response for GET /v1/routing"""

    cap: int
    idle_cash: float
    liquidity_reserve: float
    plan: List[PlanEntrySchema]
    projected_interest: int
    protection_ratio: ProtectionProjectionSchema
