"""Domain models - pure Python dataclasses representing business entities"""

from dataclasses import dataclass, field
from typing import List, Optional

# Holding categories
DEMAND = "demand"
TERM = "term"
FX_DEPOSIT = "fx_deposit"
TRUST_PROTECTED = "trust_protected"
INVESTMENT = "investment"

CATEGORIES = (DEMAND, TERM, FX_DEPOSIT, TRUST_PROTECTED, INVESTMENT)
PROTECTED_CATEGORIES = frozenset({DEMAND, TERM, FX_DEPOSIT, TRUST_PROTECTED})

# Institution tiers
TIER_1 = "tier-1"  # General banks
TIER_2 = "tier-2"  # Savings banks, mutual and cooperative institutions
TIER_OTHER = "other"

REPORTING_CURRENCY = "KRW"
USD = "USD"


@dataclass(frozen=True)
class Holding:
    """A depositor's account or product instance"""

    holding_id: str
    institution: str
    license: str  # Protection group key
    category: str
    currency: str
    balance: float = 0
    fx_rate: Optional[float] = None
    term_months: Optional[int] = None
    product_name: Optional[str] = None


@dataclass(frozen=True)
class CatalogEntry:
    """Government-insured product from the KDIC catalog"""

    institution: str
    product_name: str
    sale_end_date: Optional[str] = None
    registered_date: Optional[str] = None


@dataclass(frozen=True)
class RateOffer:
    """Reference deposit offer used by the router"""

    institution: str
    license: str
    product: str
    term_months: int
    rate: float  # Annual, e.g. 0.033 for 3.3%


@dataclass
class CoverageRow:
    """Protection exposure aggregated under one license"""

    license: str
    institution: str
    tier: str
    products: List[str] = field(default_factory=list)
    eligible: float = 0
    protected: float = 0
    excess: float = 0
    non_protected: float = 0
    holdings: List[Holding] = field(default_factory=list)


@dataclass
class CoverageTotals:
    """Sums across all license rows plus tier subtotals of eligible exposure"""

    eligible: float = 0
    protected: float = 0
    excess: float = 0
    non_protected: float = 0
    tier1: float = 0
    tier2: float = 0


@dataclass
class CoverageReport:
    """Output of coverage aggregation"""

    rows: List[CoverageRow]
    totals: CoverageTotals


@dataclass
class RoutingPlanEntry:
    """Single allocation of idle cash into a rate offer"""

    institution: str
    license: str
    product: str
    rate: float
    term_months: int
    allocated: float
    reason: str


@dataclass
class RoutingResult:
    """Output of the routing allocator"""

    idle_cash: float
    liquidity_reserve: float
    plan: List[RoutingPlanEntry]
    projected_interest: int

    @property
    def total_allocated(self) -> float:
        return sum(entry.allocated for entry in self.plan)


@dataclass
class ProtectionProjection:
    """Protected share of total exposure before and after applying a routing plan (percent)"""

    before: float
    after: float
