"""Fund routing allocator - greedy reallocation of idle cash into insured offers"""

from typing import Dict, Iterable, List, Sequence

from safebank_router.domain.classifier import (
    DEFAULT_FX_RATE,
    is_protected_category,
    to_reporting_currency,
)
from safebank_router.domain.models import (
    DEMAND,
    CoverageTotals,
    Holding,
    ProtectionProjection,
    RateOffer,
    RoutingPlanEntry,
    RoutingResult,
)
from safebank_router.utils.money import format_amount, round_half_up

LIQUIDITY_RESERVE = 10_000_000
PER_OFFER_CEILING = 60_000_000

DEFAULT_RATE_OFFERS: List[RateOffer] = [
    RateOffer("국민은행", "국민은행 라이선스", "정기예금 12M(복리)", 12, 0.033),
    RateOffer("신한은행", "신한은행 라이선스", "정기예금 6M(단리)", 6, 0.031),
    RateOffer("하나은행", "하나은행 라이선스", "정기예금 3M(단리)", 3, 0.029),
    RateOffer("농협은행", "농협은행 라이선스", "정기예금 12M(단리)", 12, 0.034),
    RateOffer("저축은행C", "저축은행C 라이선스", "정기예금 12M", 12, 0.039),
]


def bounded_allocation(remaining: float, room: float, ceiling: float) -> float:
    """Largest amount that respects cash left, license headroom and the per-offer ceiling"""
    return max(0, min(remaining, room, ceiling))


def rank_offers(offers: Iterable[RateOffer]) -> List[RateOffer]:
    """Offers by descending annual rate; equal rates keep their given order"""
    return sorted(offers, key=lambda o: o.rate, reverse=True)


def compute_idle_cash(
    holdings: Iterable[Holding],
    liquidity_reserve: float = LIQUIDITY_RESERVE,
    default_fx_rate: float = DEFAULT_FX_RATE,
) -> float:
    """Demand-account balance above the liquidity reserve"""
    demand_total = sum(
        to_reporting_currency(h, default_fx_rate) for h in holdings if h.category == DEMAND
    )
    return max(0, demand_total - liquidity_reserve)


def usage_by_license(
    holdings: Iterable[Holding], default_fx_rate: float = DEFAULT_FX_RATE
) -> Dict[str, float]:
    """Exposure per license across protectable categories, catalog match not required"""
    used: Dict[str, float] = {}
    for holding in holdings:
        if is_protected_category(holding.category):
            used[holding.license] = used.get(holding.license, 0) + to_reporting_currency(
                holding, default_fx_rate
            )
    return used


def compute_routing(
    cap: float,
    holdings: Sequence[Holding],
    offers: Iterable[RateOffer] = DEFAULT_RATE_OFFERS,
    liquidity_reserve: float = LIQUIDITY_RESERVE,
    per_offer_ceiling: float = PER_OFFER_CEILING,
    default_fx_rate: float = DEFAULT_FX_RATE,
) -> RoutingResult:
    """
    Build a rate-optimized plan for idle demand cash.

    Walks offers from highest rate down, placing as much as the three
    bounds allow (cash remaining, license headroom under the cap, and the
    per-offer ceiling). Licenses already at or over the cap are skipped
    without consuming cash.

    Projected interest is a simple pre-tax one-year estimate:
    sum(allocated * rate), no compounding.
    """
    idle_cash = compute_idle_cash(holdings, liquidity_reserve, default_fx_rate)
    used = usage_by_license(holdings, default_fx_rate)

    plan: List[RoutingPlanEntry] = []
    allocated_by_license: Dict[str, float] = {}
    remaining = idle_cash

    for offer in rank_offers(offers):
        if remaining <= 0:
            break

        already = allocated_by_license.get(offer.license, 0)
        room = max(0, cap - used.get(offer.license, 0) - already)
        if room <= 0:
            continue

        amount = bounded_allocation(remaining, room, per_offer_ceiling)
        if amount <= 0:
            continue

        plan.append(
            RoutingPlanEntry(
                institution=offer.institution,
                license=offer.license,
                product=offer.product,
                rate=offer.rate,
                term_months=offer.term_months,
                allocated=amount,
                reason=(
                    f"headroom {format_amount(room)} / rate {offer.rate * 100:.2f}%"
                    f" / term {offer.term_months}M"
                ),
            )
        )
        allocated_by_license[offer.license] = already + amount
        remaining -= amount

    projected_interest = round_half_up(sum(e.allocated * e.rate for e in plan))

    return RoutingResult(
        idle_cash=idle_cash,
        liquidity_reserve=liquidity_reserve,
        plan=plan,
        projected_interest=projected_interest,
    )


def project_protection_ratio(totals: CoverageTotals, routing: RoutingResult) -> ProtectionProjection:
    """
    Approximate protected share of total exposure before and after the plan.

    After-plan protected exposure adds the routed amount but never exceeds
    current eligible exposure. Percentages are rounded to one decimal.
    """
    exposure = totals.eligible + totals.non_protected
    if exposure <= 0:
        return ProtectionProjection(before=0.0, after=0.0)

    after_protected = min(totals.protected + routing.total_allocated, totals.eligible)
    return ProtectionProjection(
        before=round(totals.protected / exposure * 100, 1),
        after=round(after_protected / exposure * 100, 1),
    )
