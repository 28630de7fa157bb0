"""Coverage aggregation engine - per-license protection exposure under a deposit cap"""

from dataclasses import replace
from typing import Callable, Dict, Iterable, List

from safebank_router.domain.catalog import CatalogIndex
from safebank_router.domain.classifier import (
    DEFAULT_FX_RATE,
    classify_tier,
    is_protected_category,
    to_reporting_currency,
)
from safebank_router.domain.models import (
    TIER_1,
    TIER_2,
    CoverageReport,
    CoverageRow,
    CoverageTotals,
    Holding,
)


def aggregate_coverage(
    catalog: CatalogIndex,
    holdings: Iterable[Holding],
    cap: float,
    tier_classifier: Callable[[str], str] = classify_tier,
    default_fx_rate: float = DEFAULT_FX_RATE,
) -> CoverageReport:
    """
    Group holdings by license and split exposure into protected buckets.

    Requirements:
    - First holding seen for a license sets the row's institution and tier
    - A holding is eligible only if its category is protectable AND the
      (institution, product) pair is in the insured catalog; everything
      else lands in non_protected
    - Product names are recorded once per row regardless of eligibility
    - protected = min(eligible, cap), excess = max(0, eligible - cap)

    Args:
        catalog: Insured-product index
        holdings: Holdings in feed order (grouping is first-seen)
        cap: Per-license protection limit in KRW
        tier_classifier: Institution name -> tier
        default_fx_rate: USD rate for holdings without one

    Returns:
        CoverageReport with rows in first-seen license order and totals
    """
    by_license: Dict[str, CoverageRow] = {}

    for holding in holdings:
        row = by_license.get(holding.license)
        if row is None:
            row = CoverageRow(
                license=holding.license,
                institution=holding.institution,
                tier=tier_classifier(holding.institution),
            )
            by_license[holding.license] = row

        row.holdings.append(holding)
        if holding.product_name and holding.product_name not in row.products:
            row.products.append(holding.product_name)

        amount = to_reporting_currency(holding, default_fx_rate)
        matched = catalog.contains(holding.institution, holding.product_name or "")

        if is_protected_category(holding.category) and matched:
            row.eligible += amount
        else:
            row.non_protected += amount

    rows = list(by_license.values())
    for row in rows:
        _apply_cap(row, cap)

    return CoverageReport(rows=rows, totals=summarize_rows(rows))


def apply_coverage_limit(rows: Iterable[CoverageRow], cap: float) -> CoverageReport:
    """
    Re-derive protected/excess for already-aggregated rows under a different cap.

    Used to compare the pre- and post-policy limits without re-matching
    holdings against the catalog. Input rows are left untouched.
    """
    capped: List[CoverageRow] = []
    for row in rows:
        clone = replace(row, products=list(row.products), holdings=list(row.holdings))
        _apply_cap(clone, cap)
        capped.append(clone)
    return CoverageReport(rows=capped, totals=summarize_rows(capped))


def summarize_rows(rows: Iterable[CoverageRow]) -> CoverageTotals:
    """Roll up row totals plus tier-1/tier-2 eligible subtotals"""
    totals = CoverageTotals()
    for row in rows:
        totals.eligible += row.eligible
        totals.protected += row.protected
        totals.excess += row.excess
        totals.non_protected += row.non_protected
        if row.tier == TIER_1:
            totals.tier1 += row.eligible
        elif row.tier == TIER_2:
            totals.tier2 += row.eligible
    return totals


def _apply_cap(row: CoverageRow, cap: float) -> None:
    row.protected = min(row.eligible, cap)
    row.excess = max(0, row.eligible - cap)
