"""Account classifier - fallback inference of category, currency and tier from names"""

import re
from typing import List, Tuple

from safebank_router.domain.models import (
    DEMAND,
    FX_DEPOSIT,
    PROTECTED_CATEGORIES,
    REPORTING_CURRENCY,
    TERM,
    TIER_1,
    TIER_2,
    TIER_OTHER,
    TRUST_PROTECTED,
    USD,
    Holding,
)
from safebank_router.utils.money import as_amount, round_half_up

DEFAULT_FX_RATE = 1400.0

_FX_PATTERN = re.compile(r"외화|달러|USD|미국달러", re.IGNORECASE)

# Checked in order: a maturity keyword wins over a passbook keyword in the same name
CATEGORY_RULES: List[Tuple[re.Pattern, str]] = [
    (re.compile(r"정기예금|예치|만기|적금|월복리|단리"), TERM),
    (re.compile(r"입출금|보통예금|보통|자유입출금|수시입출금|통장|급여|월급|체크"), DEMAND),
    (_FX_PATTERN, FX_DEPOSIT),
    (re.compile(r"금전신탁|원본보전|신탁"), TRUST_PROTECTED),
]

_TIER_2_PATTERN = re.compile(r"저축은행|상호저축|신협|수협|새마을금고|농축협|상호금융")
_BANK_PATTERN = re.compile(r"은행")
_SAVINGS_BANK_PATTERN = re.compile(r"저축은행")

LICENSE_SUFFIX = " 라이선스"


def infer_category(product_name: str | None) -> str:
    """Infer a holding category from its product name; defaults to demand"""
    name = product_name or ""
    for pattern, category in CATEGORY_RULES:
        if pattern.search(name):
            return category
    return DEMAND


def infer_currency(product_name: str | None) -> str:
    return USD if _FX_PATTERN.search(product_name or "") else REPORTING_CURRENCY


def is_protected_category(category: str) -> bool:
    """Investment products are never deposit-protected"""
    return category in PROTECTED_CATEGORIES


def classify_tier(institution: str | None) -> str:
    """
    Coarse institution tier from the institution name.

    - Savings banks, credit unions, fisheries/agricultural cooperatives and
      community credit cooperatives are tier-2
    - Other names containing "은행" (bank) are tier-1
    - Anything else (securities firms, insurers, unknown) is "other"

    Name-pattern heuristic only, not a regulatory classification.
    """
    name = institution or ""
    if _TIER_2_PATTERN.search(name):
        return TIER_2
    if _BANK_PATTERN.search(name) and not _SAVINGS_BANK_PATTERN.search(name):
        return TIER_1
    return TIER_OTHER


def license_for(institution: str) -> str:
    """Default protection-group key when a feed omits one"""
    return f"{institution}{LICENSE_SUFFIX}"


def to_reporting_currency(holding: Holding, default_fx_rate: float = DEFAULT_FX_RATE) -> float:
    """Convert a holding balance to KRW; USD uses the holding's rate or the demo rate"""
    balance = as_amount(holding.balance)
    if holding.currency == USD:
        fx_rate = as_amount(holding.fx_rate)
        if fx_rate <= 0:
            fx_rate = default_fx_rate
        return round_half_up(balance * fx_rate)
    return balance
