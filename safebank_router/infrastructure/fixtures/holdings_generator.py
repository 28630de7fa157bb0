"""Mock holdings generator - demo accounts sampled from the insured catalog"""

import random
from typing import List, Sequence, Tuple

from safebank_router.domain.classifier import infer_category, infer_currency, license_for
from safebank_router.domain.models import (
    DEMAND,
    FX_DEPOSIT,
    INVESTMENT,
    REPORTING_CURRENCY,
    TERM,
    TRUST_PROTECTED,
    USD,
    CatalogEntry,
    Holding,
)

# Balance ranges (inclusive) per category
KRW_RANGES = {
    DEMAND: (2_000_000, 8_000_000),
    TERM: (10_000_000, 60_000_000),
    TRUST_PROTECTED: (8_000_000, 40_000_000),
    INVESTMENT: (5_000_000, 25_000_000),
}
USD_RANGE = (1_000, 20_000)
DEMO_FX_RATE = 1400.0

# Wrap/DLS products from securities firms; never in the insured catalog
NON_PROTECTED_PRODUCTS: List[Tuple[str, str]] = [
    ("메리츠증권", "메리츠 SMART 초단기 하이일드 랩 6M"),
    ("신한투자증권", "글로벌 테크 인컴랩 12M"),
    ("KB증권", "KB 해외채권 DLS 9M"),
]


class HoldingsGenerator:
    """Builds a randomized but plausible depositor portfolio"""

    def __init__(self, seed: int | None = None, fx_rate: float = DEMO_FX_RATE):
        self.rng = random.Random(seed)
        self.fx_rate = fx_rate

    def generate(
        self,
        catalog: Sequence[CatalogEntry],
        protected_count: int = 10,
        nonprotected_count: int = 2,
    ) -> List[Holding]:
        """Protected holdings drawn from the catalog followed by fixed investment products"""
        if not catalog:
            return []
        return self.protected_from_catalog(catalog, max(0, protected_count)) + self.non_protected(
            max(0, nonprotected_count)
        )

    def protected_from_catalog(self, catalog: Sequence[CatalogEntry], count: int) -> List[Holding]:
        holdings = []
        for i in range(count):
            entry = self.rng.choice(catalog)
            category = infer_category(entry.product_name)
            currency = infer_currency(entry.product_name)
            fx_rate = None
            term_months = None

            if category == FX_DEPOSIT or currency == USD:
                balance = self.rng.randint(*USD_RANGE)
                fx_rate = self.fx_rate
            elif category == TERM:
                balance = self.rng.randint(*KRW_RANGES[TERM])
                term_months = 12 if self.rng.random() > 0.5 else 6
            elif category == TRUST_PROTECTED:
                balance = self.rng.randint(*KRW_RANGES[TRUST_PROTECTED])
            else:
                balance = self.rng.randint(*KRW_RANGES[DEMAND])

            holdings.append(
                Holding(
                    holding_id=f"P{i + 1}",
                    institution=entry.institution,
                    license=license_for(entry.institution),
                    category=category,
                    currency=currency,
                    balance=balance,
                    fx_rate=fx_rate,
                    term_months=term_months,
                    product_name=entry.product_name,
                )
            )
        return holdings

    def non_protected(self, count: int) -> List[Holding]:
        holdings = []
        for i in range(count):
            institution, product_name = NON_PROTECTED_PRODUCTS[i % len(NON_PROTECTED_PRODUCTS)]
            holdings.append(
                Holding(
                    holding_id=f"N{i + 1}",
                    institution=institution,
                    license=license_for(institution),
                    category=INVESTMENT,
                    currency=REPORTING_CURRENCY,
                    balance=self.rng.randint(*KRW_RANGES[INVESTMENT]),
                    product_name=product_name,
                )
            )
        return holdings
