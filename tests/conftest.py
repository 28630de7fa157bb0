"""Pytest fixtures for testing"""

import pytest
from typing import List, Tuple
from fastapi.testclient import TestClient

from safebank_router.api.main import create_app
from safebank_router.api.dependencies import get_catalog_provider, get_holdings_provider
from safebank_router.domain.catalog import CatalogIndex
from safebank_router.domain.models import CatalogEntry, Holding


def make_holding(
    holding_id: str = "H1",
    institution: str = "국민은행",
    category: str = "demand",
    balance: float = 1_000_000,
    product_name: str | None = "KB국민ONE통장",
    currency: str = "KRW",
    license: str | None = None,
    fx_rate: float | None = None,
    term_months: int | None = None,
) -> Holding:
    """Build a holding with sensible defaults"""
    return Holding(
        holding_id=holding_id,
        institution=institution,
        license=license or f"{institution} 라이선스",
        category=category,
        currency=currency,
        balance=balance,
        fx_rate=fx_rate,
        term_months=term_months,
        product_name=product_name,
    )


class FakeCatalogProvider:
    def __init__(self, entries: List[CatalogEntry], source: str = "csv"):
        self.entries = entries
        self.source = source

    async def load(self) -> Tuple[List[CatalogEntry], str]:
        return self.entries, self.source


class FakeHoldingsProvider:
    def __init__(self, holdings: List[Holding]):
        self.holdings = holdings

    async def load(self, catalog) -> List[Holding]:
        return self.holdings


@pytest.fixture
def catalog_entries() -> List[CatalogEntry]:
    """Small insured catalog"""
    return [
        CatalogEntry("국민은행", "KB Star 정기예금"),
        CatalogEntry("국민은행", "KB국민ONE통장"),
        CatalogEntry("신한은행", "쏠편한 정기예금"),
        CatalogEntry("저축은행C", "정기예금 12M"),
        CatalogEntry("농협은행", "NH 외화보통예금(USD)"),
    ]


@pytest.fixture
def catalog_index(catalog_entries: List[CatalogEntry]) -> CatalogIndex:
    return CatalogIndex.from_entries(catalog_entries)


@pytest.fixture
def sample_holdings() -> List[Holding]:
    """Portfolio spanning tier-1, tier-2, FX and an investment product"""
    return [
        make_holding("P1", "국민은행", "term", 40_000_000, "KB Star 정기예금", term_months=12),
        make_holding("P2", "국민은행", "demand", 15_000_000, "KB국민ONE통장"),
        make_holding("P3", "신한은행", "term", 30_000_000, "쏠편한 정기예금", term_months=6),
        make_holding("P4", "저축은행C", "term", 20_000_000, "정기예금 12M", term_months=12),
        make_holding(
            "P5", "농협은행", "fx_deposit", 10_000, "NH 외화보통예금(USD)", currency="USD", fx_rate=1300
        ),
        make_holding("N1", "메리츠증권", "investment", 12_000_000, "메리츠 SMART 초단기 하이일드 랩 6M"),
    ]


@pytest.fixture
def client(catalog_entries: List[CatalogEntry], sample_holdings: List[Holding]) -> TestClient:
    """Create FastAPI test client with in-memory catalog and holdings"""
    app = create_app()
    app.dependency_overrides[get_catalog_provider] = lambda: FakeCatalogProvider(catalog_entries)
    app.dependency_overrides[get_holdings_provider] = lambda: FakeHoldingsProvider(sample_holdings)
    return TestClient(app)


@pytest.fixture
def holding_factory():
    """Factory for ad-hoc holdings in individual tests"""
    return make_holding
