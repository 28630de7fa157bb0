"""Integration tests for API endpoints"""

import pytest
from fastapi.testclient import TestClient

from safebank_router.api.dependencies import get_catalog_provider, get_holdings_provider
from safebank_router.api.main import create_app
from safebank_router.domain.exceptions import CatalogSourceError, HoldingsSourceError

pytestmark = pytest.mark.integration


class FailingCatalogProvider:
    async def load(self):
        raise CatalogSourceError("KDIC API and CSV unavailable")


class FailingHoldingsProvider:
    async def load(self, catalog):
        raise HoldingsSourceError("MyData timeout")


def test_health_endpoint(client: TestClient):
    """Test health check endpoint"""
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json()["status"] == "ok"
    assert "X-Request-ID" in response.headers


def test_metrics_endpoint(client: TestClient):
    """Test Prometheus metrics endpoint"""
    client.get("/v1/coverage")
    response = client.get("/metrics")
    assert response.status_code == 200
    assert "safebank_coverage_reports_total" in response.text


def test_coverage_pre_policy(client: TestClient):
    """Test GET /v1/coverage with the 50M pre-policy cap"""
    response = client.get("/v1/coverage", params={"policy": "pre"})

    assert response.status_code == 200
    data = response.json()
    assert data["cap"] == 50_000_000
    assert data["totals"] == {
        "eligible": 118_000_000,
        "protected": 113_000_000,
        "excess": 5_000_000,
        "non_protected": 12_000_000,
        "tier1": 98_000_000,
        "tier2": 20_000_000,
    }
    kb = data["rows"][0]
    assert kb["license"] == "국민은행 라이선스"
    assert kb["tier"] == "tier-1"
    assert kb["excess"] == 5_000_000
    assert [h["id"] for h in kb["holdings"]] == ["P1", "P2"]


def test_coverage_defaults_to_post_policy(client: TestClient):
    data = client.get("/v1/coverage").json()

    assert data["cap"] == 100_000_000
    assert data["totals"]["excess"] == 0
    assert data["totals"]["protected"] == 118_000_000


def test_coverage_explicit_cap(client: TestClient):
    data = client.get("/v1/coverage", params={"cap": 20_000_000}).json()

    assert data["cap"] == 20_000_000
    for row in data["rows"]:
        assert row["protected"] + row["excess"] == row["eligible"]
        assert row["protected"] <= 20_000_000


def test_coverage_rejects_invalid_params(client: TestClient):
    assert client.get("/v1/coverage", params={"cap": 0}).status_code == 422
    assert client.get("/v1/coverage", params={"policy": "later"}).status_code == 422


def test_routing_endpoint(client: TestClient):
    """Test GET /v1/routing places idle demand cash at the best rate"""
    response = client.get("/v1/routing")

    assert response.status_code == 200
    data = response.json()
    assert data["idle_cash"] == 5_000_000
    assert data["liquidity_reserve"] == 10_000_000
    assert len(data["plan"]) == 1
    assert data["plan"][0]["institution"] == "저축은행C"
    assert data["plan"][0]["allocated"] == 5_000_000
    assert data["projected_interest"] == 195_000
    assert data["protection_ratio"]["before"] <= data["protection_ratio"]["after"]


def test_rates_endpoint_sorted(client: TestClient):
    offers = client.get("/v1/rates").json()["offers"]

    rates = [o["rate"] for o in offers]
    assert rates == sorted(rates, reverse=True)
    assert offers[0]["institution"] == "저축은행C"


def test_products_endpoint(client: TestClient):
    data = client.get("/v1/products").json()

    assert data["source"] == "csv"
    assert data["count"] == 5
    assert data["products"][0]["institution"] == "국민은행"


def test_holdings_endpoint(client: TestClient):
    data = client.get("/v1/holdings").json()

    assert [h["id"] for h in data] == ["P1", "P2", "P3", "P4", "P5", "N1"]
    assert data[4]["currency"] == "USD"


def test_catalog_failure_returns_503():
    app = create_app()
    app.dependency_overrides[get_catalog_provider] = lambda: FailingCatalogProvider()

    with TestClient(app) as client:
        assert client.get("/v1/coverage").status_code == 503
        assert client.get("/v1/products").status_code == 503


def test_holdings_failure_returns_503(client: TestClient):
    client.app.dependency_overrides[get_holdings_provider] = lambda: FailingHoldingsProvider()

    assert client.get("/v1/routing").status_code == 503
    assert client.get("/v1/holdings").status_code == 503
    # Catalog alone still loads
    assert client.get("/v1/products").status_code == 200


def test_request_id_is_propagated(client: TestClient):
    response = client.get("/v1/rates", headers={"X-Request-ID": "req-123"})
    assert response.headers["X-Request-ID"] == "req-123"


def test_coverage_compares_policy_presets(client: TestClient):
    """Test the response re-caps the same rows under both presets"""
    data = client.get("/v1/coverage", params={"cap": 20_000_000}).json()

    assert data["cap"] == 20_000_000
    assert data["policies"]["pre"]["cap"] == 50_000_000
    assert data["policies"]["pre"]["totals"]["excess"] == 5_000_000
    assert data["policies"]["post"]["cap"] == 100_000_000
    assert data["policies"]["post"]["totals"]["excess"] == 0
    assert data["policies"]["post"]["totals"]["protected"] == 118_000_000
    for preset in ("pre", "post"):
        assert data["policies"][preset]["totals"]["eligible"] == data["totals"]["eligible"]
