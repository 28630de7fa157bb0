"""MyData holdings API HTTP client"""

from typing import Any, Dict, List, Sequence

import httpx

from safebank_router.config import settings
from safebank_router.domain.exceptions import HoldingsSourceError
from safebank_router.domain.models import CatalogEntry, Holding
from safebank_router.infrastructure.fixtures.holdings_generator import HoldingsGenerator
from safebank_router.ingestion.holdings import parse_holdings


class MyDataClient:
    """Client for an external account-aggregation feed"""

    def __init__(
        self,
        base_url: str | None = None,
        timeout: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.base_url = base_url or settings.holdings_api_url
        self.timeout = timeout or settings.http_timeout_seconds
        self.transport = transport

    async def get_accounts(self) -> List[Dict[str, Any]]:
        """
        Fetch raw account rows. The feed answers with either a bare list or
        {"accounts": [...]}; anything else yields no rows.

        Raises:
            HoldingsSourceError: On timeout, HTTP errors, or a non-JSON response
        """
        if not self.base_url:
            return []

        async with httpx.AsyncClient(timeout=self.timeout, transport=self.transport) as client:
            try:
                response = await client.get(self.base_url, headers={"accept": "application/json"})
                response.raise_for_status()
                data = response.json()

            except httpx.TimeoutException as e:
                raise HoldingsSourceError(f"Holdings API timeout after {self.timeout}s") from e
            except httpx.HTTPStatusError as e:
                raise HoldingsSourceError(f"Holdings API error: {e.response.status_code}") from e
            except httpx.RequestError as e:
                raise HoldingsSourceError(f"Holdings API unreachable: {e}") from e
            except ValueError as e:
                raise HoldingsSourceError(f"Invalid holdings response: {e}") from e

        if isinstance(data, list):
            return data
        if isinstance(data, dict) and isinstance(data.get("accounts"), list):
            return data["accounts"]
        return []


class HoldingsProvider:
    """Supplies validated holdings from the mock generator or the MyData feed"""

    def __init__(
        self,
        client: MyDataClient | None = None,
        generator: HoldingsGenerator | None = None,
        use_mock: bool | None = None,
    ):
        self.client = client or MyDataClient()
        self.generator = generator or HoldingsGenerator(seed=settings.mock_seed, fx_rate=settings.default_fx_rate)
        self.use_mock = settings.use_mock_holdings if use_mock is None else use_mock

    async def load(self, catalog: Sequence[CatalogEntry]) -> List[Holding]:
        """
        Raises:
            HoldingsSourceError: External feed failed (mock mode never raises)
        """
        if self.use_mock:
            return self.generator.generate(
                catalog,
                protected_count=settings.mock_protected_count,
                nonprotected_count=settings.mock_nonprotected_count,
            )
        return parse_holdings(await self.client.get_accounts())
