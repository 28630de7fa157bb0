"""KDIC insured-product API client with CSV fallback"""

import logging
from typing import Any, Dict, List, Tuple

import httpx

from safebank_router.config import settings
from safebank_router.domain.exceptions import CatalogSourceError
from safebank_router.domain.models import CatalogEntry
from safebank_router.infrastructure.observability.metrics import catalog_fallback_counter
from safebank_router.ingestion.catalog_csv import load_catalog_csv

logger = logging.getLogger(__name__)

# The open API has shipped three different JSON envelopes over time
_ENVELOPES = ("response", "getProductList202008", "getProductList")


def _as_list(items: Any) -> List[Dict[str, Any]]:
    if not items:
        return []
    return items if isinstance(items, list) else [items]


def extract_items(payload: Dict[str, Any]) -> List[Dict[str, Any]]:
    """
    Pull product items out of any known KDIC response envelope.

    Raises:
        CatalogSourceError: Unknown envelope or non-"00" result code
    """
    if not isinstance(payload, dict):
        raise CatalogSourceError(f"Unexpected KDIC payload type: {type(payload).__name__}")

    for root_key in _ENVELOPES:
        if root_key not in payload:
            continue
        root = payload[root_key] or {}
        if not isinstance(root, dict):
            raise CatalogSourceError(f"Malformed KDIC envelope: {root_key}")
        header = root.get("header") or {}
        if str(header.get("resultCode")) != "00":
            raise CatalogSourceError(
                f"KDIC API error {header.get('resultCode')} {header.get('resultMsg')}"
            )
        if root_key == "getProductList":
            return _as_list(root.get("item"))
        body = root.get("body") or {}
        items = body.get("items")
        return _as_list(items.get("item") if isinstance(items, dict) else items)

    raise CatalogSourceError(f"Unexpected KDIC JSON root keys: {list(payload.keys())}")


def item_to_entry(item: Dict[str, Any]) -> CatalogEntry | None:
    institution = str(item.get("fncIstNm") or "").strip()
    product_name = str(item.get("prdNm") or "").strip()
    if not institution or not product_name:
        return None
    return CatalogEntry(
        institution=institution,
        product_name=product_name,
        sale_end_date=item.get("prdSalDscnDt"),
        registered_date=item.get("regDate"),
    )


class KdicClient:
    """Client for the public KDIC insured-product list"""

    def __init__(
        self,
        service_key: str | None = None,
        base_url: str | None = None,
        timeout: float | None = None,
        page_size: int | None = None,
        max_pages: int | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.service_key = settings.kdic_service_key if service_key is None else service_key
        self.base_url = base_url or settings.kdic_product_url
        self.timeout = timeout or settings.http_timeout_seconds
        self.page_size = page_size or settings.kdic_page_size
        self.max_pages = max_pages or settings.kdic_max_pages
        self.transport = transport

    async def get_products(self) -> List[CatalogEntry]:
        """
        Fetch every insured product, page by page.

        Stops on an empty or short page, or after max_pages.

        Raises:
            CatalogSourceError: Missing key, timeout, HTTP errors, or invalid payload
        """
        if not self.service_key:
            raise CatalogSourceError("Missing KDIC service key")

        entries: List[CatalogEntry] = []
        async with httpx.AsyncClient(timeout=self.timeout, transport=self.transport) as client:
            for page_no in range(1, self.max_pages + 1):
                items = await self._fetch_page(client, page_no)
                entries.extend(e for e in map(item_to_entry, items) if e is not None)
                if len(items) < self.page_size:
                    break
        return entries

    async def _fetch_page(self, client: httpx.AsyncClient, page_no: int) -> List[Dict[str, Any]]:
        try:
            response = await client.get(
                self.base_url,
                params={
                    "pageNo": str(page_no),
                    "numOfRows": str(self.page_size),
                    "resultType": "json",
                    "ServiceKey": self.service_key,
                },
            )
            response.raise_for_status()
            return extract_items(response.json())

        except httpx.TimeoutException as e:
            raise CatalogSourceError(f"KDIC API timeout after {self.timeout}s") from e
        except httpx.HTTPStatusError as e:
            raise CatalogSourceError(f"KDIC API error: {e.response.status_code}") from e
        except httpx.RequestError as e:
            raise CatalogSourceError(f"KDIC API unreachable: {e}") from e
        except ValueError as e:
            raise CatalogSourceError(f"Invalid KDIC response: {e}") from e


class CatalogProvider:
    """Loads the insured catalog from the KDIC API, falling back to the CSV export"""

    def __init__(self, client: KdicClient | None = None, csv_path: str | None = None):
        self.client = client or KdicClient()
        self.csv_path = csv_path or settings.catalog_csv_path

    async def load(self) -> Tuple[List[CatalogEntry], str]:
        """
        Returns:
            (entries, source) where source is "api" or "csv"

        Raises:
            CatalogSourceError: Both the API and the CSV are unavailable
        """
        if self.client.service_key:
            try:
                return await self.client.get_products(), "api"
            except CatalogSourceError as e:
                catalog_fallback_counter.inc()
                logger.warning(f"KDIC API unavailable, using CSV export: {e}")
        return load_catalog_csv(self.csv_path), "csv"
