"""
UPCitemdb API HTTP Client

Async HTTP client for the UPCitemdb retail product database.
Without an API key requests go to the rate-limited trial tier; with
UPCITEMDB_API_KEY set, the key is sent as a bearer token.

API Documentation: https://www.upcitemdb.com/api/explorer
"""

import asyncio
import logging

import httpx
from typing import Dict, Any, List, Optional

from barcode_api.core.config import settings
from barcode_api.core.constants import RETAIL_PROVIDER
from barcode_api.core.errors import NotFoundError, RateLimitedError, UpstreamError, UpstreamTimeoutError

logger = logging.getLogger(__name__)


def _upstream_message(response: httpx.Response) -> str:
    """Error message from a UPCitemdb error body, falling back to the HTTP reason."""
    try:
        data = response.json()
    except ValueError:
        data = None
    if isinstance(data, dict) and data.get("message"):
        return str(data["message"])
    return f"HTTP {response.status_code} {response.reason_phrase}".strip()


class UPCItemDBClient:
    """
    HTTP client for UPCitemdb API integration.

    Attributes:
        base_url (str): API root including the tier path (e.g. /prod/trial)
        api_key (str): Optional bearer credential
    """

    def __init__(
        self,
        base_url: Optional[str] = None,
        api_key: Optional[str] = None,
        timeout: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.base_url = (base_url or settings.RETAIL_PROVIDER_BASE_URL).rstrip("/")
        self.api_key = settings.UPCITEMDB_API_KEY if api_key is None else api_key
        self.timeout = timeout if timeout is not None else settings.PROVIDER_TIMEOUT
        self._transport = transport

    @property
    def headers(self) -> Dict[str, str]:
        """
        HTTP headers for UPCitemdb requests.

        The Authorization header is only present when an API key is configured.
        """
        headers = {
            "Content-Type": "application/json",
            "User-Agent": settings.USER_AGENT,
        }
        if self.api_key:
            headers["Authorization"] = f"Bearer {self.api_key}"
        return headers

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(timeout=self.timeout, transport=self._transport)

    async def _request(self, path: str, params: Dict[str, Any]) -> httpx.Response:
        async with self._client() as client:
            return await client.get(f"{self.base_url}{path}", params=params, headers=self.headers)

    async def _get(self, path: str, params: Dict[str, Any], action: str) -> httpx.Response:
        try:
            # httpx timeouts are per phase; wait_for caps the whole call
            response = await asyncio.wait_for(self._request(path, params), timeout=self.timeout)
        except (httpx.TimeoutException, asyncio.TimeoutError):
            raise UpstreamTimeoutError(
                f"UPCItemDB {action} error: timeout after {self.timeout}s",
                provider=RETAIL_PROVIDER,
            )
        except httpx.HTTPError as e:
            raise UpstreamError(f"UPCItemDB {action} error: {e}", provider=RETAIL_PROVIDER)

        if response.status_code == 429:
            logger.warning(f"[UPCItemDB] Rate limit exceeded ({action})")
            raise RateLimitedError(
                "UPCItemDB API rate limit exceeded. Please try again later.",
                provider=RETAIL_PROVIDER,
                upstream_status=429,
            )
        return response

    async def lookup(self, barcode: str, fields: Optional[List[str]] = None) -> Dict[str, Any]:
        """
        Look up a product by UPC/EAN/GTIN.

        Args:
            barcode: The barcode to look up
            fields: Optional list of item fields to keep. Fields missing upstream
                are omitted, never defaulted.

        Returns:
            dict with "barcode" plus the first matching item's fields

        Raises:
            NotFoundError: empty items list or HTTP 404
            RateLimitedError: HTTP 429
            UpstreamTimeoutError: no answer within the timeout
            UpstreamError: any other HTTP or network failure, or an unexpected payload
        """
        response = await self._get("/lookup", {"upc": barcode}, "API")

        if response.status_code == 404:
            raise NotFoundError(f"Product not found in UPCItemDB: {barcode}")

        if response.status_code != 200:
            raise UpstreamError(
                f"UPCItemDB API error: {_upstream_message(response)}",
                provider=RETAIL_PROVIDER,
                upstream_status=response.status_code,
            )

        try:
            data = response.json()
        except ValueError:
            raise UpstreamError("UPCItemDB API error: invalid JSON response", provider=RETAIL_PROVIDER)

        if not isinstance(data, dict):
            raise UpstreamError("UPCItemDB API error: unexpected response shape", provider=RETAIL_PROVIDER)

        items = data.get("items")
        if not items:
            raise NotFoundError(f"Product not found in UPCItemDB: {barcode}")
        if not isinstance(items, list) or not isinstance(items[0], dict):
            raise UpstreamError("UPCItemDB API error: items is not a list of objects", provider=RETAIL_PROVIDER)

        product = items[0]
        if fields:
            product = {field: product[field] for field in fields if field in product}

        logger.debug(f"[UPCItemDB] Found {barcode} ({len(product)} fields)")
        return {**product, "barcode": barcode}

    async def search(self, query: str, page: int = 1, page_size: int = 10) -> Dict[str, Any]:
        """
        Search for products by keyword.

        Returns the raw UPCitemdb search payload (code, total, offset, items).
        """
        params = {
            "s": query,
            "match_mode": 0,
            "type": "product",
            "page": page,
            "page_size": page_size,
        }
        response = await self._get("/search", params, "search")

        if response.status_code != 200:
            raise UpstreamError(
                f"UPCItemDB search error: {_upstream_message(response)}",
                provider=RETAIL_PROVIDER,
                upstream_status=response.status_code,
            )

        try:
            return response.json()
        except ValueError:
            raise UpstreamError("UPCItemDB search error: invalid JSON response", provider=RETAIL_PROVIDER)
