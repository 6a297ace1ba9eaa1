"""
Open Food Facts API HTTP Client

This module provides an async HTTP client for interacting with Open Food Facts API.
Open Food Facts is a free, open, collaborative database of food products from around the world.

API Documentation: https://wiki.openfoodfacts.org/API
"""

import asyncio
import logging

import httpx
from typing import Dict, Any, List, Optional

from barcode_api.core.config import settings
from barcode_api.core.constants import FOOD_PROVIDER
from barcode_api.core.errors import NotFoundError, UpstreamError, UpstreamTimeoutError

logger = logging.getLogger(__name__)


class OpenFoodFactsClient:
    """
    HTTP client for Open Food Facts API integration.

    Open Food Facts is a public database - no API key required.
    One attempt per call, no retries. The client holds no per-request state
    and can be shared by concurrent lookups.

    Methods:
        fetch_by_barcode: Look up a product by barcode, optionally restricted to some fields
        search_products: Full-text product search
    """

    def __init__(
        self,
        base_url: Optional[str] = None,
        timeout: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """
        Args:
            base_url: API root, defaults to settings.FOOD_PROVIDER_BASE_URL
            timeout: Seconds before a call is abandoned, defaults to settings.PROVIDER_TIMEOUT
            transport: Optional httpx transport (tests inject httpx.MockTransport)
        """
        self.base_url = (base_url or settings.FOOD_PROVIDER_BASE_URL).rstrip("/")
        self.timeout = timeout if timeout is not None else settings.PROVIDER_TIMEOUT
        self._transport = transport

    @property
    def headers(self) -> Dict[str, str]:
        return {"User-Agent": settings.USER_AGENT}

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(timeout=self.timeout, transport=self._transport)

    async def _request(self, url: str, params: Dict[str, Any]) -> httpx.Response:
        async with self._client() as client:
            return await client.get(url, params=params, headers=self.headers)

    async def _get(self, url: str, params: Dict[str, Any]) -> httpx.Response:
        # httpx timeouts are per phase; wait_for caps the whole call
        return await asyncio.wait_for(self._request(url, params), timeout=self.timeout)

    async def fetch_by_barcode(self, barcode: str, fields: Optional[List[str]] = None) -> Dict[str, Any]:
        """
        Look up a product by barcode in Open Food Facts.

        Args:
            barcode: The barcode to look up (EAN-13, UPC-A, etc.)
            fields: Optional list of product fields. When given, only those
                fields are requested and returned; fields missing upstream
                are omitted, never defaulted.

        Returns:
            dict with "barcode" plus the product fields

        Raises:
            NotFoundError: status 0, missing product or HTTP 404
            UpstreamTimeoutError: no answer within the timeout
            UpstreamError: any other HTTP or network failure, or an unexpected payload
        """
        params = {}
        if fields:
            params["fields"] = ",".join(fields)

        try:
            response = await self._get(f"{self.base_url}/product/{barcode}", params)
        except (httpx.TimeoutException, asyncio.TimeoutError):
            raise UpstreamTimeoutError(
                f"OpenFoodFacts API error: timeout after {self.timeout}s",
                provider=FOOD_PROVIDER,
            )
        except httpx.HTTPError as e:
            raise UpstreamError(f"OpenFoodFacts API error: {e}", provider=FOOD_PROVIDER)

        if response.status_code == 404:
            raise NotFoundError(f"Product not found in OpenFoodFacts: {barcode}")

        if response.status_code != 200:
            raise UpstreamError(
                f"OpenFoodFacts API error: HTTP {response.status_code}",
                provider=FOOD_PROVIDER,
                upstream_status=response.status_code,
            )

        try:
            data = response.json()
        except ValueError:
            raise UpstreamError("OpenFoodFacts API error: invalid JSON response", provider=FOOD_PROVIDER)

        if not isinstance(data, dict):
            raise UpstreamError("OpenFoodFacts API error: unexpected response shape", provider=FOOD_PROVIDER)

        product = data.get("product")
        if data.get("status") == 0 or not product:
            raise NotFoundError(f"Product not found in OpenFoodFacts: {barcode}")
        if not isinstance(product, dict):
            raise UpstreamError("OpenFoodFacts API error: product is not an object", provider=FOOD_PROVIDER)

        if fields:
            product = {field: product[field] for field in fields if field in product}

        logger.debug(f"[OpenFoodFacts] Found {barcode} ({len(product)} fields)")
        return {**product, "barcode": barcode}

    async def search_products(self, query: str, page: int = 1, page_size: int = 20) -> Dict[str, Any]:
        """
        Search for products by name or brand.

        Returns the raw Open Food Facts search payload.
        """
        try:
            response = await self._get(
                f"{self.base_url}/search",
                {"search_terms": query, "page": page, "page_size": page_size},
            )
            response.raise_for_status()
            return response.json()
        except (httpx.TimeoutException, asyncio.TimeoutError):
            raise UpstreamTimeoutError(
                f"OpenFoodFacts search error: timeout after {self.timeout}s",
                provider=FOOD_PROVIDER,
            )
        except httpx.HTTPStatusError as e:
            raise UpstreamError(
                f"OpenFoodFacts search error: HTTP {e.response.status_code}",
                provider=FOOD_PROVIDER,
                upstream_status=e.response.status_code,
            )
        except (httpx.HTTPError, ValueError) as e:
            raise UpstreamError(f"OpenFoodFacts search error: {e}", provider=FOOD_PROVIDER)
