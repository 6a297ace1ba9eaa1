"""
Barcode Service

Combines product data from the food provider (Open Food Facts) and the
retail provider (UPCitemdb).

- Both providers are queried concurrently; a failing provider never
  cancels or blocks the other one.
- A combined lookup fails only when no provider returned the product.
- Batch lookups run every barcode concurrently and keep only the hits,
  in completion order.
- Single-source lookups are raw pass-throughs: provider errors propagate.
"""

import asyncio
import logging
from typing import Any, Callable, Dict, List, Optional, TypeVar

from pydantic import BaseModel, ValidationError

from barcode_api.core.constants import (
    FOOD_FIELDS,
    FOOD_PROVIDER,
    MAX_BATCH_SIZE,
    RETAIL_FIELDS,
    RETAIL_PROVIDER,
    SEARCH_SOURCE_FOOD,
    SEARCH_SOURCE_RETAIL,
)
from barcode_api.core.errors import BarcodeAPIError, InvalidInputError, NotFoundError, UpstreamError
from barcode_api.integrations.openfoodfacts import OpenFoodFactsClient
from barcode_api.integrations.upcitemdb import UPCItemDBClient
from barcode_api.schemas.barcode import (
    BatchItemsResponse,
    CombinedItemResponse,
    FoodData,
    LookupSources,
    RetailData,
)
from barcode_api.services.barcode_validation import validate_barcode, validate_barcode_batch
from barcode_api.services.error_logging import error_logger

logger = logging.getLogger(__name__)

ModelT = TypeVar("ModelT", bound=BaseModel)


def to_food_data(product: Dict[str, Any]) -> FoodData:
    """Map an Open Food Facts product to the combined foodData shape."""
    return FoodData(
        product_name=product.get("product_name"),
        quantity=product.get("quantity"),
        product_quantity=product.get("product_quantity"),
        product_quantity_unit=product.get("product_quantity_unit"),
        serving_quantity=product.get("serving_quantity"),
        serving_quantity_unit=product.get("serving_quantity_unit"),
        keywords=product.get("_keywords"),
    )


def to_retail_data(item: Dict[str, Any]) -> RetailData:
    """Map a UPCitemdb item to the combined retailData shape."""
    return RetailData(
        description=item.get("description"),
        brand=item.get("brand"),
        images=item.get("images"),
    )


class BarcodeService:
    """
    Aggregation coordinator over the two provider clients.

    The clients are injected so callers (and tests) choose the transport;
    the default constructor builds them from settings.
    """

    def __init__(
        self,
        food_client: Optional[OpenFoodFactsClient] = None,
        retail_client: Optional[UPCItemDBClient] = None,
    ):
        self.food_client = food_client or OpenFoodFactsClient()
        self.retail_client = retail_client or UPCItemDBClient()
        self.max_batch_size = MAX_BATCH_SIZE

    async def get_combined(self, barcode: str) -> CombinedItemResponse:
        """
        Get combined item information by barcode from both sources.

        Raises:
            InvalidInputError: malformed barcode (no provider is called)
            NotFoundError: neither provider returned the product
        """
        code = validate_barcode(barcode)
        return await self._lookup_combined(code)

    async def get_combined_batch(self, codes: Any) -> BatchItemsResponse:
        """
        Get multiple items by barcodes.

        Barcodes that no provider knows are dropped from items without
        per-item detail; compare total with requested to detect drops.

        Raises:
            InvalidInputError: malformed batch payload (no provider is called)
        """
        validated = validate_barcode_batch(codes, max_size=self.max_batch_size)

        items: List[CombinedItemResponse] = []

        async def collect(code: str) -> None:
            try:
                items.append(await self._lookup_combined(code))
            except NotFoundError:
                pass
            except Exception as e:
                # One broken entry must not fail the whole batch
                error_logger.log_error(e, severity="error", context={"barcode": code, "operation": "batch"})

        await asyncio.gather(*(collect(code) for code in validated))

        logger.info(f"[BarcodeService] Batch lookup: {len(items)}/{len(validated)} found")
        return BatchItemsResponse(items=items, total=len(items), requested=len(validated))

    async def get_food_only(self, barcode: str, fields: Optional[List[str]] = None) -> Dict[str, Any]:
        """Raw Open Food Facts data; provider errors propagate unchanged."""
        code = validate_barcode(barcode)
        return await self.food_client.fetch_by_barcode(code, fields=fields)

    async def get_retail_only(self, barcode: str, fields: Optional[List[str]] = None) -> Dict[str, Any]:
        """Raw UPCitemdb data; provider errors propagate unchanged."""
        code = validate_barcode(barcode)
        return await self.retail_client.lookup(code, fields=fields)

    async def search(self, query: str, source: str, page: int = 1, page_size: Optional[int] = None) -> Dict[str, Any]:
        """
        Keyword search against one provider, returned raw.

        Args:
            query: Search terms
            source: "food" or "retail"
            page: 1-based page number
            page_size: Results per page (provider default when None)
        """
        if not query or not query.strip():
            raise InvalidInputError("Search query is required")

        if source == SEARCH_SOURCE_FOOD:
            return await self.food_client.search_products(query.strip(), page=page, page_size=page_size or 20)
        if source == SEARCH_SOURCE_RETAIL:
            return await self.retail_client.search(query.strip(), page=page, page_size=page_size or 10)
        raise InvalidInputError(f"Unknown search source: {source}. Use '{SEARCH_SOURCE_FOOD}' or '{SEARCH_SOURCE_RETAIL}'")

    async def _lookup_combined(self, code: str) -> CombinedItemResponse:
        food_result, retail_result = await asyncio.gather(
            self.food_client.fetch_by_barcode(code, fields=FOOD_FIELDS),
            self.retail_client.lookup(code, fields=RETAIL_FIELDS),
            return_exceptions=True,
        )

        food_data = self._provider_data(FOOD_PROVIDER, code, food_result, to_food_data)
        retail_data = self._provider_data(RETAIL_PROVIDER, code, retail_result, to_retail_data)

        if food_data is None and retail_data is None:
            raise NotFoundError(f"Item with barcode {code} not found in any source")

        return CombinedItemResponse(
            barcode=code,
            food_data=food_data,
            retail_data=retail_data,
            sources=LookupSources(food_provider=food_data is not None, retail_provider=retail_data is not None),
        )

    def _provider_data(
        self,
        provider: str,
        code: str,
        result: Any,
        mapper: Callable[[Dict[str, Any]], ModelT],
    ) -> Optional[ModelT]:
        """Normalized data for one provider, or None when that provider failed."""
        if isinstance(result, BaseException):
            self._log_provider_failure(provider, code, result)
            return None
        try:
            return mapper(result)
        except ValidationError as e:
            error = UpstreamError(f"{provider} returned unexpected data: {e.error_count()} invalid field(s)", provider=provider)
            self._log_provider_failure(provider, code, error)
            return None

    @staticmethod
    def _log_provider_failure(provider: str, code: str, error: BaseException) -> None:
        if isinstance(error, asyncio.CancelledError):
            raise error
        if isinstance(error, NotFoundError):
            logger.info(f"[BarcodeService] {provider} data not available for {code}: {error}")
        elif isinstance(error, BarcodeAPIError):
            logger.warning(f"[BarcodeService] {provider} data not available for {code}: {error}")
        else:
            error_logger.log_error(
                error,
                severity="error",
                context={"barcode": code, "provider": provider},
            )
