"""Unit tests for BarcodeService (aggregation coordinator).

Provider clients are AsyncMocks; barcodes in KNOWN are found, everything
else raises the failure configured per test.
"""

import asyncio
from typing import Any, Dict
from unittest.mock import AsyncMock, MagicMock

import pytest

from barcode_api.core.constants import FOOD_FIELDS, RETAIL_FIELDS
from barcode_api.core.errors import (
    InvalidInputError,
    NotFoundError,
    RateLimitedError,
    UpstreamError,
    UpstreamTimeoutError,
)
from barcode_api.services.barcode_service import BarcodeService

NUTELLA = "3017620422003"
UNKNOWN = "00000000"


@pytest.fixture
def food_client(off_product: Dict[str, Any]) -> MagicMock:
    client = MagicMock()

    async def fetch_by_barcode(barcode, fields=None):
        if barcode == NUTELLA:
            return {"barcode": barcode, **{k: v for k, v in off_product.items() if k in fields}}
        raise NotFoundError(f"Product not found in OpenFoodFacts: {barcode}")

    client.fetch_by_barcode = AsyncMock(side_effect=fetch_by_barcode)
    client.search_products = AsyncMock(return_value={"products": []})
    return client


@pytest.fixture
def retail_client(upc_item: Dict[str, Any]) -> MagicMock:
    client = MagicMock()

    async def lookup(barcode, fields=None):
        if barcode == NUTELLA:
            return {"barcode": barcode, **{k: v for k, v in upc_item.items() if k in fields}}
        raise NotFoundError(f"Product not found in UPCItemDB: {barcode}")

    client.lookup = AsyncMock(side_effect=lookup)
    client.search = AsyncMock(return_value={"items": []})
    return client


@pytest.fixture
def service(food_client: MagicMock, retail_client: MagicMock) -> BarcodeService:
    return BarcodeService(food_client=food_client, retail_client=retail_client)


class TestGetCombined:

    @pytest.mark.asyncio
    async def test_both_providers_succeed(self, service: BarcodeService) -> None:
        result = await service.get_combined(NUTELLA)

        assert result.barcode == NUTELLA
        assert result.sources.food_provider is True
        assert result.sources.retail_provider is True
        assert result.food_data.product_name == "Nutella"
        assert result.food_data.keywords == ["nutella", "ferrero", "pate-a-tartiner"]
        assert result.food_data.serving_quantity_unit == "g"
        assert result.retail_data.brand == "Ferrero"
        assert result.retail_data.images == ["https://img.test/nutella.jpg"]

    @pytest.mark.asyncio
    async def test_requests_curated_fields(
        self, service: BarcodeService, food_client: MagicMock, retail_client: MagicMock
    ) -> None:
        await service.get_combined(NUTELLA)

        food_client.fetch_by_barcode.assert_awaited_once_with(NUTELLA, fields=FOOD_FIELDS)
        retail_client.lookup.assert_awaited_once_with(NUTELLA, fields=RETAIL_FIELDS)

    @pytest.mark.asyncio
    async def test_trims_before_lookup(self, service: BarcodeService, food_client: MagicMock) -> None:
        result = await service.get_combined(f"  {NUTELLA} ")

        assert result.barcode == NUTELLA
        food_client.fetch_by_barcode.assert_awaited_once_with(NUTELLA, fields=FOOD_FIELDS)

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "error",
        [
            NotFoundError("nope"),
            UpstreamError("boom", provider="UPCItemDB"),
            UpstreamTimeoutError("slow", provider="UPCItemDB"),
            RateLimitedError("slow down", provider="UPCItemDB"),
        ],
    )
    async def test_food_only_when_retail_fails(
        self, service: BarcodeService, retail_client: MagicMock, error: Exception
    ) -> None:
        retail_client.lookup.side_effect = error

        result = await service.get_combined(NUTELLA)

        assert result.sources.food_provider is True
        assert result.sources.retail_provider is False
        assert result.food_data.product_name == "Nutella"
        assert result.retail_data is None

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "error",
        [NotFoundError("nope"), UpstreamTimeoutError("slow", provider="OpenFoodFacts"), RuntimeError("bug")],
    )
    async def test_retail_only_when_food_fails(
        self, service: BarcodeService, food_client: MagicMock, error: Exception
    ) -> None:
        food_client.fetch_by_barcode.side_effect = error

        result = await service.get_combined(NUTELLA)

        assert result.sources.food_provider is False
        assert result.sources.retail_provider is True
        assert result.food_data is None
        assert result.retail_data.description == "Hazelnut spread with cocoa"

    @pytest.mark.asyncio
    async def test_mistyped_food_payload_keeps_retail(self, service: BarcodeService, food_client: MagicMock) -> None:
        food_client.fetch_by_barcode.side_effect = None
        food_client.fetch_by_barcode.return_value = {"barcode": NUTELLA, "product_name": 123}

        result = await service.get_combined(NUTELLA)

        assert result.sources.food_provider is False
        assert result.sources.retail_provider is True
        assert result.food_data is None
        assert result.retail_data.brand == "Ferrero"

    @pytest.mark.asyncio
    async def test_mistyped_retail_payload_keeps_food(self, service: BarcodeService, retail_client: MagicMock) -> None:
        retail_client.lookup.side_effect = None
        retail_client.lookup.return_value = {"barcode": NUTELLA, "images": "not-a-list"}

        result = await service.get_combined(NUTELLA)

        assert result.sources.food_provider is True
        assert result.sources.retail_provider is False
        assert result.retail_data is None

    @pytest.mark.asyncio
    async def test_both_payloads_mistyped_is_not_found(
        self, service: BarcodeService, food_client: MagicMock, retail_client: MagicMock
    ) -> None:
        food_client.fetch_by_barcode.side_effect = None
        food_client.fetch_by_barcode.return_value = {"barcode": NUTELLA, "quantity": ["400 g"]}
        retail_client.lookup.side_effect = None
        retail_client.lookup.return_value = {"barcode": NUTELLA, "brand": {"name": "Ferrero"}}

        with pytest.raises(NotFoundError):
            await service.get_combined(NUTELLA)

    @pytest.mark.asyncio
    async def test_unknown_barcode_is_not_found(self, service: BarcodeService) -> None:
        with pytest.raises(NotFoundError, match="not found in any source"):
            await service.get_combined(UNKNOWN)

    @pytest.mark.asyncio
    async def test_both_upstream_errors_is_not_found(
        self, service: BarcodeService, food_client: MagicMock, retail_client: MagicMock
    ) -> None:
        food_client.fetch_by_barcode.side_effect = UpstreamError("down", provider="OpenFoodFacts")
        retail_client.lookup.side_effect = RateLimitedError("slow down", provider="UPCItemDB")

        with pytest.raises(NotFoundError):
            await service.get_combined(NUTELLA)

    @pytest.mark.asyncio
    async def test_invalid_barcode_makes_no_calls(
        self, service: BarcodeService, food_client: MagicMock, retail_client: MagicMock
    ) -> None:
        with pytest.raises(InvalidInputError):
            await service.get_combined("abc123")

        assert food_client.fetch_by_barcode.await_count == 0
        assert retail_client.lookup.await_count == 0

    @pytest.mark.asyncio
    async def test_providers_run_concurrently(self, food_client: MagicMock, retail_client: MagicMock) -> None:
        # Each provider waits for the other to start: a sequential
        # implementation would deadlock and hit the wait_for timeout.
        food_started = asyncio.Event()
        retail_started = asyncio.Event()

        async def slow_food(barcode, fields=None):
            food_started.set()
            await retail_started.wait()
            raise UpstreamTimeoutError("slow", provider="OpenFoodFacts")

        async def slow_retail(barcode, fields=None):
            retail_started.set()
            await food_started.wait()
            return {"barcode": barcode, "brand": "Ferrero"}

        food_client.fetch_by_barcode.side_effect = slow_food
        retail_client.lookup.side_effect = slow_retail
        service = BarcodeService(food_client=food_client, retail_client=retail_client)

        result = await asyncio.wait_for(service.get_combined(NUTELLA), timeout=2)

        assert result.sources.retail_provider is True
        assert result.sources.food_provider is False


class TestGetCombinedBatch:

    @pytest.mark.asyncio
    async def test_drops_unknown_barcodes(self, service: BarcodeService) -> None:
        result = await service.get_combined_batch([NUTELLA, "000000000000"])

        assert len(result.items) == 1
        assert result.total == 1
        assert result.requested == 2
        assert result.items[0].barcode == NUTELLA

    @pytest.mark.asyncio
    async def test_total_matches_items(self, service: BarcodeService) -> None:
        codes = [NUTELLA, UNKNOWN, NUTELLA, "12345678901234"]

        result = await service.get_combined_batch(codes)

        assert result.total == len(result.items) == 2
        assert len(result.items) <= result.total <= result.requested == 4
        assert all(item.sources.food_provider or item.sources.retail_provider for item in result.items)

    @pytest.mark.asyncio
    async def test_empty_batch_rejected(self, service: BarcodeService, food_client: MagicMock) -> None:
        with pytest.raises(InvalidInputError):
            await service.get_combined_batch([])
        assert food_client.fetch_by_barcode.await_count == 0

    @pytest.mark.asyncio
    async def test_101_codes_rejected(self, service: BarcodeService, food_client: MagicMock) -> None:
        with pytest.raises(InvalidInputError):
            await service.get_combined_batch([NUTELLA] * 101)
        assert food_client.fetch_by_barcode.await_count == 0

    @pytest.mark.asyncio
    async def test_100_codes_accepted(self, service: BarcodeService, food_client: MagicMock) -> None:
        result = await service.get_combined_batch([NUTELLA] * 100)

        assert result.requested == 100
        assert result.total == 100
        assert food_client.fetch_by_barcode.await_count == 100

    @pytest.mark.asyncio
    async def test_invalid_element_rejects_whole_batch(self, service: BarcodeService, food_client: MagicMock) -> None:
        with pytest.raises(InvalidInputError, match="abc123"):
            await service.get_combined_batch([NUTELLA, "abc123"])
        assert food_client.fetch_by_barcode.await_count == 0

    @pytest.mark.asyncio
    async def test_mistyped_food_payload_still_counts_retail_hit(
        self, service: BarcodeService, food_client: MagicMock
    ) -> None:
        food_client.fetch_by_barcode.side_effect = None
        food_client.fetch_by_barcode.return_value = {"barcode": NUTELLA, "product_name": 123}

        result = await service.get_combined_batch([NUTELLA])

        assert result.total == 1
        assert result.items[0].sources.food_provider is False
        assert result.items[0].sources.retail_provider is True

    @pytest.mark.asyncio
    async def test_batch_ceiling_ignores_environment(
        self, food_client: MagicMock, retail_client: MagicMock, monkeypatch
    ) -> None:
        monkeypatch.setenv("MAX_BATCH_SIZE", "500")
        service = BarcodeService(food_client=food_client, retail_client=retail_client)

        with pytest.raises(InvalidInputError, match="more than 100"):
            await service.get_combined_batch([NUTELLA] * 101)
        assert food_client.fetch_by_barcode.await_count == 0

    @pytest.mark.asyncio
    async def test_all_unknown_returns_empty_items(self, service: BarcodeService) -> None:
        result = await service.get_combined_batch([UNKNOWN, "000000000000"])

        assert result.items == []
        assert result.total == 0
        assert result.requested == 2


class TestSingleSource:

    @pytest.mark.asyncio
    async def test_food_only_passes_fields(self, service: BarcodeService, food_client: MagicMock) -> None:
        result = await service.get_food_only(NUTELLA, fields=["product_name"])

        assert result == {"barcode": NUTELLA, "product_name": "Nutella"}
        food_client.fetch_by_barcode.assert_awaited_once_with(NUTELLA, fields=["product_name"])

    @pytest.mark.asyncio
    async def test_food_only_propagates_errors(self, service: BarcodeService, food_client: MagicMock) -> None:
        food_client.fetch_by_barcode.side_effect = UpstreamTimeoutError("slow", provider="OpenFoodFacts")

        with pytest.raises(UpstreamTimeoutError):
            await service.get_food_only(NUTELLA)

    @pytest.mark.asyncio
    async def test_retail_only_propagates_rate_limit(self, service: BarcodeService, retail_client: MagicMock) -> None:
        retail_client.lookup.side_effect = RateLimitedError("slow down", provider="UPCItemDB")

        with pytest.raises(RateLimitedError):
            await service.get_retail_only(NUTELLA)

    @pytest.mark.asyncio
    async def test_retail_only_not_found(self, service: BarcodeService) -> None:
        with pytest.raises(NotFoundError):
            await service.get_retail_only(UNKNOWN)

    @pytest.mark.asyncio
    async def test_single_source_validates(self, service: BarcodeService, retail_client: MagicMock) -> None:
        with pytest.raises(InvalidInputError):
            await service.get_retail_only("123")
        assert retail_client.lookup.await_count == 0


class TestSearch:

    @pytest.mark.asyncio
    async def test_food_search(self, service: BarcodeService, food_client: MagicMock) -> None:
        await service.search(" nutella ", source="food", page=2)

        food_client.search_products.assert_awaited_once_with("nutella", page=2, page_size=20)

    @pytest.mark.asyncio
    async def test_retail_search(self, service: BarcodeService, retail_client: MagicMock) -> None:
        await service.search("nutella", source="retail", page_size=5)

        retail_client.search.assert_awaited_once_with("nutella", page=1, page_size=5)

    @pytest.mark.asyncio
    async def test_unknown_source(self, service: BarcodeService) -> None:
        with pytest.raises(InvalidInputError, match="Unknown search source"):
            await service.search("nutella", source="beauty")

    @pytest.mark.asyncio
    async def test_blank_query(self, service: BarcodeService) -> None:
        with pytest.raises(InvalidInputError):
            await service.search("  ", source="food")
