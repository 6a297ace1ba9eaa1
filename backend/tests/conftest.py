"""Shared fixtures for the barcode API tests.

Provider HTTP traffic is faked with httpx.MockTransport injected into the
clients; no test in the default run touches the network.
"""

from typing import Any, Callable, Dict, List

import httpx
import pytest

from barcode_api.integrations.openfoodfacts import OpenFoodFactsClient
from barcode_api.integrations.upcitemdb import UPCItemDBClient

NUTELLA = "3017620422003"
UNKNOWN = "00000000"

FOOD_BASE_URL = "https://food.test/api/v2"
RETAIL_BASE_URL = "https://retail.test/prod/trial"


@pytest.fixture
def off_product() -> Dict[str, Any]:
    """Open Food Facts product, trimmed to a realistic subset."""
    return {
        "product_name": "Nutella",
        "_keywords": ["nutella", "ferrero", "pate-a-tartiner"],
        "quantity": "400 g",
        "product_quantity": "400",
        "product_quantity_unit": "g",
        "serving_quantity": "15",
        "serving_quantity_unit": "g",
        "brands": "Ferrero",
        "categories": "Spreads",
    }


@pytest.fixture
def upc_item() -> Dict[str, Any]:
    """UPCitemdb item."""
    return {
        "ean": NUTELLA,
        "title": "Nutella Hazelnut Spread 400g",
        "description": "Hazelnut spread with cocoa",
        "brand": "Ferrero",
        "category": "Food, Beverages & Tobacco",
        "lowest_recorded_price": 3.49,
        "highest_recorded_price": 6.99,
        "images": ["https://img.test/nutella.jpg"],
        "offers": [],
    }


class RecordingTransport(httpx.MockTransport):
    """MockTransport that remembers every request it served."""

    def __init__(self, handler: Callable[[httpx.Request], httpx.Response]):
        self.requests: List[httpx.Request] = []

        def recording_handler(request: httpx.Request) -> httpx.Response:
            self.requests.append(request)
            return handler(request)

        super().__init__(recording_handler)


@pytest.fixture
def food_client_factory() -> Callable[..., OpenFoodFactsClient]:
    """Build an OpenFoodFactsClient backed by the given request handler."""

    def factory(handler: Callable[[httpx.Request], httpx.Response]) -> OpenFoodFactsClient:
        return OpenFoodFactsClient(base_url=FOOD_BASE_URL, timeout=1.0, transport=RecordingTransport(handler))

    return factory


@pytest.fixture
def retail_client_factory() -> Callable[..., UPCItemDBClient]:
    """Build a UPCItemDBClient backed by the given request handler."""

    def factory(handler: Callable[[httpx.Request], httpx.Response], api_key: str = "") -> UPCItemDBClient:
        return UPCItemDBClient(
            base_url=RETAIL_BASE_URL, api_key=api_key, timeout=1.0, transport=RecordingTransport(handler)
        )

    return factory
