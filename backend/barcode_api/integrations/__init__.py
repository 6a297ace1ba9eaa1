"""
External Service Integrations

This package contains HTTP clients for the upstream product databases:
- Open Food Facts (food data provider)
- UPCitemdb (retail data provider)
"""

from barcode_api.integrations.openfoodfacts import OpenFoodFactsClient
from barcode_api.integrations.upcitemdb import UPCItemDBClient

__all__ = [
    "OpenFoodFactsClient",
    "UPCItemDBClient",
]
