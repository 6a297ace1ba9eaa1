"""
Application Constants
Defines constant values used throughout the application.

This module contains all application-wide constants including:
- Barcode syntax
- Batch size ceiling
- Field subsets requested from each provider
"""

import re

# Barcode syntax: UPC-A, UPC-E, EAN-8, EAN-13, GTIN-14 (no checksum verification)
BARCODE_PATTERN = re.compile(r"^\d{8,14}$")

# Batch lookup ceiling
MAX_BATCH_SIZE = 100

# Provider names (used in logs and UpstreamError.provider)
FOOD_PROVIDER = "OpenFoodFacts"
RETAIL_PROVIDER = "UPCItemDB"

# Fields requested from the food provider for the combined view
FOOD_FIELDS = [
    "_keywords",
    "product_name",
    "product_quantity",
    "product_quantity_unit",
    "quantity",
    "serving_quantity",
    "serving_quantity_unit",
]

# Fields requested from the retail provider for the combined view
RETAIL_FIELDS = ["description", "brand", "images"]

# Search sources
SEARCH_SOURCE_FOOD = "food"
SEARCH_SOURCE_RETAIL = "retail"

VALID_SEARCH_SOURCES = [SEARCH_SOURCE_FOOD, SEARCH_SOURCE_RETAIL]
