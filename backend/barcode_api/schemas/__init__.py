"""
Pydantic Schemas Module
Contains request/response schemas for API validation and serialization.

Pydantic schemas are used for:
- Validating incoming request data
- Serializing lookup results to JSON responses
- Auto-generating OpenAPI documentation
"""

from barcode_api.schemas.barcode import (
    FoodData,
    RetailData,
    LookupSources,
    CombinedItemResponse,
    BatchLookupRequest,
    BatchItemsResponse,
    ErrorResponse,
)

__all__ = [
    "FoodData",
    "RetailData",
    "LookupSources",
    "CombinedItemResponse",
    "BatchLookupRequest",
    "BatchItemsResponse",
    "ErrorResponse",
]
