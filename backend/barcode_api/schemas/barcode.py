"""
Barcode Pydantic Schemas
Request and response models for the Barcode API endpoints.

Python attributes are snake_case; the JSON wire names (foodData,
retailData, foodProvider, retailProvider) are produced through aliases.
"""

from typing import Any, List, Optional
from pydantic import BaseModel, ConfigDict, Field


class FoodData(BaseModel):
    """
    Normalized subset of the food provider (Open Food Facts) product.
    Fields the provider did not return stay None.
    """
    product_name: Optional[str] = None
    quantity: Optional[str] = None
    product_quantity: Optional[Any] = Field(None, description="Numeric amount, string or number upstream")
    product_quantity_unit: Optional[str] = None
    serving_quantity: Optional[Any] = Field(None, description="Numeric amount, string or number upstream")
    serving_quantity_unit: Optional[str] = None
    keywords: Optional[Any] = Field(None, description="Upstream _keywords (list or string)")


class RetailData(BaseModel):
    """Normalized subset of the retail provider (UPCitemdb) item."""
    description: Optional[str] = None
    brand: Optional[str] = None
    images: Optional[List[str]] = None


class LookupSources(BaseModel):
    """Which providers contributed data to a combined result."""
    model_config = ConfigDict(populate_by_name=True)

    food_provider: bool = Field(False, alias="foodProvider")
    retail_provider: bool = Field(False, alias="retailProvider")


class CombinedItemResponse(BaseModel):
    """
    Unified lookup result for one barcode.

    food_data is set iff the food provider succeeded, retail_data iff the
    retail provider succeeded.
    """
    model_config = ConfigDict(populate_by_name=True)

    barcode: str
    food_data: Optional[FoodData] = Field(None, alias="foodData")
    retail_data: Optional[RetailData] = Field(None, alias="retailData")
    sources: LookupSources = Field(default_factory=LookupSources)


class BatchLookupRequest(BaseModel):
    """
    Body of POST /barcode/batch.

    codes is typed loosely so shape errors are reported by
    validate_barcode_batch with the same messages as every other caller.
    """
    codes: Any = None


class BatchItemsResponse(BaseModel):
    """
    Batch lookup result.

    items holds only the barcodes found by at least one provider, in no
    particular order. total == len(items); requested is the batch size.
    """
    items: List[CombinedItemResponse] = Field(default_factory=list)
    total: int = 0
    requested: int = 0


class ErrorResponse(BaseModel):
    """Error body returned by the API."""
    error: str
    message: str
    error_id: Optional[str] = None
