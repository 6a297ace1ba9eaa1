"""
Barcode API Endpoints

Endpoints for barcode lookup and product information retrieval from
multiple sources (Open Food Facts and UPCitemdb).

Endpoints:
- GET /barcode/search - Keyword search on one provider
- POST /barcode/batch - Combined lookup for up to 100 barcodes
- GET /barcode/{code} - Combined lookup from both providers
- GET /barcode/{code}/food - Open Food Facts data only
- GET /barcode/{code}/retail - UPCitemdb data only

Authentication is enforced by the caller (gateway or mounting app), not here.
"""

from fastapi import APIRouter, Depends, Query
from typing import Any, Dict, Optional

from barcode_api.api.v1.deps import get_barcode_service
from barcode_api.core.constants import SEARCH_SOURCE_RETAIL
from barcode_api.schemas.barcode import (
    BatchItemsResponse,
    BatchLookupRequest,
    CombinedItemResponse,
    ErrorResponse,
)
from barcode_api.services.barcode_service import BarcodeService
from barcode_api.services.barcode_validation import parse_fields


router = APIRouter(prefix="/barcode")

ERROR_RESPONSES = {
    400: {"model": ErrorResponse, "description": "Invalid barcode or batch payload"},
    404: {"model": ErrorResponse, "description": "Product not found"},
}

PROVIDER_ERROR_RESPONSES = {
    **ERROR_RESPONSES,
    429: {"model": ErrorResponse, "description": "Provider rate limit exceeded"},
    502: {"model": ErrorResponse, "description": "Provider error"},
    504: {"model": ErrorResponse, "description": "Provider timeout"},
}


@router.get(
    "/search",
    summary="Search Products",
    description="Keyword search on one provider (source=food or source=retail). Returns the provider's raw payload.",
    responses=PROVIDER_ERROR_RESPONSES,
)
async def search_products(
    q: str = Query(..., min_length=1, description="Search terms"),
    source: str = Query(SEARCH_SOURCE_RETAIL, description="food | retail"),
    page: int = Query(1, ge=1),
    page_size: Optional[int] = Query(None, ge=1, le=100),
    service: BarcodeService = Depends(get_barcode_service),
) -> Dict[str, Any]:
    return await service.search(q, source=source, page=page, page_size=page_size)


@router.post(
    "/batch",
    response_model=BatchItemsResponse,
    summary="Batch Barcode Lookup",
    description="""
    Combined lookup for multiple barcodes (max 100).

    Only barcodes found by at least one provider are returned in items,
    in no particular order. total is the number of items, requested the
    number of codes sent.
    """,
    responses={400: ERROR_RESPONSES[400]},
)
async def get_batch_items(
    body: BatchLookupRequest,
    service: BarcodeService = Depends(get_barcode_service),
):
    return await service.get_combined_batch(body.codes)


@router.get(
    "/{code}",
    response_model=CombinedItemResponse,
    response_model_exclude_none=True,
    summary="Combined Barcode Lookup",
    description="""
    Look up a barcode on Open Food Facts and UPCitemdb concurrently.

    The result carries foodData and/or retailData and a sources record
    telling which provider answered. 404 only when neither did.
    """,
    responses=ERROR_RESPONSES,
)
async def get_item_by_code(
    code: str,
    service: BarcodeService = Depends(get_barcode_service),
):
    return await service.get_combined(code)


@router.get(
    "/{code}/food",
    summary="Food Provider Lookup",
    description="Open Food Facts data only. Example: /barcode/3017620422003/food?fields=product_name,quantity",
    responses=PROVIDER_ERROR_RESPONSES,
)
async def get_food_data(
    code: str,
    fields: Optional[str] = Query(None, description="Comma-separated list of fields to return"),
    service: BarcodeService = Depends(get_barcode_service),
) -> Dict[str, Any]:
    data = await service.get_food_only(code, fields=parse_fields(fields))
    return {**data, "barcode": code}


@router.get(
    "/{code}/retail",
    summary="Retail Provider Lookup",
    description="UPCitemdb data only. Example: /barcode/012345678905/retail?fields=brand,description,images",
    responses=PROVIDER_ERROR_RESPONSES,
)
async def get_retail_data(
    code: str,
    fields: Optional[str] = Query(None, description="Comma-separated list of fields to return"),
    service: BarcodeService = Depends(get_barcode_service),
) -> Dict[str, Any]:
    data = await service.get_retail_only(code, fields=parse_fields(fields))
    return {**data, "barcode": code}
