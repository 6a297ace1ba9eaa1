"""
API v1 Main Router
Aggregates all v1 API endpoints into a single router.

This router is included in main.py with prefix /api/{API_VERSION}.

Structure:
- /barcode/* - Barcode lookup endpoints (combined, batch, per-provider, search)
"""

from fastapi import APIRouter

from barcode_api.api.v1 import barcode


# Create main v1 router
# This router will be included in main.py with prefix /api/v1
api_router = APIRouter()


# Include barcode endpoints
# Endpoints: GET /barcode/{code}, POST /barcode/batch,
# GET /barcode/{code}/food, GET /barcode/{code}/retail, GET /barcode/search
# Product lookup on Open Food Facts and UPCitemdb
# Authorization is left to the caller
api_router.include_router(
    barcode.router,
    # prefix is already defined in barcode.router (/barcode)
    tags=["Barcode"],
)
