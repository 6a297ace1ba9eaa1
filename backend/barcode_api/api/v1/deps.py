"""
API Dependencies
Common dependencies used across API endpoints.

This module provides the shared BarcodeService instance. Endpoints receive
it through Depends(), so tests can swap it with
app.dependency_overrides[get_barcode_service].
"""

from functools import lru_cache

from barcode_api.services.barcode_service import BarcodeService


@lru_cache
def get_barcode_service() -> BarcodeService:
    """
    Return the process-wide BarcodeService.

    The service and its provider clients are stateless and read their
    configuration once, so a single instance is shared by all requests.

    Usage in endpoint:
        @router.get("/{code}")
        async def lookup(code: str, service: BarcodeService = Depends(get_barcode_service)):
            return await service.get_combined(code)
    """
    return BarcodeService()
