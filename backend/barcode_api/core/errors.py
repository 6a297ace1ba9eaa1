"""
Barcode API Errors

Exception hierarchy shared by the provider clients, the lookup service and
the HTTP layer. Each error carries the HTTP status code it maps to.
"""

from typing import Optional


class BarcodeAPIError(Exception):
    """Base class for all barcode lookup errors."""

    status_code: int = 500

    def __init__(self, message: str, status_code: Optional[int] = None):
        self.message = message
        if status_code is not None:
            self.status_code = status_code
        super().__init__(self.message)


class InvalidInputError(BarcodeAPIError):
    """Malformed barcode, malformed batch payload or batch too large."""

    status_code = 400


class NotFoundError(BarcodeAPIError):
    """No product for the barcode."""

    status_code = 404


class UpstreamError(BarcodeAPIError):
    """A provider could not be reached or returned an unexpected response."""

    status_code = 502

    def __init__(self, message: str, provider: Optional[str] = None, upstream_status: Optional[int] = None):
        self.provider = provider
        self.upstream_status = upstream_status
        super().__init__(message)


class UpstreamTimeoutError(UpstreamError):
    """A provider did not answer within the configured timeout."""

    status_code = 504


class RateLimitedError(UpstreamError):
    """A provider answered HTTP 429."""

    status_code = 429
