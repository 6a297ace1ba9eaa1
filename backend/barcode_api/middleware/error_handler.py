"""
Error Handler Middleware

FastAPI middleware and exception handlers that turn errors into JSON
responses and log them using the error logging service.
"""

import logging
import time
from typing import Callable
from fastapi import FastAPI, Request, Response
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.middleware.base import BaseHTTPMiddleware

from barcode_api.core.errors import BarcodeAPIError, InvalidInputError
from barcode_api.services.error_logging import error_logger

logger = logging.getLogger(__name__)


class ErrorHandlerMiddleware(BaseHTTPMiddleware):
    """
    Middleware that catches all unhandled exceptions and logs them.
    """

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        try:
            return await call_next(request)

        except Exception as exc:
            # Unhandled exceptions - log as critical
            error_id = error_logger.log_error(
                exc,
                request=request,
                severity="critical",
                context={"unhandled": True}
            )

            # Return generic error response with error ID for reference
            return JSONResponse(
                status_code=500,
                content={
                    "error": "Internal Server Error",
                    "message": "An error occurred",
                    "error_id": str(error_id),
                }
            )


async def log_requests(request: Request, call_next):
    """Log every request with its status and duration."""
    start = time.perf_counter()
    response = await call_next(request)
    elapsed_ms = (time.perf_counter() - start) * 1000
    logger.info(f"{request.method} {request.url.path} -> {response.status_code} ({elapsed_ms:.0f} ms)")
    return response


async def barcode_api_error_handler(request: Request, exc: BarcodeAPIError) -> JSONResponse:
    """Map the BarcodeAPIError hierarchy to {error, message} responses."""
    if exc.status_code >= 500:
        error_logger.log_error(
            exc,
            request=request,
            severity="error",
            context={"status_code": exc.status_code, "provider": getattr(exc, "provider", None)}
        )

    return JSONResponse(
        status_code=exc.status_code,
        content={"error": type(exc).__name__, "message": exc.message},
    )


async def request_validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Malformed request bodies and query values are reported as InvalidInputError."""
    details = "; ".join(
        f"{'.'.join(str(part) for part in err.get('loc', []))}: {err.get('msg')}" for err in exc.errors()
    )
    return await barcode_api_error_handler(request, InvalidInputError(details or "Invalid request"))


async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    """Keep framework errors (unknown routes, wrong methods) in the API error shape."""
    if exc.status_code == 404:
        message = f"Route {request.method} {request.url.path} not found"
        error = "Not Found"
    else:
        message = str(exc.detail)
        error = type(exc).__name__
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": error, "message": message},
        headers=getattr(exc, "headers", None),
    )


def setup_error_handlers(app: FastAPI) -> None:
    """Register exception handlers and error/request logging middleware."""
    app.add_exception_handler(BarcodeAPIError, barcode_api_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_error_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.middleware("http")(log_requests)
    app.add_middleware(ErrorHandlerMiddleware)
