"""
Main FastAPI Application
Entry point for the Barcode Lookup API.

This module creates and configures the FastAPI application instance,
sets up middleware, and defines the health check endpoint.
"""

import logging
import time
from datetime import datetime, timezone

from fastapi import FastAPI
from fastapi.responses import JSONResponse

from barcode_api.core.config import settings
from barcode_api.middleware.cors import setup_cors
from barcode_api.middleware.error_handler import setup_error_handlers
from barcode_api.services.error_logging import configure_logging

logger = logging.getLogger(__name__)

VERSION = "1.0.0"
STARTED_AT = time.monotonic()


# Create FastAPI application instance
# This is the main application object that handles all HTTP requests.
#
# Configuration:
# - title: Displayed in auto-generated API documentation
# - version: API version for documentation and versioning
# - docs_url: Swagger UI endpoint (interactive API documentation)
# - redoc_url: ReDoc endpoint (alternative documentation style)
app = FastAPI(
    title=settings.PROJECT_NAME,
    version=VERSION,
    docs_url="/docs",
    redoc_url="/redoc",
    description="""
    Barcode Lookup API - product data for the product and shopping list app.

    Features:
    - Combined lookup on Open Food Facts and UPCitemdb, tolerant to one provider failing
    - Batch lookup (up to 100 barcodes)
    - Raw per-provider lookup with field selection
    - Keyword search on either provider

    For more information, visit the documentation at /docs
    """
)


# Setup CORS middleware
# Allows the Ionic/Angular frontend to call the API from another origin
setup_cors(app)

# Setup exception handlers, request logging and error handler middleware
setup_error_handlers(app)


@app.on_event("startup")
async def startup_event():
    """
    Application startup handler.

    Configures logging (console plus rotating files when LOGS_DIR is writable)
    and reports which retail tier is in use.
    """
    file_logging = configure_logging(settings.LOG_LEVEL, settings.LOGS_DIR)
    logger.info(f"✓ Logging configured (file logging {'enabled' if file_logging else 'disabled'})")

    if settings.UPCITEMDB_API_KEY:
        logger.info("✓ UPCitemdb API key configured")
    else:
        logger.info("⚠ UPCitemdb API key not set, using the rate-limited trial tier")

    logger.info(f"✓ API documentation available at http://localhost:{settings.PORT}/docs")


@app.on_event("shutdown")
async def shutdown_event():
    """Application shutdown handler."""
    logger.info("✓ Application shutdown complete")


@app.get(
    "/health",
    tags=["Health"],
    summary="Health Check",
    description="Simple endpoint to verify API is running"
)
async def health_check():
    """
    Health check endpoint.

    Example Response:
        {
            "status": "ok",
            "timestamp": "2026-01-20T10:00:00+00:00",
            "uptime": 12.5,
            "version": "1.0.0"
        }
    """
    return JSONResponse(
        status_code=200,
        content={
            "status": "ok",
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "uptime": round(time.monotonic() - STARTED_AT, 3),
            "version": VERSION,
        }
    )


@app.get(
    "/",
    tags=["Root"],
    summary="API Root",
    description="Root endpoint with API information"
)
async def root():
    """API root endpoint with links to documentation."""
    return {
        "message": f"Welcome to {settings.PROJECT_NAME}",
        "version": VERSION,
        "docs": "/docs",
        "redoc": "/redoc",
        "health": "/health",
        "barcode": f"/api/{settings.API_VERSION}/barcode",
    }


# Include API v1 router
# All v1 endpoints are prefixed with /api/v1
from barcode_api.api.v1.router import api_router

app.include_router(
    api_router,
    prefix=f"/api/{settings.API_VERSION}",
)


def run():
    """Start the API with uvicorn (console script: barcode-api)."""
    import uvicorn

    banner = [
        "",
        "==============================================",
        f"  {settings.PROJECT_NAME}",
        "==============================================",
        f"  Host:        {settings.HOST}",
        f"  Port:        {settings.PORT}",
        f"  Server:      http://localhost:{settings.PORT}",
        f"  Health:      http://localhost:{settings.PORT}/health",
        f"  Barcode API: http://localhost:{settings.PORT}/api/{settings.API_VERSION}/barcode",
        "==============================================",
        "",
    ]
    print("\n".join(banner))

    uvicorn.run(
        "barcode_api.main:app",
        host=settings.HOST,
        port=settings.PORT,
        reload=settings.DEBUG,
        log_level=settings.LOG_LEVEL.lower(),
    )


if __name__ == "__main__":
    run()
