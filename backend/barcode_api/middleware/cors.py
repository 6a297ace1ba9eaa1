"""
CORS Middleware Configuration
Enables Cross-Origin Resource Sharing for frontend-backend communication.

CORS is required when the mobile-web frontend (Ionic dev server on port 8100,
Angular dev server on port 4200) calls the API on another port.
"""

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from barcode_api.core.config import settings


def setup_cors(app: FastAPI) -> None:
    """
    Configure CORS middleware for the FastAPI application.

    Args:
        app: FastAPI application instance

    Allowed origins come from settings.CORS_ORIGINS; in production set
    CORS_ORIGINS to the deployed frontend domain only.
    """
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,  # List of allowed origins
        allow_credentials=True,  # Allow cookies and auth headers
        allow_methods=["*"],  # Allow all HTTP methods
        allow_headers=["*"],  # Allow all headers (Content-Type, Authorization, etc.)
    )
