"""
API v1 Module
Contains all version 1 API endpoints.
"""

# Expose routers for easy import
from barcode_api.api.v1 import barcode

__all__ = ["barcode"]
