"""
Application Configuration
Manages environment variables and application settings using Pydantic Settings.

This module loads configuration from .env file and provides type-safe access
to all application settings including the upstream product providers,
request limits and logging.
"""

from pydantic_settings import BaseSettings, SettingsConfigDict
from typing import List


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    All settings are loaded from .env file or environment variables.
    Every setting has a default so the API starts without a .env file.
    """

    # Food Data Provider (Open Food Facts, public, no API key)
    FOOD_PROVIDER_BASE_URL: str = "https://world.openfoodfacts.org/api/v2"

    # Retail Data Provider (UPCitemdb)
    RETAIL_PROVIDER_BASE_URL: str = "https://api.upcitemdb.com/prod/trial"
    UPCITEMDB_API_KEY: str = ""  # Optional, unauthenticated requests hit the trial tier

    # Outbound HTTP
    PROVIDER_TIMEOUT: float = 10.0  # Seconds per provider call
    USER_AGENT: str = "CNC-WebApp/1.0 (Product Management System)"

    # Application Settings
    API_VERSION: str = "v1"  # API version prefix
    PROJECT_NAME: str = "Barcode Lookup API"  # Project name for docs
    DEBUG: bool = False  # Debug mode (should be False in production)
    HOST: str = "0.0.0.0"
    PORT: int = 3000

    # Logging
    LOG_LEVEL: str = "INFO"
    LOGS_DIR: str = "logs"  # Rotating log files, skipped if not writable

    # Frontend origins (Ionic dev server, Angular dev server)
    CORS_ORIGINS: List[str] = [
        "http://localhost:8100",
        "http://localhost:4200",
    ]

    model_config = SettingsConfigDict(
        env_file=".env",  # Load from .env file
        env_file_encoding="utf-8",  # UTF-8 encoding
        case_sensitive=False  # Case-insensitive env vars
    )


# Global settings instance
# This singleton is imported throughout the application
settings = Settings()
