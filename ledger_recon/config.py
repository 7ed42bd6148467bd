"""
Application configuration.

All configuration is loaded from environment variables.
Never hardcode secrets or connection strings in code.
"""

import os
from datetime import date
from functools import lru_cache

from dotenv import load_dotenv

# Load .env file into environment variables
load_dotenv()


class Settings:
    """Application settings loaded from environment variables."""

    # Application
    APP_NAME: str = "Account Ledger Reconciliation"
    APP_VERSION: str = "0.1.0"
    DEBUG: bool = os.getenv("DEBUG", "false").lower() == "true"
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO").upper()

    # Server
    HOST: str = os.getenv("HOST", "0.0.0.0")
    PORT: int = int(os.getenv("PORT", "8000"))

    # Database
    DATABASE_URL: str = os.getenv(
        "DATABASE_URL",
        "postgresql://localhost:5432/ledger_recon"
    )

    # Environment
    ENVIRONMENT: str = os.getenv("ENVIRONMENT", "development")

    # Ledger
    # Nothing dated before this contributes to any balance, statement
    # or closing snapshot. Requests may raise the floor, never lower it.
    PERMANENT_RESET_DATE: date = date.fromisoformat(
        os.getenv("PERMANENT_RESET_DATE", "2025-10-01")
    )
    BASE_CURRENCY: str = os.getenv("BASE_CURRENCY", "AED").upper()

    # Reporting
    DEFAULT_PAGE_SIZE: int = int(os.getenv("DEFAULT_PAGE_SIZE", "20"))
    MAX_PAGE_SIZE: int = int(os.getenv("MAX_PAGE_SIZE", "100"))

    # Source adapters run on a thread pool. A source that has not
    # answered within the timeout is reported as unavailable.
    SOURCE_TIMEOUT_SECONDS: float = float(
        os.getenv("SOURCE_TIMEOUT_SECONDS", "10")
    )
    SOURCE_MAX_WORKERS: int = int(os.getenv("SOURCE_MAX_WORKERS", "8"))

    # Closing day
    CLOSING_RECIPIENT: str = os.getenv(
        "CLOSING_RECIPIENT", "accounts@localhost"
    )


@lru_cache()
def get_settings() -> Settings:
    """
    Return cached settings instance.

    Using lru_cache means the Settings object is created once
    and reused for all subsequent calls. This avoids reading
    environment variables repeatedly.
    """
    return Settings()
