"""Application configuration.

Loads settings from .env file and environment variables with sensible defaults.
Validates values and provides clear error messages.
"""

import os
from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path

from babel import Locale, UnknownLocaleError
from dotenv import load_dotenv

from rental_ledger.services.logging import LOG_LEVEL_MAP


@dataclass
class AppConfig:
    """Configuration for the ledger service."""

    database_url: str = "sqlite:///./rental_ledger.db"
    """SQLAlchemy database URL (default: local SQLite)"""

    log_level: str = "INFO"
    """Root log level name"""

    log_file: str = "logs/server.log"
    """Path to log file (default: logs/server.log)"""

    locale: str = "fr_FR"
    """Babel locale used for month names, dates and amounts"""

    currency: str = "XOF"
    """ISO 4217 currency code for amounts (FCFA by default)"""

    agency_name: str = "Votre agence"
    """Agency name printed on receipts"""


def load_config(env_file: str = ".env") -> AppConfig:
    """
    Load configuration from .env file and environment variables.

    Priority (highest to lowest):
    1. Environment variables (DATABASE_URL, LOG_LEVEL, LOCALE, etc.)
    2. .env file in project root
    3. Default values

    Returns:
        AppConfig with all settings

    Raises:
        ValueError: If a setting is present but invalid
    """
    env_path = Path(env_file)
    if env_path.exists():
        load_dotenv(env_path)

    defaults = AppConfig()
    database_url = os.getenv("DATABASE_URL", defaults.database_url)
    log_level = os.getenv("LOG_LEVEL", defaults.log_level).upper()
    log_file = os.getenv("LOG_FILE", defaults.log_file)
    locale = os.getenv("LOCALE", defaults.locale)
    currency = os.getenv("CURRENCY", defaults.currency).upper()
    agency_name = os.getenv("AGENCY_NAME", defaults.agency_name)

    if not database_url:
        raise ValueError("DATABASE_URL is empty. Set DATABASE_URL or remove it from .env")

    if log_level not in LOG_LEVEL_MAP:
        raise ValueError(
            f"Invalid LOG_LEVEL '{log_level}'. Expected one of: {', '.join(LOG_LEVEL_MAP)}"
        )

    try:
        Locale.parse(locale)
    except (UnknownLocaleError, ValueError) as e:
        raise ValueError(f"Invalid LOCALE '{locale}': {e}") from e

    if len(currency) != 3 or not currency.isalpha():
        raise ValueError(f"Invalid CURRENCY '{currency}'. Expected an ISO 4217 code")

    return AppConfig(
        database_url=database_url,
        log_level=log_level,
        log_file=log_file,
        locale=locale,
        currency=currency,
        agency_name=agency_name,
    )


@lru_cache(maxsize=1)
def get_config() -> AppConfig:
    """Load configuration once per process (FastAPI dependency)."""
    return load_config()
