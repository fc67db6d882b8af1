"""Centralized locale service for month names, dates and amounts.

Single source of truth for all locale-related formatting.
Uses babel; French is the default locale.

Configuration:
    LOCALE env var (default: fr_FR) - month names, number/date formatting
    CURRENCY env var (default: XOF) - currency code for amounts

Example:
    >>> from rental_ledger.services.locale_service import format_month_year
    >>> format_month_year(date(2025, 1, 1))
    'janvier 2025'
"""

import logging
import os
from datetime import date, datetime
from decimal import Decimal

from babel import Locale, UnknownLocaleError
from babel.dates import format_date as babel_format_date
from babel.dates import format_datetime as babel_format_datetime
from babel.numbers import format_currency as babel_format_currency
from babel.numbers import format_decimal as babel_format_decimal

logger = logging.getLogger(__name__)

DEFAULT_LOCALE = "fr_FR"
DEFAULT_CURRENCY = "XOF"


def _get_locale() -> str:
    """Get locale from environment with validation and fallback.

    Returns:
        Valid locale string (e.g., 'fr_FR')
    """
    locale_str = os.getenv("LOCALE", DEFAULT_LOCALE)
    try:
        Locale.parse(locale_str)
        return locale_str
    except (UnknownLocaleError, ValueError) as e:
        logger.warning(f"Invalid LOCALE '{locale_str}': {e}. Falling back to '{DEFAULT_LOCALE}'")
        return DEFAULT_LOCALE


# Module-level constants (computed once at import)
LOCALE = _get_locale()
CURRENCY = os.getenv("CURRENCY", DEFAULT_CURRENCY).upper()


def configure_locale(locale: str, currency: str) -> None:
    """Apply the locale and currency of a loaded AppConfig."""
    global LOCALE, CURRENCY
    LOCALE = locale
    CURRENCY = currency.upper()
    logger.debug("Locale set to %s, currency %s", LOCALE, CURRENCY)


def format_month_year(value: date) -> str:
    """Format a month as its localized name and year (e.g., 'mars 2025')."""
    return babel_format_date(value, "MMMM yyyy", locale=LOCALE)


def format_short_date(value: date) -> str:
    """Format a date as dd/MM/yyyy."""
    return babel_format_date(value, "dd/MM/yyyy", locale=LOCALE)


def format_timestamp(value: datetime) -> str:
    """Format a timestamp as 'dd/MM/yyyy à HH:mm' for receipts."""
    return babel_format_datetime(value, "dd/MM/yyyy 'à' HH:mm", locale=LOCALE)


def format_amount(amount: float | Decimal, include_symbol: bool = True) -> str:
    """Format monetary amount according to locale.

    Args:
        amount: Numeric amount to format
        include_symbol: Whether to include currency symbol (default True)

    Returns:
        Formatted currency string (e.g., '150 000 F CFA')
    """
    if include_symbol:
        return babel_format_currency(Decimal(amount), CURRENCY, locale=LOCALE)
    return babel_format_decimal(Decimal(amount), locale=LOCALE)


__all__ = [
    "LOCALE",
    "CURRENCY",
    "configure_locale",
    "format_month_year",
    "format_short_date",
    "format_timestamp",
    "format_amount",
]
