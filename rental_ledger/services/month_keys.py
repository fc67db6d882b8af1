"""Month arithmetic and month-key ("YYYY-MM") utilities.

Paid months are persisted as a list of month keys. Rows written by older
clients may hold that list as a JSON string or as an object instead of an
array; normalize_paid_months() folds every shape into one sorted list.

Example:
    >>> month_key(date(2025, 3, 14))
    '2025-03'

    >>> end_of_month(date(2024, 2, 10))
    datetime.date(2024, 2, 29)

    >>> normalize_paid_months('["2025-02", "2025-01"]')
    ['2025-01', '2025-02']
"""

import calendar
import json
import logging
import re
from datetime import date
from typing import Any, Iterable

logger = logging.getLogger(__name__)

MONTH_KEY_PATTERN = re.compile(r"^\d{4}-(0[1-9]|1[0-2])$")


def month_key(value: date) -> str:
    """Return the "YYYY-MM" key of the month containing value."""
    return f"{value.year:04d}-{value.month:02d}"


def is_month_key(value: Any) -> bool:
    return isinstance(value, str) and MONTH_KEY_PATTERN.match(value) is not None


def parse_month_key(key: str) -> date:
    """
    Parse a month key to the first day of that month.

    Raises:
        ValueError: If key is not of the form "YYYY-MM"
    """
    if not is_month_key(key):
        raise ValueError(f"Invalid month key '{key}', expected YYYY-MM")
    year, month = key.split("-")
    return date(int(year), int(month), 1)


def start_of_month(value: date) -> date:
    return value.replace(day=1)


def end_of_month(value: date) -> date:
    last_day = calendar.monthrange(value.year, value.month)[1]
    return value.replace(day=last_day)


def add_months(value: date, months: int) -> date:
    """Shift value by a number of months, clamping the day to the target month length."""
    month_index = value.year * 12 + (value.month - 1) + months
    year, month = divmod(month_index, 12)
    day = min(value.day, calendar.monthrange(year, month + 1)[1])
    return date(year, month + 1, day)


def _collect(values: Iterable[Any], dropped: list[Any]) -> list[str]:
    keys = []
    for value in values:
        if is_month_key(value):
            keys.append(value)
        else:
            dropped.append(value)
    return keys


def _from_object(raw: dict, dropped: list[Any]) -> list[str]:
    # {"months": [...]}, {"0": "2025-01", ...} and {"2025-01": true} all occur
    keys: list[str] = []
    for name, value in raw.items():
        if isinstance(value, bool):
            if value:
                keys.extend(_collect([name], dropped))
        elif isinstance(value, (list, tuple)):
            keys.extend(_collect(value, dropped))
        else:
            keys.extend(_collect([value], dropped))
    return keys


def normalize_paid_months(raw: Any) -> list[str]:
    """
    Normalize a persisted paid-month value to a sorted list of unique month keys.

    Args:
        raw: JSON string, list or dict as read from the database (or None)

    Returns:
        Sorted, de-duplicated month keys. Unparseable input yields [].

    Examples:
        >>> normalize_paid_months(["2025-01", "2025-01"])
        ['2025-01']
        >>> normalize_paid_months("not json")
        []
    """
    if raw is None:
        return []

    dropped: list[Any] = []

    if isinstance(raw, str):
        try:
            decoded = json.loads(raw)
        except (json.JSONDecodeError, ValueError):
            logger.warning("Discarding unparseable paid months value: %r", raw)
            return []
        if isinstance(decoded, str):
            # Single month stored as a JSON string
            decoded = [decoded]
        if not isinstance(decoded, (list, dict)):
            logger.warning("Discarding paid months value of type %s", type(decoded).__name__)
            return []
        raw = decoded

    if isinstance(raw, (list, tuple)):
        keys = _collect(raw, dropped)
    elif isinstance(raw, dict):
        keys = _from_object(raw, dropped)
    else:
        logger.warning("Discarding paid months value of type %s", type(raw).__name__)
        return []

    if dropped:
        logger.warning("Ignored %d invalid paid month entries: %r", len(dropped), dropped)

    return sorted(set(keys))


__all__ = [
    "MONTH_KEY_PATTERN",
    "month_key",
    "is_month_key",
    "parse_month_key",
    "start_of_month",
    "end_of_month",
    "add_months",
    "normalize_paid_months",
]
