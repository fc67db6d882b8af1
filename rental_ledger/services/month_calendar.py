"""Month calendar generation for long-term rental payments.

A contract's payment calendar is a window of 36 consecutive months starting
at the later of the rental start month and the current month. Each month
carries whether it is already paid and whether it is selected. At
generation time the months covered by the current rental end date come
pre-selected.
"""

import math
from dataclasses import dataclass, replace
from datetime import date
from typing import Any, Sequence

from rental_ledger.services.month_keys import (
    add_months,
    month_key,
    normalize_paid_months,
    start_of_month,
)

CALENDAR_MONTHS = 36
MONTHS_PER_PAGE = 12


@dataclass(frozen=True)
class MonthSelection:
    """One month of the payment calendar. date is always the 1st of the month."""

    date: date
    selected: bool = False
    paid: bool = False

    @property
    def key(self) -> str:
        return month_key(self.date)

    def with_flags(self, **changes: bool) -> "MonthSelection":
        return replace(self, **changes)


@dataclass(frozen=True)
class CalendarPage:
    """A page of the calendar window."""

    page: int
    total_pages: int
    offset: int
    """Index of the first month of this page within the whole window."""
    months: tuple[MonthSelection, ...]


def _covered_by_end_date(month: date, rental_end_date: date | None) -> bool:
    if rental_end_date is None:
        return False
    return month_key(month) == month_key(rental_end_date) or month < rental_end_date


def generate_month_calendar(
    rental_start_date: date | None,
    rental_end_date: date | None,
    paid_months: Any,
    today: date,
    total_months: int = CALENDAR_MONTHS,
) -> tuple[MonthSelection, ...]:
    """
    Build the payment calendar window of a contract.

    Args:
        rental_start_date: Contract start date (no calendar without it)
        rental_end_date: Current paid-through date, if any
        paid_months: Persisted paid months in any stored shape
        today: Current date
        total_months: Window length (default 36)

    Returns:
        Ordered MonthSelection values, one per month
    """
    if rental_start_date is None:
        return ()

    first_month = start_of_month(max(rental_start_date, today))
    paid_keys = set(normalize_paid_months(paid_months))

    months = []
    for offset in range(total_months):
        month = add_months(first_month, offset)
        months.append(
            MonthSelection(
                date=month,
                selected=_covered_by_end_date(month, rental_end_date),
                paid=month_key(month) in paid_keys,
            )
        )
    return tuple(months)


def paginate(
    months: Sequence[MonthSelection], page: int, per_page: int = MONTHS_PER_PAGE
) -> CalendarPage:
    """Return one page of the window; out-of-range pages are clamped."""
    total_pages = max(1, math.ceil(len(months) / per_page))
    page = min(max(page, 0), total_pages - 1)
    offset = page * per_page
    return CalendarPage(
        page=page,
        total_pages=total_pages,
        offset=offset,
        months=tuple(months[offset : offset + per_page]),
    )


__all__ = [
    "CALENDAR_MONTHS",
    "MONTHS_PER_PAGE",
    "MonthSelection",
    "CalendarPage",
    "generate_month_calendar",
    "paginate",
]
