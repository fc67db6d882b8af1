"""Contiguous month selection for rent payments.

The selection is the range [anchor, cursor] over the calendar window:
the anchor is the earliest selected month (or the first month of the
window when nothing is selected) and the cursor is the clicked month.
Paid months inside the range are skipped, never toggled, so unpaid
selected months never have an unpaid gap between them. A selection can
only shrink from its tail.

All functions are pure: they return new tuples and never mutate input.
"""

from dataclasses import dataclass
from decimal import Decimal
from typing import Iterable, Sequence

from rental_ledger.services.errors import MonthAlreadyPaidError
from rental_ledger.services.month_calendar import MonthSelection


@dataclass(frozen=True)
class SelectionResult:
    """Selection state after a click, with the derived amount due."""

    months: tuple[MonthSelection, ...]
    selected_count: int
    amount: Decimal

    @property
    def selected_keys(self) -> list[str]:
        return [m.key for m in selected_unpaid(self.months)]


def selected_unpaid(months: Iterable[MonthSelection]) -> list[MonthSelection]:
    return [m for m in months if m.selected and not m.paid]


def summarize(months: Sequence[MonthSelection], monthly_price: Decimal) -> SelectionResult:
    """Count selected unpaid months and compute count x monthly price."""
    count = len(selected_unpaid(months))
    return SelectionResult(
        months=tuple(months),
        selected_count=count,
        amount=Decimal(count) * Decimal(monthly_price),
    )


def apply_selected_keys(
    months: Sequence[MonthSelection], selected_keys: Iterable[str]
) -> tuple[MonthSelection, ...]:
    """Replace the selected flags of a window with a client-held selection."""
    keys = set(selected_keys)
    return tuple(m.with_flags(selected=m.key in keys) for m in months)


def toggle_month(
    months: Sequence[MonthSelection], index: int, monthly_price: Decimal
) -> SelectionResult:
    """
    Apply a click on the month at index.

    Args:
        months: Current calendar window
        index: Position of the clicked month in the whole window
        monthly_price: Rent for one month

    Returns:
        SelectionResult with the new window, selected count and amount

    Raises:
        IndexError: If index is outside the window
        MonthAlreadyPaidError: If the clicked month is paid
    """
    if not 0 <= index < len(months):
        raise IndexError(f"Month index {index} outside window of {len(months)} months")

    clicked = months[index]
    if clicked.paid:
        raise MonthAlreadyPaidError(clicked.key)

    if clicked.selected:
        # Shrink from the tail: the clicked month and everything after it
        updated = [
            m if i < index or m.paid else m.with_flags(selected=False)
            for i, m in enumerate(months)
        ]
    else:
        selected_indexes = [i for i, m in enumerate(months) if m.selected]
        anchor = selected_indexes[0] if selected_indexes else 0
        low, high = sorted((anchor, index))
        updated = [
            m.with_flags(selected=True) if low <= i <= high and not m.paid else m
            for i, m in enumerate(months)
        ]

    return summarize(updated, monthly_price)


def is_contiguous(months: Sequence[MonthSelection]) -> bool:
    """True when no unselected unpaid month lies between two selected unpaid months."""
    indexes = [i for i, m in enumerate(months) if m.selected and not m.paid]
    if not indexes:
        return True
    return all(
        months[i].selected or months[i].paid for i in range(indexes[0], indexes[-1] + 1)
    )


def first_skipped_unpaid(months: Sequence[MonthSelection]) -> MonthSelection | None:
    """Earliest unpaid month left unselected before the selection, if any.

    Months are paid in order: a selection must start at the first unpaid
    month of the window.
    """
    if not selected_unpaid(months):
        return None
    first_unpaid = next(m for m in months if not m.paid)
    return None if first_unpaid.selected else first_unpaid


def fold_committed(
    months: Sequence[MonthSelection], committed_keys: Iterable[str]
) -> tuple[MonthSelection, ...]:
    """Mark committed months paid and deselect them."""
    keys = set(committed_keys)
    return tuple(
        m.with_flags(paid=True, selected=False) if m.key in keys else m for m in months
    )


__all__ = [
    "SelectionResult",
    "selected_unpaid",
    "summarize",
    "apply_selected_keys",
    "toggle_month",
    "fold_committed",
    "is_contiguous",
    "first_skipped_unpaid",
]
