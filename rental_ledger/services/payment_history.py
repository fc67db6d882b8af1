"""Payment history: listing, filtering, CSV export and receipts.

Each ledger entry is shown with its tenant, its unit and the months it
covered. Entries written before month keys were stored only carry a
months_covered count; their months are rebuilt from the contract's
payment timeline (each payment continues after the last covered month,
the first one starts at its payment month).
"""

import csv
import io
import logging
from dataclasses import dataclass, field
from datetime import date, datetime
from decimal import Decimal
from typing import Iterable

from sqlalchemy import select
from sqlalchemy.orm import Session, selectinload

from rental_ledger.models import PaymentDetail, PaymentMethod, RentalContract
from rental_ledger.services.locale_service import (
    format_amount,
    format_month_year,
    format_short_date,
    format_timestamp,
)
from rental_ledger.services.month_keys import (
    add_months,
    end_of_month,
    month_key,
    normalize_paid_months,
    parse_month_key,
    start_of_month,
)

logger = logging.getLogger(__name__)

PAYMENT_METHOD_LABELS = {
    PaymentMethod.WAVE: "Wave",
    PaymentMethod.CASH: "Espèces",
    PaymentMethod.CARD: "Carte bancaire",
    PaymentMethod.ORANGE_MONEY: "Orange Money",
}

CSV_HEADERS = [
    "Client",
    "Bien",
    "Référence",
    "Montant",
    "Méthode de paiement",
    "Date de paiement",
    "Mois couverts",
    "Nombre de mois",
]


@dataclass
class PaymentFilters:
    """Criteria for the payment history list. Empty fields do not filter."""

    search: str | None = None
    payment_method: PaymentMethod | None = None
    month: str | None = None
    start_date: date | None = None
    end_date: date | None = None


@dataclass
class PaymentRow:
    """A ledger entry with its display context."""

    entry: PaymentDetail
    client_name: str
    property_title: str
    reference_number: str
    covered_months: list[str] = field(default_factory=list)

    @property
    def covered_months_text(self) -> str:
        return covered_months_text(self.covered_months)


def format_payment_method(method: PaymentMethod | str) -> str:
    try:
        return PAYMENT_METHOD_LABELS[PaymentMethod(method)]
    except ValueError:
        return str(method)


def covered_months_text(keys: list[str]) -> str:
    """Render covered months: 'janvier 2025' or 'janvier 2025 à mars 2025'."""
    if not keys:
        return ""
    ordered = sorted(keys)
    first = format_month_year(parse_month_key(ordered[0]))
    if len(ordered) == 1:
        return first
    return f"{first} à {format_month_year(parse_month_key(ordered[-1]))}"


def covered_month_keys(entries: Iterable[PaymentDetail]) -> dict[int, list[str]]:
    """Map entry id to the month keys it covered.

    Stored month keys win; otherwise months are rebuilt from the
    contract's timeline in payment order.
    """
    ordered = sorted(entries, key=lambda e: (e.location_id, e.payment_date, e.id))
    last_covered: dict[int, date] = {}
    result: dict[int, list[str]] = {}

    for entry in ordered:
        keys = normalize_paid_months(entry.months_paid)
        if not keys:
            previous = last_covered.get(entry.location_id)
            start = add_months(previous, 1) if previous else start_of_month(entry.payment_date)
            keys = [month_key(add_months(start, i)) for i in range(entry.months_covered or 1)]
        result[entry.id] = keys
        latest = parse_month_key(keys[-1])
        previous = last_covered.get(entry.location_id)
        last_covered[entry.location_id] = max(latest, previous) if previous else latest

    return result


def _matches(row: PaymentRow, filters: PaymentFilters) -> bool:
    if filters.search:
        needle = filters.search.lower()
        haystacks = (row.client_name, row.reference_number, row.property_title)
        if not any(needle in value.lower() for value in haystacks):
            return False
    if filters.month and filters.month not in row.covered_months:
        return False
    return True


def list_payments(db: Session, filters: PaymentFilters | None = None) -> list[PaymentRow]:
    """
    List ledger entries with tenant and unit details, newest first.

    Args:
        db: Database session
        filters: Optional PaymentFilters

    Returns:
        PaymentRow list sorted by payment date descending
    """
    filters = filters or PaymentFilters()

    entries = list(
        db.execute(
            select(PaymentDetail).options(
                selectinload(PaymentDetail.contract).selectinload(RentalContract.client),
                selectinload(PaymentDetail.contract).selectinload(RentalContract.unit),
            )
        ).scalars()
    )
    # Timeline needs every entry of a contract, so filter after computing it
    covered = covered_month_keys(entries)

    rows = []
    for entry in entries:
        if filters.payment_method and entry.payment_method != PaymentMethod(filters.payment_method):
            continue
        if filters.start_date and filters.end_date:
            low = start_of_month(filters.start_date)
            high = end_of_month(filters.end_date)
            if not low <= entry.payment_date <= high:
                continue

        contract = entry.contract
        row = PaymentRow(
            entry=entry,
            client_name=contract.client.full_name if contract.client else "",
            property_title=(contract.unit.title or "") if contract.unit else "",
            reference_number=(contract.unit.reference_number or "") if contract.unit else "",
            covered_months=covered.get(entry.id, []),
        )
        if _matches(row, filters):
            rows.append(row)

    rows.sort(key=lambda r: (r.entry.payment_date, r.entry.id), reverse=True)
    logger.debug("Listed %d of %d payments", len(rows), len(entries))
    return rows


def export_csv(rows: Iterable[PaymentRow]) -> str:
    """Export payment rows as CSV text with French headers."""
    buffer = io.StringIO()
    writer = csv.writer(buffer, lineterminator="\n")
    writer.writerow(CSV_HEADERS)
    for row in rows:
        writer.writerow(
            [
                row.client_name,
                row.property_title,
                row.reference_number,
                f"{Decimal(row.entry.amount):f}",
                format_payment_method(row.entry.payment_method),
                format_short_date(row.entry.payment_date),
                row.covered_months_text,
                row.entry.months_covered or 1,
            ]
        )
    return buffer.getvalue()


def receipt_number(entry: PaymentDetail) -> str:
    return f"REC-{str(entry.id)[-6:].upper().rjust(6, '0')}"


def render_receipt(row: PaymentRow, agency_name: str, issued_at: datetime) -> str:
    """Render a plain-text payment receipt."""
    entry = row.entry
    lines = [
        "Reçu de paiement",
        f"N° reçu : {receipt_number(entry)}",
        f"Date d'émission : {format_timestamp(issued_at)}",
        f"Agence : {agency_name}",
        f"Client : {row.client_name}",
        f"Bien : {row.property_title}",
        f"Référence : {row.reference_number}",
        f"Date de paiement : {format_short_date(entry.payment_date)}",
        f"Montant : {format_amount(entry.amount)}",
        f"Méthode : {format_payment_method(entry.payment_method)}",
        f"Période couverte : {row.covered_months_text}",
        "-" * 40,
        "Merci pour votre paiement.",
    ]
    return "\n".join(lines) + "\n"


def get_payment_row(db: Session, entry_id: int) -> PaymentRow | None:
    """Load one ledger entry with its display context."""
    entry = db.get(PaymentDetail, entry_id)
    if entry is None:
        return None
    siblings = db.execute(
        select(PaymentDetail).where(PaymentDetail.location_id == entry.location_id)
    ).scalars()
    covered = covered_month_keys(siblings)
    contract = entry.contract
    return PaymentRow(
        entry=entry,
        client_name=contract.client.full_name if contract.client else "",
        property_title=contract.unit.title if contract.unit else "",
        reference_number=contract.unit.reference_number if contract.unit else "",
        covered_months=covered.get(entry.id, []),
    )


def attach_receipt(db: Session, entry_id: int, receipt_url: str) -> PaymentDetail | None:
    """Store the location of an issued receipt on its ledger entry."""
    entry = db.get(PaymentDetail, entry_id)
    if entry is None:
        return None
    entry.receipt_url = receipt_url
    db.commit()
    db.refresh(entry)
    logger.info("Attached receipt to payment %d: %s", entry.id, receipt_url)
    return entry


__all__ = [
    "PAYMENT_METHOD_LABELS",
    "CSV_HEADERS",
    "PaymentFilters",
    "PaymentRow",
    "format_payment_method",
    "covered_months_text",
    "covered_month_keys",
    "list_payments",
    "export_csv",
    "receipt_number",
    "render_receipt",
    "get_payment_row",
    "attach_receipt",
]
