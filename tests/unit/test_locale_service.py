"""Unit tests for locale formatting and payment history helpers."""

from datetime import date, datetime
from decimal import Decimal
from types import SimpleNamespace

from rental_ledger.models import PaymentMethod
from rental_ledger.services import locale_service
from rental_ledger.services.locale_service import (
    configure_locale,
    format_amount,
    format_month_year,
    format_short_date,
    format_timestamp,
)
from rental_ledger.services.payment_history import (
    CSV_HEADERS,
    PaymentRow,
    covered_month_keys,
    covered_months_text,
    export_csv,
    format_payment_method,
    receipt_number,
)


def _entry(id, location_id, payment_date, months_covered=1, months_paid=None, **kwargs):
    return SimpleNamespace(
        id=id,
        location_id=location_id,
        payment_date=payment_date,
        months_covered=months_covered,
        months_paid=months_paid if months_paid is not None else [],
        amount=kwargs.get("amount", Decimal("150000.00")),
        payment_method=kwargs.get("payment_method", PaymentMethod.WAVE.value),
    )


class TestLocaleFormatting:
    """Test French formatting of months, dates and amounts."""

    def test_month_year_is_french(self):
        assert format_month_year(date(2025, 1, 1)) == "janvier 2025"
        assert format_month_year(date(2025, 8, 1)) == "août 2025"

    def test_short_date(self):
        assert format_short_date(date(2025, 3, 5)) == "05/03/2025"

    def test_timestamp(self):
        assert format_timestamp(datetime(2025, 3, 5, 14, 7)) == "05/03/2025 à 14:07"

    def test_amount_without_symbol_groups_thousands(self):
        formatted = format_amount(Decimal("450000"), include_symbol=False)
        assert formatted.replace("\u202f", " ").replace("\xa0", " ") == "450 000"

    def test_amount_with_symbol_mentions_currency(self):
        formatted = format_amount(Decimal("150000"))
        assert "150" in formatted
        assert "CFA" in formatted or "XOF" in formatted

    def test_configure_locale_switches_language_and_currency(self, monkeypatch):
        monkeypatch.setattr(locale_service, "LOCALE", locale_service.LOCALE)
        monkeypatch.setattr(locale_service, "CURRENCY", locale_service.CURRENCY)

        configure_locale("en_US", "usd")

        assert format_month_year(date(2025, 1, 1)) == "January 2025"
        assert locale_service.CURRENCY == "USD"


class TestPaymentMethodLabels:
    """Test display labels of payment methods."""

    def test_known_methods(self):
        assert format_payment_method("wave") == "Wave"
        assert format_payment_method(PaymentMethod.CASH) == "Espèces"
        assert format_payment_method("carte_bancaire") == "Carte bancaire"
        assert format_payment_method("orange_money") == "Orange Money"

    def test_unknown_method_is_shown_raw(self):
        assert format_payment_method("cheque") == "cheque"


class TestCoveredMonths:
    """Test covered-month text and legacy timeline reconstruction."""

    def test_single_month_text(self):
        assert covered_months_text(["2025-01"]) == "janvier 2025"

    def test_range_text(self):
        assert covered_months_text(["2025-03", "2025-01", "2025-02"]) == "janvier 2025 à mars 2025"

    def test_empty_text(self):
        assert covered_months_text([]) == ""

    def test_stored_keys_win(self):
        entries = [_entry(1, 10, date(2025, 5, 2), 2, ["2025-01", "2025-02"])]
        assert covered_month_keys(entries) == {1: ["2025-01", "2025-02"]}

    def test_legacy_entries_follow_the_timeline(self):
        entries = [
            _entry(2, 10, date(2025, 2, 20), 1),
            _entry(1, 10, date(2025, 1, 10), 2),
        ]
        assert covered_month_keys(entries) == {
            1: ["2025-01", "2025-02"],
            2: ["2025-03"],
        }

    def test_legacy_entry_continues_after_stored_keys(self):
        entries = [
            _entry(1, 10, date(2025, 1, 10), 3, ["2025-01", "2025-02", "2025-03"]),
            _entry(2, 10, date(2025, 1, 30), 1),
        ]
        assert covered_month_keys(entries)[2] == ["2025-04"]

    def test_timelines_are_per_contract(self):
        entries = [
            _entry(1, 10, date(2025, 1, 10), 2),
            _entry(2, 11, date(2025, 4, 3), 1),
        ]
        assert covered_month_keys(entries)[2] == ["2025-04"]


class TestExport:
    """Test CSV export and receipt numbering."""

    def test_csv_has_headers_and_rows(self):
        row = PaymentRow(
            entry=_entry(7, 10, date(2025, 3, 1), 3, amount=Decimal("450000.00")),
            client_name="Awa Diop",
            property_title="Appartement F3",
            reference_number="LOC-001",
            covered_months=["2025-01", "2025-02", "2025-03"],
        )
        lines = export_csv([row]).splitlines()
        assert lines[0] == ",".join(CSV_HEADERS)
        assert lines[1] == (
            "Awa Diop,Appartement F3,LOC-001,450000.00,Wave,01/03/2025,"
            "janvier 2025 à mars 2025,3"
        )

    def test_csv_without_rows_has_only_headers(self):
        assert export_csv([]).splitlines() == [",".join(CSV_HEADERS)]

    def test_receipt_number_is_zero_padded(self):
        assert receipt_number(SimpleNamespace(id=42)) == "REC-000042"

    def test_receipt_number_keeps_last_six_digits(self):
        assert receipt_number(SimpleNamespace(id=12345678)) == "REC-345678"
