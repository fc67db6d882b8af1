"""Contract tests for the /api/payments endpoints."""

from datetime import date
from decimal import Decimal

import pytest

from rental_ledger.models import PaymentDetail, PaymentMethod
from rental_ledger.services.config import AppConfig, get_config
from rental_ledger.services.payment_history import CSV_HEADERS


@pytest.fixture
def payments(db_session, make_contract):
    """Two ledger entries on two contracts."""
    awa = make_contract()
    moussa = make_contract(first_name="Moussa", last_name="Ndiaye", title="Studio Plateau")
    entries = [
        PaymentDetail(
            location_id=awa.id,
            payment_date=date(2025, 1, 10),
            amount=Decimal("150000"),
            payment_method=PaymentMethod.WAVE.value,
            months_covered=1,
            months_paid=["2025-01"],
        ),
        PaymentDetail(
            location_id=moussa.id,
            payment_date=date(2025, 2, 3),
            amount=Decimal("300000"),
            payment_method=PaymentMethod.CARD.value,
            months_covered=2,
            months_paid=["2025-02", "2025-03"],
        ),
    ]
    db_session.add_all(entries)
    db_session.commit()
    return entries


class TestPaymentsList:
    """Tests for GET /api/payments."""

    def test_lists_all_newest_first(self, client, payments):
        response = client.get("/api/payments")

        assert response.status_code == 200
        data = response.json()
        assert data["total_count"] == 2
        assert [p["client_name"] for p in data["payments"]] == ["Moussa Ndiaye", "Awa Diop"]
        assert data["payments"][0]["covered_months_text"] == "février 2025 à mars 2025"

    def test_filters(self, client, payments):
        by_search = client.get("/api/payments", params={"search": "awa"}).json()
        by_method = client.get("/api/payments", params={"payment_method": "carte_bancaire"}).json()
        by_month = client.get("/api/payments", params={"month": "2025-01"}).json()

        assert by_search["total_count"] == 1
        assert by_method["payments"][0]["payment"]["payment_method"] == "carte_bancaire"
        assert [p["client_name"] for p in by_month["payments"]] == ["Awa Diop"]

    def test_unknown_method_filter(self, client, payments):
        response = client.get("/api/payments", params={"payment_method": "cheque"})

        assert response.status_code == 422


class TestPaymentsExport:
    """Tests for GET /api/payments/export.csv."""

    def test_csv_download(self, client, payments):
        response = client.get("/api/payments/export.csv")

        assert response.status_code == 200
        assert response.headers["content-type"].startswith("text/csv")
        assert "paiements_" in response.headers["content-disposition"]
        lines = response.text.splitlines()
        assert lines[0] == ",".join(CSV_HEADERS)
        assert len(lines) == 3


class TestReceipts:
    """Tests for the receipt endpoints."""

    def test_receipt_text(self, client, payments):
        client.app.dependency_overrides[get_config] = lambda: AppConfig(agency_name="Immo Dakar")
        entry_id = payments[1].id

        response = client.get(f"/api/payments/{entry_id}/receipt")

        assert response.status_code == 200
        assert response.headers["content-type"].startswith("text/plain")
        assert f"REC-{entry_id:06d}" in response.text
        assert "Agence : Immo Dakar" in response.text
        assert "Méthode : Carte bancaire" in response.text

    def test_receipt_not_found(self, client):
        response = client.get("/api/payments/999/receipt")

        assert response.status_code == 404
        assert response.json()["detail"]["error"]["code"] == "not_found"

    def test_attach_receipt_url(self, client, payments):
        entry_id = payments[0].id

        response = client.put(
            f"/api/payments/{entry_id}/receipt",
            json={"receipt_url": "https://example.com/recus/1.pdf"},
        )

        assert response.status_code == 200
        assert response.json()["receipt_url"] == "https://example.com/recus/1.pdf"

    def test_attach_receipt_requires_url(self, client, payments):
        response = client.put(f"/api/payments/{payments[0].id}/receipt", json={"receipt_url": ""})

        assert response.status_code == 422


class TestHealth:
    """Tests for GET /health."""

    def test_health(self, client):
        assert client.get("/health").json() == {"status": "ok"}
