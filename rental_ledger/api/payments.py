"""Payment history endpoints: listing, CSV export and receipts."""

import logging
from datetime import date, datetime, timezone

from fastapi import APIRouter, Depends, Response
from fastapi.responses import PlainTextResponse
from sqlalchemy.orm import Session

from rental_ledger.api.errors import NotFoundError, raise_app_error
from rental_ledger.api.schemas import (
    PaymentResponse,
    PaymentRowResponse,
    PaymentsResponse,
    ReceiptRequest,
)
from rental_ledger.models import PaymentMethod
from rental_ledger.services import get_db
from rental_ledger.services.config import AppConfig, get_config
from rental_ledger.services.payment_history import (
    PaymentFilters,
    PaymentRow,
    attach_receipt,
    export_csv,
    get_payment_row,
    list_payments,
    render_receipt,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/payments", tags=["payments"])


def _filters(
    search: str | None = None,
    payment_method: PaymentMethod | None = None,
    month: str | None = None,
    start_date: date | None = None,
    end_date: date | None = None,
) -> PaymentFilters:
    return PaymentFilters(
        search=search,
        payment_method=payment_method,
        month=month,
        start_date=start_date,
        end_date=end_date,
    )


def _row_response(row: PaymentRow) -> PaymentRowResponse:
    return PaymentRowResponse(
        payment=PaymentResponse.model_validate(row.entry),
        client_name=row.client_name,
        property_title=row.property_title,
        reference_number=row.reference_number,
        covered_months=row.covered_months,
        covered_months_text=row.covered_months_text,
    )


@router.get("", response_model=PaymentsResponse)
async def get_payments(
    filters: PaymentFilters = Depends(_filters),  # noqa: B008
    db: Session = Depends(get_db),  # noqa: B008
) -> PaymentsResponse:
    """List payments, newest first, filtered by tenant/unit text, method, month and date range."""
    rows = list_payments(db, filters)
    return PaymentsResponse(
        payments=[_row_response(row) for row in rows],
        total_count=len(rows),
    )


@router.get("/export.csv")
async def export_payments(
    filters: PaymentFilters = Depends(_filters),  # noqa: B008
    db: Session = Depends(get_db),  # noqa: B008
) -> Response:
    """Export the filtered payment list as CSV."""
    rows = list_payments(db, filters)
    filename = f"paiements_{date.today().isoformat()}.csv"
    logger.info("Exporting %d payments to %s", len(rows), filename)
    return Response(
        content=export_csv(rows),
        media_type="text/csv; charset=utf-8",
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )


@router.get("/{payment_id}/receipt", response_class=PlainTextResponse)
async def get_receipt(
    payment_id: int,
    db: Session = Depends(get_db),  # noqa: B008
    config: AppConfig = Depends(get_config),  # noqa: B008
) -> str:
    """Render the receipt of a payment."""
    row = get_payment_row(db, payment_id)
    if row is None:
        raise_app_error(NotFoundError(f"Payment {payment_id} not found"))
    return render_receipt(row, config.agency_name, datetime.now(timezone.utc))


@router.put("/{payment_id}/receipt", response_model=PaymentResponse)
async def put_receipt(
    payment_id: int,
    payload: ReceiptRequest,
    db: Session = Depends(get_db),  # noqa: B008
) -> PaymentResponse:
    """Attach the URL of an issued receipt to a payment."""
    entry = attach_receipt(db, payment_id, payload.receipt_url)
    if entry is None:
        raise_app_error(NotFoundError(f"Payment {payment_id} not found"))
    return PaymentResponse.model_validate(entry)
