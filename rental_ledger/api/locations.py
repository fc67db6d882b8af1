"""Rental contract endpoints: payment calendar, month selection and commits."""

import logging
import time
from datetime import date

from fastapi import APIRouter, Depends, Header, status
from sqlalchemy.orm import Session

from rental_ledger.api.errors import (
    InvalidRequestError,
    NotFoundError,
    from_ledger_error,
    raise_app_error,
)
from rental_ledger.api.schemas import (
    CalendarResponse,
    CommitRequest,
    CommitResponse,
    ContractResponse,
    MonthResponse,
    PaymentResponse,
    PaymentStatusRequest,
    SelectionResponse,
    ToggleRequest,
)
from rental_ledger.services import get_db
from rental_ledger.services.contract_service import ContractService
from rental_ledger.services.errors import LedgerError
from rental_ledger.services.month_calendar import paginate
from rental_ledger.services.month_keys import normalize_paid_months
from rental_ledger.services.rental_payment_service import RentalPaymentService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/locations", tags=["locations"])


def _log_debug(endpoint: str, start_time: float, contract_id: int, **kwargs) -> None:
    """Log API request with timing at DEBUG level."""
    duration_ms = int((time.time() - start_time) * 1000)
    extra = " ".join(f"{k}={v}" for k, v in kwargs.items())
    logger.debug(
        "locations.%s: contract_id=%d %sduration_ms=%d",
        endpoint,
        contract_id,
        f"{extra} " if extra else "",
        duration_ms,
    )


@router.get("/{contract_id}/calendar", response_model=CalendarResponse)
async def get_calendar(
    contract_id: int,
    page: int = 0,
    as_of: date | None = None,
    db: Session = Depends(get_db),  # noqa: B008
) -> CalendarResponse:
    """
    Return one page (12 months) of a long-term contract's payment calendar.

    Raises:
        404: Contract not found
        400: Contract is short-term
    """
    start_time = time.time()
    service = RentalPaymentService(db)
    try:
        months = service.build_calendar(contract_id, today=as_of)
        summary = service.summarize_selection(contract_id, months)
        contract = service.get_contract(contract_id)
    except LedgerError as e:
        raise_app_error(from_ledger_error(e))

    calendar_page = paginate(months, page)
    _log_debug("calendar", start_time, contract_id, page=calendar_page.page)
    return CalendarResponse(
        contract_id=contract_id,
        page=calendar_page.page,
        total_pages=calendar_page.total_pages,
        months=[
            MonthResponse.from_selection(calendar_page.offset + i, month)
            for i, month in enumerate(calendar_page.months)
        ],
        selected_keys=summary.selected_keys,
        selected_count=summary.selected_count,
        amount=summary.amount,
        monthly_price=contract.monthly_price,
    )


@router.post("/{contract_id}/calendar/toggle", response_model=SelectionResponse)
async def toggle_month(
    contract_id: int,
    payload: ToggleRequest,
    db: Session = Depends(get_db),  # noqa: B008
) -> SelectionResponse:
    """
    Apply a click on a month and return the reconciled selection.

    Raises:
        404: Contract not found
        400: Index outside the window or short-term contract
        409: Clicked month is paid (look it up via /months/{key}/payment)
    """
    service = RentalPaymentService(db)
    try:
        result = service.toggle(
            contract_id, payload.index, selected_keys=payload.selected, today=payload.as_of
        )
    except IndexError as e:
        raise_app_error(InvalidRequestError(str(e), "index_out_of_range"))
    except LedgerError as e:
        raise_app_error(from_ledger_error(e))

    return SelectionResponse(
        selected_keys=result.selected_keys,
        selected_count=result.selected_count,
        amount=result.amount,
    )


@router.post(
    "/{contract_id}/payments",
    response_model=CommitResponse,
    status_code=status.HTTP_201_CREATED,
)
async def commit_payment(
    contract_id: int,
    payload: CommitRequest,
    db: Session = Depends(get_db),  # noqa: B008
    idempotency_key: str | None = Header(None, alias="Idempotency-Key"),  # noqa: B008
) -> CommitResponse:
    """
    Record a payment for the selected months of a long-term contract.

    Returns:
        201: CommitResponse with the ledger entry and new paid-through date

    Raises:
        400: Empty or non-contiguous selection, invalid amount, short-term contract
        404: Contract not found
        409: A selected month is already paid, or the contract is terminated
        503: Database write failed; nothing was recorded
    """
    start_time = time.time()
    service = RentalPaymentService(db)
    try:
        months = service.build_calendar(
            contract_id, today=payload.as_of, selected_keys=payload.selected
        )
        result = service.commit_payment(
            contract_id,
            months,
            payment_method=payload.payment_method,
            payment_date=payload.payment_date,
            amount=payload.amount,
            idempotency_key=idempotency_key,
        )
    except LedgerError as e:
        raise_app_error(from_ledger_error(e))
    except ValueError as e:
        raise_app_error(InvalidRequestError(str(e)))

    _log_debug(
        "commit",
        start_time,
        contract_id,
        payment_id=result.entry.id,
        replayed=result.replayed,
    )
    return CommitResponse(
        payment=PaymentResponse.model_validate(result.entry),
        rental_end_date=result.contract.rental_end_date,
        paid_months=normalize_paid_months(result.contract.paid_months),
        selected_count=result.selected_count,
        replayed=result.replayed,
    )


@router.put("/{contract_id}/payment-status", response_model=ContractResponse)
async def set_payment_status(
    contract_id: int,
    payload: PaymentStatusRequest,
    db: Session = Depends(get_db),  # noqa: B008
) -> ContractResponse:
    """Mark a short-term contract as paid or unpaid."""
    try:
        contract = RentalPaymentService(db).set_short_term_payment(contract_id, payload.paid)
    except LedgerError as e:
        raise_app_error(from_ledger_error(e))
    return ContractResponse.model_validate(contract)


@router.get("/{contract_id}/payments", response_model=list[PaymentResponse])
async def list_contract_payments(
    contract_id: int,
    db: Session = Depends(get_db),  # noqa: B008
) -> list[PaymentResponse]:
    """List a contract's ledger entries, oldest first."""
    try:
        entries = RentalPaymentService(db).list_contract_payments(contract_id)
    except LedgerError as e:
        raise_app_error(from_ledger_error(e))
    return [PaymentResponse.model_validate(entry) for entry in entries]


@router.get("/{contract_id}/months/{month}/payment", response_model=PaymentResponse)
async def get_month_payment(
    contract_id: int,
    month: str,
    db: Session = Depends(get_db),  # noqa: B008
) -> PaymentResponse:
    """
    Return the payment that settled a month.

    Raises:
        400: month is not a YYYY-MM key
        404: Contract not found or month not paid
    """
    try:
        entry = RentalPaymentService(db).get_payment_for_month(contract_id, month)
    except LedgerError as e:
        raise_app_error(from_ledger_error(e))
    except ValueError as e:
        raise_app_error(InvalidRequestError(str(e), "invalid_month"))

    if entry is None:
        raise_app_error(NotFoundError(f"No payment recorded for {month}"))
    return PaymentResponse.model_validate(entry)


@router.post("/{contract_id}/terminate", response_model=ContractResponse)
async def terminate_contract(
    contract_id: int,
    db: Session = Depends(get_db),  # noqa: B008
) -> ContractResponse:
    """Terminate a contract and release its unit."""
    try:
        contract = ContractService(db).terminate(contract_id)
    except LedgerError as e:
        raise_app_error(from_ledger_error(e))
    return ContractResponse.model_validate(contract)

