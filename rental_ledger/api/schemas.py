"""Pydantic schemas for the ledger API."""

from datetime import date, datetime
from decimal import Decimal

from pydantic import BaseModel, ConfigDict, Field

from rental_ledger.models import PaymentMethod
from rental_ledger.services.locale_service import format_month_year
from rental_ledger.services.month_calendar import MonthSelection


class MonthResponse(BaseModel):
    """One month of the payment calendar."""

    index: int  # Position within the whole 36-month window
    key: str  # "YYYY-MM"
    label: str  # Localized month name, e.g. "janvier 2025"
    selected: bool
    paid: bool

    @classmethod
    def from_selection(cls, index: int, month: MonthSelection) -> "MonthResponse":
        return cls(
            index=index,
            key=month.key,
            label=format_month_year(month.date),
            selected=month.selected,
            paid=month.paid,
        )


class CalendarResponse(BaseModel):
    """Response schema for GET /{contract_id}/calendar."""

    contract_id: int
    page: int
    total_pages: int
    months: list[MonthResponse]
    selected_keys: list[str]  # Selected unpaid months over the whole window
    selected_count: int
    amount: Decimal
    monthly_price: Decimal


class ToggleRequest(BaseModel):
    """Request payload for POST /{contract_id}/calendar/toggle."""

    index: int = Field(..., ge=0, description="Clicked month position in the window")
    selected: list[str] | None = Field(
        None, description="Currently selected month keys (default: generated selection)"
    )
    as_of: date | None = Field(None, description="Reference date (default: today)")


class SelectionResponse(BaseModel):
    """Reconciled selection after a click."""

    selected_keys: list[str]
    selected_count: int
    amount: Decimal


class CommitRequest(BaseModel):
    """Request payload for POST /{contract_id}/payments."""

    selected: list[str] = Field(..., description="Month keys to pay")
    payment_method: PaymentMethod
    payment_date: date
    amount: Decimal | None = Field(None, description="Default: months x monthly rent")
    as_of: date | None = None


class PaymentResponse(BaseModel):
    """A ledger entry."""

    id: int
    location_id: int
    payment_date: date
    amount: Decimal
    payment_method: PaymentMethod
    months_covered: int
    months_paid: list[str]
    receipt_url: str | None = None
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class CommitResponse(BaseModel):
    """Result of a payment commit."""

    payment: PaymentResponse
    rental_end_date: date | None
    paid_months: list[str]
    selected_count: int
    replayed: bool = False


class PaymentStatusRequest(BaseModel):
    """Request payload for PUT /{contract_id}/payment-status."""

    paid: bool


class ContractResponse(BaseModel):
    """A rental contract."""

    id: int
    property_id: int
    client_id: int
    rental_start_date: date | None
    rental_end_date: date | None
    effective_end_date: datetime | None
    status: str
    is_paid: bool
    paid_months_count: int

    model_config = ConfigDict(from_attributes=True)


class PaymentRowResponse(BaseModel):
    """A row of the payment history."""

    payment: PaymentResponse
    client_name: str
    property_title: str
    reference_number: str
    covered_months: list[str]
    covered_months_text: str


class PaymentsResponse(BaseModel):
    """Response schema for the payment history list."""

    payments: list[PaymentRowResponse]
    total_count: int


class ReceiptRequest(BaseModel):
    """Request payload for PUT /api/payments/{payment_id}/receipt."""

    receipt_url: str = Field(..., min_length=1, max_length=500)
