"""Rental contract ORM model (a tenant's occupancy of a unit)."""

from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from typing import Any

from sqlalchemy import JSON, Boolean, Date, DateTime, ForeignKey, Index, Integer, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from rental_ledger.models import Base, BaseModel
from rental_ledger.models.property import RentalType


class ContractStatus(str, Enum):
    """Lifecycle of a rental contract. ACTIVE -> TERMINATED only."""

    ACTIVE = "EN COURS"
    TERMINATED = "TERMINÉ"


class RentalContract(Base, BaseModel):
    """Model representing a rental contract.

    For long-term rentals the contract carries the list of months already
    paid ("YYYY-MM" keys) and a rental end date that always points at the
    last day of the latest paid month. Short-term rentals only use the
    is_paid flag.

    Contracts are never deleted; they are terminated instead.
    """

    __tablename__ = "locations"

    property_id: Mapped[int] = mapped_column(
        ForeignKey("properties.id"),
        nullable=False,
        index=True,
    )
    client_id: Mapped[int] = mapped_column(
        ForeignKey("clients.id"),
        nullable=False,
        index=True,
    )

    rental_start_date: Mapped[date | None] = mapped_column(Date, nullable=True)
    rental_end_date: Mapped[date | None] = mapped_column(
        Date,
        nullable=True,
        comment="Paid-through date (end of the latest paid month)",
    )
    effective_end_date: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True),
        nullable=True,
        comment="Set when the contract is terminated",
    )
    status: Mapped[ContractStatus] = mapped_column(
        String(20),
        nullable=False,
        default=ContractStatus.ACTIVE.value,
    )

    # Payment state
    is_paid: Mapped[bool] = mapped_column(
        Boolean,
        nullable=False,
        default=False,
        comment="Payment flag (the only payment state for short-term rentals)",
    )
    paid_months: Mapped[Any] = mapped_column(
        JSON,
        nullable=True,
        comment="Paid month keys; older rows may hold a JSON string or an object",
    )
    paid_months_count: Mapped[int] = mapped_column(
        Integer,
        nullable=False,
        default=0,
    )

    # Relationships
    unit: Mapped["Property"] = relationship(  # noqa: F821
        "Property",
        back_populates="contracts",
        foreign_keys=[property_id],
    )
    client: Mapped["Client"] = relationship(  # noqa: F821
        "Client",
        back_populates="contracts",
        foreign_keys=[client_id],
    )
    payments: Mapped[list["PaymentDetail"]] = relationship(  # noqa: F821
        "PaymentDetail",
        back_populates="contract",
        order_by="PaymentDetail.payment_date",
    )

    __table_args__ = (
        Index("idx_location_status_paid", "status", "is_paid"),
    )

    @property
    def is_long_term(self) -> bool:
        return self.unit is not None and self.unit.rental_type == RentalType.LONG_TERM

    @property
    def monthly_price(self) -> Decimal:
        return Decimal(self.unit.price) if self.unit is not None else Decimal(0)

    def __repr__(self) -> str:
        return (
            f"<RentalContract(id={self.id}, property_id={self.property_id}, "
            f"status={self.status}, rental_end_date={self.rental_end_date})>"
        )


__all__ = ["RentalContract", "ContractStatus"]
