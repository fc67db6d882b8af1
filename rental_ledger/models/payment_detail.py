"""Payment ledger ORM model: one immutable record per payment event."""

from datetime import date
from decimal import Decimal
from enum import Enum

from sqlalchemy import JSON, Date, ForeignKey, Index, Integer, Numeric, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from rental_ledger.models import Base, BaseModel


class PaymentMethod(str, Enum):
    """Accepted payment methods."""

    WAVE = "wave"
    CASH = "espece"
    CARD = "carte_bancaire"
    ORANGE_MONEY = "orange_money"


class PaymentDetail(Base, BaseModel):
    """Model representing a rent payment.

    Entries are created by the payment committer and never edited, except
    for attaching a receipt URL once the receipt has been issued.
    """

    __tablename__ = "payment_details"

    location_id: Mapped[int] = mapped_column(
        ForeignKey("locations.id"),
        nullable=False,
        index=True,
        comment="Rental contract the payment settles",
    )
    payment_date: Mapped[date] = mapped_column(
        Date,
        nullable=False,
        index=True,
    )
    amount: Mapped[Decimal] = mapped_column(
        Numeric(12, 2),
        nullable=False,
    )
    payment_method: Mapped[PaymentMethod] = mapped_column(
        String(20),
        nullable=False,
    )
    months_covered: Mapped[int] = mapped_column(
        Integer,
        nullable=False,
        default=1,
    )
    months_paid: Mapped[list[str]] = mapped_column(
        JSON,
        nullable=False,
        default=list,
        comment="Month keys ('YYYY-MM') settled by this payment",
    )
    idempotency_key: Mapped[str | None] = mapped_column(
        String(100),
        nullable=True,
        unique=True,
        comment="Client-supplied key; a repeated commit returns the original entry",
    )
    receipt_url: Mapped[str | None] = mapped_column(
        String(500),
        nullable=True,
    )

    contract: Mapped["RentalContract"] = relationship(  # noqa: F821
        "RentalContract",
        back_populates="payments",
        foreign_keys=[location_id],
    )

    __table_args__ = (
        Index("idx_payment_location_date", "location_id", "payment_date"),
    )

    def __repr__(self) -> str:
        return (
            f"<PaymentDetail(id={self.id}, location_id={self.location_id}, amount={self.amount}, "
            f"method={self.payment_method}, months_covered={self.months_covered})>"
        )


__all__ = ["PaymentDetail", "PaymentMethod"]
