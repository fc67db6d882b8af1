"""Property ORM model for units offered for rent by the agency."""

from decimal import Decimal
from enum import Enum

from sqlalchemy import Index, Numeric, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from rental_ledger.models import Base, BaseModel


class RentalType(str, Enum):
    """How a unit is billed."""

    LONG_TERM = "longue_duree"
    """Billed monthly; payments are tracked month by month."""

    SHORT_TERM = "courte_duree"
    """Billed once per stay; only a paid/unpaid flag is tracked."""


class PropertyStatus(str, Enum):
    """Availability of a unit."""

    AVAILABLE = "disponible"
    RENTED = "loue"


class Property(Base, BaseModel):
    """Model representing a rentable unit.

    The price is the monthly rent for long-term units and is used to compute
    the amount due when months are selected for payment.
    """

    __tablename__ = "properties"

    title: Mapped[str] = mapped_column(
        String(200),
        nullable=False,
    )
    reference_number: Mapped[str] = mapped_column(
        String(50),
        nullable=False,
        unique=True,
        comment="Agency reference shown on receipts and exports",
    )
    address: Mapped[str | None] = mapped_column(
        String(300),
        nullable=True,
    )
    price: Mapped[Decimal] = mapped_column(
        Numeric(12, 2),
        nullable=False,
        comment="Monthly rent",
    )
    rental_type: Mapped[RentalType] = mapped_column(
        String(20),
        nullable=False,
        default=RentalType.LONG_TERM.value,
        comment="'longue_duree' or 'courte_duree'",
    )
    status: Mapped[PropertyStatus] = mapped_column(
        String(20),
        nullable=False,
        default=PropertyStatus.AVAILABLE.value,
    )

    contracts: Mapped[list["RentalContract"]] = relationship(  # noqa: F821
        "RentalContract",
        back_populates="unit",
    )

    __table_args__ = (Index("idx_property_status", "status"),)

    def __repr__(self) -> str:
        return (
            f"<Property(id={self.id}, reference={self.reference_number!r}, "
            f"price={self.price}, rental_type={self.rental_type})>"
        )


__all__ = ["Property", "PropertyStatus", "RentalType"]
