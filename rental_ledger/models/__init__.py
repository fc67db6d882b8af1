"""SQLAlchemy base model with common fields and model exports."""

from datetime import datetime, timezone

from sqlalchemy import DateTime
from sqlalchemy.orm import Mapped, declarative_base, mapped_column

# Base class for all models
Base = declarative_base()


class BaseModel:
    """Base model with common timestamp fields."""

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        nullable=False,
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
        nullable=False,
    )


# Import models to register them with Base (after Base is defined)
# This must be after Base declaration to avoid circular imports
from rental_ledger.models.audit_log import AuditLog  # noqa: E402
from rental_ledger.models.client import Client  # noqa: E402
from rental_ledger.models.payment_detail import PaymentDetail, PaymentMethod  # noqa: E402
from rental_ledger.models.property import Property, PropertyStatus, RentalType  # noqa: E402
from rental_ledger.models.rental_contract import ContractStatus, RentalContract  # noqa: E402

__all__ = [
    "Base",
    "BaseModel",
    "AuditLog",
    "Client",
    "ContractStatus",
    "PaymentDetail",
    "PaymentMethod",
    "Property",
    "PropertyStatus",
    "RentalContract",
    "RentalType",
]
