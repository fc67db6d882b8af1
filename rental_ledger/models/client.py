"""Client ORM model for tenants renting agency properties."""

from sqlalchemy import String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from rental_ledger.models import Base, BaseModel


class Client(Base, BaseModel):
    """Model representing a tenant."""

    __tablename__ = "clients"

    first_name: Mapped[str | None] = mapped_column(String(100), nullable=True)
    last_name: Mapped[str | None] = mapped_column(String(100), nullable=True)
    email: Mapped[str | None] = mapped_column(String(255), nullable=True)
    phone_number: Mapped[str | None] = mapped_column(String(50), nullable=True)

    contracts: Mapped[list["RentalContract"]] = relationship(  # noqa: F821
        "RentalContract",
        back_populates="client",
    )

    @property
    def full_name(self) -> str:
        return f"{self.first_name or ''} {self.last_name or ''}".strip()

    def __repr__(self) -> str:
        return f"<Client(id={self.id}, name={self.full_name!r})>"


__all__ = ["Client"]
