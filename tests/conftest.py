"""Pytest configuration and shared fixtures."""

import os

# Set test database URL BEFORE any imports from rental_ledger
os.environ["DATABASE_URL"] = "sqlite:///:memory:"
os.environ.setdefault("LOCALE", "fr_FR")
os.environ.setdefault("CURRENCY", "XOF")

from datetime import date  # noqa: E402
from decimal import Decimal  # noqa: E402

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402
from sqlalchemy import create_engine  # noqa: E402
from sqlalchemy.orm import sessionmaker  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402

from rental_ledger.models import (  # noqa: E402
    Base,
    Client,
    Property,
    RentalContract,
    RentalType,
)


@pytest.fixture
def db_session():
    """Provide an in-memory database session with all tables created."""
    engine = create_engine(
        "sqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(engine)
    SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    session = SessionLocal()
    yield session
    session.close()
    Base.metadata.drop_all(engine)
    engine.dispose()


@pytest.fixture
def make_contract(db_session):
    """Factory creating a client, a unit and a rental contract."""
    counter = {"n": 0}

    def _make(
        rental_start_date: date | None = date(2025, 1, 15),
        rental_end_date: date | None = None,
        paid_months=None,
        price: Decimal = Decimal("150000"),
        rental_type: RentalType = RentalType.LONG_TERM,
        is_paid: bool = False,
        first_name: str = "Awa",
        last_name: str = "Diop",
        title: str = "Appartement F3 Almadies",
    ) -> RentalContract:
        counter["n"] += 1
        client = Client(first_name=first_name, last_name=last_name, phone_number="+221770000000")
        unit = Property(
            title=title,
            reference_number=f"LOC-{counter['n']:03d}",
            price=price,
            rental_type=rental_type.value,
            status="loue",
        )
        db_session.add_all([client, unit])
        db_session.flush()
        contract = RentalContract(
            property_id=unit.id,
            client_id=client.id,
            rental_start_date=rental_start_date,
            rental_end_date=rental_end_date,
            paid_months=paid_months,
            is_paid=is_paid,
        )
        db_session.add(contract)
        db_session.commit()
        db_session.refresh(contract)
        return contract

    return _make


@pytest.fixture
def client(db_session):
    """Provide a FastAPI test client bound to the test session."""
    from rental_ledger.api.app import app
    from rental_ledger.services import get_db

    def override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = override_get_db
    yield TestClient(app)
    app.dependency_overrides.clear()
