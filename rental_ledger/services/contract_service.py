"""Rental contract lifecycle service."""

import logging
from datetime import date, datetime, timezone

from sqlalchemy import select
from sqlalchemy.orm import Session

from rental_ledger.models import ContractStatus, PropertyStatus, RentalContract
from rental_ledger.services.audit_service import AuditService
from rental_ledger.services.errors import ContractAlreadyTerminatedError, ContractNotFoundError

logger = logging.getLogger(__name__)


class ContractService:
    """Service for rental contract state transitions.

    A contract is either EN COURS or TERMINÉ; termination is one-way and
    does not touch the payment ledger.
    """

    def __init__(self, db_session: Session):
        """Initialize with database session."""
        self.db = db_session

    def get_by_id(self, contract_id: int) -> RentalContract:
        contract = self.db.get(RentalContract, contract_id)
        if contract is None:
            raise ContractNotFoundError(contract_id)
        return contract

    def terminate(self, contract_id: int, now: datetime | None = None) -> RentalContract:
        """Terminate a contract and release its unit.

        Args:
            contract_id: Contract to terminate
            now: Effective end timestamp (default: current UTC time)

        Returns:
            Updated RentalContract

        Raises:
            ContractNotFoundError: If the contract does not exist
            ContractAlreadyTerminatedError: If it was already terminated
        """
        contract = self.get_by_id(contract_id)
        if contract.status == ContractStatus.TERMINATED:
            raise ContractAlreadyTerminatedError(contract_id)

        effective_end = now or datetime.now(timezone.utc)
        contract.status = ContractStatus.TERMINATED.value
        contract.effective_end_date = effective_end
        if contract.unit is not None:
            contract.unit.status = PropertyStatus.AVAILABLE.value

        AuditService.log_contract(
            self.db,
            contract.id,
            "terminate",
            {"effective_end_date": effective_end.isoformat()},
        )
        self.db.commit()
        self.db.refresh(contract)

        logger.info(
            "Terminated contract: id=%d property_id=%d effective_end_date=%s",
            contract.id,
            contract.property_id,
            effective_end,
        )
        return contract

    def expire_overdue_payments(self, today: date | None = None) -> int:
        """Clear the paid flag of active contracts whose paid-through date has passed.

        Args:
            today: Reference date (default: date.today())

        Returns:
            Number of contracts marked unpaid
        """
        today = today or date.today()
        overdue = list(
            self.db.execute(
                select(RentalContract).where(
                    RentalContract.status == ContractStatus.ACTIVE.value,
                    RentalContract.is_paid.is_(True),
                    RentalContract.rental_end_date.is_not(None),
                    RentalContract.rental_end_date < today,
                )
            ).scalars()
        )

        for contract in overdue:
            contract.is_paid = False
            AuditService.log_contract(
                self.db,
                contract.id,
                "expire",
                {"rental_end_date": contract.rental_end_date.isoformat()},
            )
        self.db.commit()

        if overdue:
            logger.info(
                "%d contracts marked unpaid: rental end date before %s", len(overdue), today
            )
        return len(overdue)


__all__ = ["ContractService"]
