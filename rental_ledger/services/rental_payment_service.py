"""Rental payment service: calendar, month selection and payment commits.

Provides methods for:
- Building the month calendar of a long-term contract
- Reconciling month clicks into a contiguous selection
- Committing a payment (ledger entry + contract update, one transaction)
- Toggling the paid flag of short-term contracts
- Looking up the payment that settled a given month
"""

import logging
from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from typing import Iterable, Sequence

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from rental_ledger.models import ContractStatus, PaymentDetail, PaymentMethod, RentalContract
from rental_ledger.services.audit_service import AuditService
from rental_ledger.services.errors import (
    ContractAlreadyTerminatedError,
    ContractNotFoundError,
    ContractNotLongTermError,
    ContractNotShortTermError,
    EmptySelectionError,
    IdempotencyKeyConflictError,
    MonthAlreadyPaidError,
    NonContiguousSelectionError,
    PaymentCommitError,
    SelectionOutOfOrderError,
)
from rental_ledger.services.month_calendar import MonthSelection, generate_month_calendar
from rental_ledger.services.month_keys import end_of_month, normalize_paid_months, parse_month_key
from rental_ledger.services.selection import (
    SelectionResult,
    apply_selected_keys,
    first_skipped_unpaid,
    fold_committed,
    is_contiguous,
    selected_unpaid,
    summarize,
    toggle_month,
)

logger = logging.getLogger(__name__)


@dataclass
class PaymentCommitResult:
    """Outcome of a payment commit."""

    entry: PaymentDetail
    contract: RentalContract
    months: tuple[MonthSelection, ...]
    """Caller's window with the committed months marked paid and deselected."""
    replayed: bool = False
    """True when the idempotency key matched an earlier commit."""

    @property
    def selected_count(self) -> int:
        return len(selected_unpaid(self.months))


class RentalPaymentService:
    """Rent payment operations for a single database session."""

    def __init__(self, db: Session):
        """Initialize with database session."""
        self.db = db

    def get_contract(self, contract_id: int) -> RentalContract:
        """Get rental contract by ID.

        Raises:
            ContractNotFoundError: If no contract has this ID
        """
        contract = self.db.get(RentalContract, contract_id)
        if contract is None:
            raise ContractNotFoundError(contract_id)
        return contract

    def _get_long_term_contract(self, contract_id: int) -> RentalContract:
        contract = self.get_contract(contract_id)
        if not contract.is_long_term:
            raise ContractNotLongTermError(contract_id)
        return contract

    def build_calendar(
        self,
        contract_id: int,
        today: date | None = None,
        selected_keys: Iterable[str] | None = None,
    ) -> tuple[MonthSelection, ...]:
        """Build the 36-month payment calendar of a long-term contract.

        Args:
            contract_id: Rental contract ID
            today: Current date (default: date.today())
            selected_keys: Client-held selection replacing the generated one

        Returns:
            Calendar window

        Raises:
            ContractNotFoundError: If the contract does not exist
            ContractNotLongTermError: If the contract is billed per stay
        """
        contract = self._get_long_term_contract(contract_id)
        months = generate_month_calendar(
            contract.rental_start_date,
            contract.rental_end_date,
            contract.paid_months,
            today or date.today(),
        )
        if selected_keys is not None:
            months = apply_selected_keys(months, selected_keys)
        return months

    def toggle(
        self,
        contract_id: int,
        index: int,
        selected_keys: Iterable[str] | None = None,
        today: date | None = None,
    ) -> SelectionResult:
        """Apply a month click to a contract's calendar.

        Raises:
            IndexError: If index is outside the window
            MonthAlreadyPaidError: If the clicked month is paid
        """
        contract = self._get_long_term_contract(contract_id)
        months = self.build_calendar(contract_id, today=today, selected_keys=selected_keys)
        return toggle_month(months, index, contract.monthly_price)

    def summarize_selection(
        self,
        contract_id: int,
        months: Sequence[MonthSelection],
    ) -> SelectionResult:
        contract = self._get_long_term_contract(contract_id)
        return summarize(months, contract.monthly_price)

    def _find_by_idempotency_key(self, idempotency_key: str) -> PaymentDetail | None:
        return self.db.execute(
            select(PaymentDetail).where(PaymentDetail.idempotency_key == idempotency_key)
        ).scalar_one_or_none()

    def _lock_contract(self, contract_id: int) -> RentalContract:
        # Re-read inside the transaction so the union below sees the latest paid months
        contract = self.db.execute(
            select(RentalContract)
            .where(RentalContract.id == contract_id)
            .with_for_update()
            .execution_options(populate_existing=True)
        ).scalar_one_or_none()
        if contract is None:
            raise ContractNotFoundError(contract_id)
        return contract

    def _replay(
        self, contract_id: int, idempotency_key: str | None, months: Sequence[MonthSelection]
    ) -> PaymentCommitResult | None:
        """Result of an earlier commit with this key, or None when the key is new.

        Raises:
            IdempotencyKeyConflictError: If the key was used for another contract
        """
        if not idempotency_key:
            return None
        existing = self._find_by_idempotency_key(idempotency_key)
        if existing is None:
            return None
        if existing.location_id != contract_id:
            logger.warning(
                "Idempotency key %s reused: entry=%d contract=%d requested contract=%d",
                idempotency_key,
                existing.id,
                existing.location_id,
                contract_id,
            )
            raise IdempotencyKeyConflictError(idempotency_key)
        logger.info(
            "Replayed payment commit: contract=%d key=%s entry=%d",
            contract_id,
            idempotency_key,
            existing.id,
        )
        return PaymentCommitResult(
            entry=existing,
            contract=self.get_contract(contract_id),
            months=fold_committed(months, existing.months_paid),
            replayed=True,
        )

    def commit_payment(
        self,
        contract_id: int,
        months: Sequence[MonthSelection],
        payment_method: PaymentMethod | str,
        payment_date: date,
        amount: Decimal | None = None,
        idempotency_key: str | None = None,
    ) -> PaymentCommitResult:
        """Record a rent payment for the selected months of a long-term contract.

        The ledger entry and the contract update are written in one
        transaction: either both apply or neither does.

        Args:
            contract_id: Rental contract ID
            months: Calendar window holding the selection to pay
            payment_method: One of PaymentMethod
            payment_date: Date the payment was received
            amount: Amount received (default: selected months x monthly rent)
            idempotency_key: Optional client key; a repeated key replays the first result

        Returns:
            PaymentCommitResult with the ledger entry, updated contract and folded window

        Raises:
            IdempotencyKeyConflictError: If the key was used for another contract
            EmptySelectionError: If no unpaid month is selected
            NonContiguousSelectionError: If the selection has an unpaid gap
            SelectionOutOfOrderError: If an earlier unpaid month is left unselected
            ValueError: If method is unknown or amount is not positive
            MonthAlreadyPaidError: If a selected month was paid in the meantime
            ContractAlreadyTerminatedError: If the contract is terminated
            PaymentCommitError: If the database write failed (nothing was written)
        """
        replayed = self._replay(contract_id, idempotency_key, months)
        if replayed is not None:
            return replayed

        selected = selected_unpaid(months)
        if not selected:
            logger.warning("Rejected empty payment commit for contract %d", contract_id)
            raise EmptySelectionError()
        if not is_contiguous(months):
            raise NonContiguousSelectionError()
        skipped = first_skipped_unpaid(months)
        if skipped is not None:
            raise SelectionOutOfOrderError(skipped.key)

        method = PaymentMethod(payment_method)

        contract = self._get_long_term_contract(contract_id)
        if amount is None:
            amount = summarize(months, contract.monthly_price).amount
        amount = Decimal(amount)
        if amount <= Decimal(0):
            logger.error(f"Invalid payment amount: {amount}")
            raise ValueError("Payment amount must be positive")

        new_keys = sorted(m.key for m in selected)

        try:
            contract = self._lock_contract(contract_id)
            if contract.status == ContractStatus.TERMINATED:
                raise ContractAlreadyTerminatedError(contract_id)

            previous_keys = normalize_paid_months(contract.paid_months)
            conflicts = sorted(set(previous_keys) & set(new_keys))
            if conflicts:
                raise MonthAlreadyPaidError(conflicts[0])

            entry = PaymentDetail(
                location_id=contract.id,
                payment_date=payment_date,
                amount=amount,
                payment_method=method.value,
                months_covered=len(new_keys),
                months_paid=new_keys,
                idempotency_key=idempotency_key,
            )
            self.db.add(entry)

            merged = sorted(set(previous_keys) | set(new_keys))
            new_end_date = end_of_month(parse_month_key(merged[-1]))
            contract.paid_months = merged
            contract.paid_months_count = len(merged)
            contract.is_paid = True
            contract.rental_end_date = new_end_date
            self.db.flush()

            AuditService.log_contract(
                self.db,
                contract.id,
                "payment",
                {
                    "payment_id": entry.id,
                    "months_paid": new_keys,
                    "rental_end_date": new_end_date.isoformat(),
                },
            )
            self.db.commit()
        except MonthAlreadyPaidError:
            self.db.rollback()
            # A concurrent request with the same key may have paid these months
            replayed = self._replay(contract_id, idempotency_key, months)
            if replayed is None:
                raise
            return replayed
        except ContractAlreadyTerminatedError:
            self.db.rollback()
            raise
        except IntegrityError as e:
            self.db.rollback()
            replayed = self._replay(contract_id, idempotency_key, months)
            if replayed is None:
                logger.error("Payment commit failed for contract %d: %s", contract_id, e)
                raise PaymentCommitError(
                    f"Payment for contract {contract_id} was not recorded"
                ) from e
            return replayed
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(
                "Payment commit failed for contract %d, rolled back: %s",
                contract_id,
                e,
                exc_info=True,
            )
            raise PaymentCommitError(f"Payment for contract {contract_id} was not recorded") from e

        self.db.refresh(entry)
        self.db.refresh(contract)
        logger.info(
            "Recorded payment: contract=%d entry=%d amount=%s method=%s months=%s end_date=%s",
            contract.id,
            entry.id,
            amount,
            method.value,
            ",".join(new_keys),
            contract.rental_end_date,
        )
        return PaymentCommitResult(
            entry=entry,
            contract=contract,
            months=fold_committed(months, new_keys),
        )

    def set_short_term_payment(self, contract_id: int, paid: bool) -> RentalContract:
        """Set or clear the paid flag of a short-term contract. No ledger entry is written.

        Raises:
            ContractNotShortTermError: If the contract is billed monthly
        """
        contract = self.get_contract(contract_id)
        if contract.is_long_term:
            raise ContractNotShortTermError(contract_id)

        contract.is_paid = paid
        AuditService.log_contract(self.db, contract.id, "payment_flag", {"is_paid": paid})
        try:
            self.db.commit()
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error("Failed to update payment flag of contract %d: %s", contract_id, e)
            raise PaymentCommitError(f"Payment flag of contract {contract_id} was not updated") from e

        self.db.refresh(contract)
        logger.info("Updated payment flag: contract=%d is_paid=%s", contract.id, paid)
        return contract

    def get_payment_for_month(self, contract_id: int, month: str) -> PaymentDetail | None:
        """Find the payment that settled a month of a contract.

        Args:
            contract_id: Rental contract ID
            month: Month key ("YYYY-MM")

        Returns:
            Latest PaymentDetail covering the month, or None

        Raises:
            ValueError: If month is not a valid month key
        """
        parse_month_key(month)
        self.get_contract(contract_id)
        entries = self.db.execute(
            select(PaymentDetail)
            .where(PaymentDetail.location_id == contract_id)
            .order_by(PaymentDetail.payment_date.desc(), PaymentDetail.id.desc())
        ).scalars()
        for entry in entries:
            if month in normalize_paid_months(entry.months_paid):
                return entry
        return None

    def list_contract_payments(self, contract_id: int) -> list[PaymentDetail]:
        """List a contract's ledger entries, oldest first."""
        self.get_contract(contract_id)
        return list(
            self.db.execute(
                select(PaymentDetail)
                .where(PaymentDetail.location_id == contract_id)
                .order_by(PaymentDetail.payment_date, PaymentDetail.id)
            ).scalars()
        )


__all__ = ["RentalPaymentService", "PaymentCommitResult"]
