"""Audit trail of contract and payment state changes."""

from sqlalchemy import select
from sqlalchemy.orm import Session

from rental_ledger.models.audit_log import AuditLog

CONTRACT_ENTITY = "location"


class AuditService:
    """Audit log operations.

    Rows are added to the caller's session and committed with the change
    they describe, so a rolled-back payment leaves no audit row behind.
    """

    @staticmethod
    def log(
        db: Session,
        entity_type: str,
        entity_id: int,
        action: str,
        changes: dict | None = None,
    ) -> AuditLog:
        """Add an audit row to the session without flushing.

        Args:
            db: Database session
            entity_type: Audited table, CONTRACT_ENTITY for rental contracts
            entity_id: Primary key of the audited row
            action: "payment", "payment_flag", "terminate" or "expire"
            changes: JSON-serializable snapshot of the changed fields
        """
        audit = AuditLog(
            entity_type=entity_type,
            entity_id=entity_id,
            action=action,
            changes=changes,
        )
        db.add(audit)
        return audit

    @staticmethod
    def log_contract(db: Session, contract_id: int, action: str, changes: dict | None = None):
        return AuditService.log(db, CONTRACT_ENTITY, contract_id, action, changes)

    @staticmethod
    def contract_history(db: Session, contract_id: int) -> list[AuditLog]:
        """Audit rows of a contract, oldest first."""
        return list(
            db.execute(
                select(AuditLog)
                .where(
                    AuditLog.entity_type == CONTRACT_ENTITY,
                    AuditLog.entity_id == contract_id,
                )
                .order_by(AuditLog.created_at, AuditLog.id)
            ).scalars()
        )


__all__ = ["AuditService", "CONTRACT_ENTITY"]
