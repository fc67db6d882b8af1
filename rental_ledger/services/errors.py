"""Domain errors raised by the ledger services."""


class LedgerError(Exception):
    """Base class for rental ledger errors."""


class ContractNotFoundError(LedgerError):
    """No rental contract with the given id."""

    def __init__(self, contract_id: int):
        self.contract_id = contract_id
        super().__init__(f"Rental contract {contract_id} not found")


class ContractNotLongTermError(LedgerError):
    """Month-by-month operations on a short-term contract."""

    def __init__(self, contract_id: int):
        self.contract_id = contract_id
        super().__init__(f"Rental contract {contract_id} is not a long-term rental")


class ContractNotShortTermError(LedgerError):
    """Binary paid flag toggled on a long-term contract."""

    def __init__(self, contract_id: int):
        self.contract_id = contract_id
        super().__init__(f"Rental contract {contract_id} is billed monthly")


class ContractAlreadyTerminatedError(LedgerError):
    """Termination or payment on a contract that is already terminated."""

    def __init__(self, contract_id: int):
        self.contract_id = contract_id
        super().__init__(f"Rental contract {contract_id} is already terminated")


class EmptySelectionError(LedgerError):
    """A payment commit with no selected unpaid month."""

    def __init__(self):
        super().__init__("Select at least one unpaid month")


class NonContiguousSelectionError(LedgerError):
    """Selected months leave an unpaid month unselected in between."""

    def __init__(self):
        super().__init__("Selected months must form an unbroken run")


class MonthAlreadyPaidError(LedgerError):
    """A paid month was clicked or submitted for payment again."""

    def __init__(self, month_key: str):
        self.month_key = month_key
        super().__init__(f"Month {month_key} is already paid")


class SelectionOutOfOrderError(LedgerError):
    """Selection skips an earlier unpaid month of the window."""

    def __init__(self, month_key: str):
        self.month_key = month_key
        super().__init__(f"Pay {month_key} first: months are paid in order")


class IdempotencyKeyConflictError(LedgerError):
    """Idempotency key already used for another contract."""

    def __init__(self, idempotency_key: str):
        self.idempotency_key = idempotency_key
        super().__init__(f"Idempotency key {idempotency_key!r} belongs to another contract")


class PaymentCommitError(LedgerError):
    """The payment transaction failed and was rolled back."""


__all__ = [
    "LedgerError",
    "ContractNotFoundError",
    "ContractNotLongTermError",
    "ContractNotShortTermError",
    "ContractAlreadyTerminatedError",
    "EmptySelectionError",
    "NonContiguousSelectionError",
    "MonthAlreadyPaidError",
    "SelectionOutOfOrderError",
    "IdempotencyKeyConflictError",
    "PaymentCommitError",
]
