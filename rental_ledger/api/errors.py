"""API error handling and response helpers."""

from typing import Any, Dict, NoReturn

from fastapi import HTTPException, status

from rental_ledger.services.errors import (
    ContractAlreadyTerminatedError,
    ContractNotFoundError,
    ContractNotLongTermError,
    ContractNotShortTermError,
    EmptySelectionError,
    IdempotencyKeyConflictError,
    LedgerError,
    MonthAlreadyPaidError,
    NonContiguousSelectionError,
    PaymentCommitError,
    SelectionOutOfOrderError,
)


class AppError(Exception):
    """Base application error."""

    def __init__(self, message: str, code: str, http_status: int = 400):
        """Initialize error."""
        self.message = message
        self.code = code
        self.http_status = http_status
        super().__init__(message)


class NotFoundError(AppError):
    """Requested contract, month or payment does not exist."""

    def __init__(self, message: str = "Not found"):
        super().__init__(message, "not_found", status.HTTP_404_NOT_FOUND)


class InvalidRequestError(AppError):
    """Request is well-formed but not acceptable for this contract."""

    def __init__(self, message: str, code: str = "invalid_request"):
        super().__init__(message, code, status.HTTP_400_BAD_REQUEST)


class ConflictError(AppError):
    """Request conflicts with the stored state (already paid, already terminated)."""

    def __init__(self, message: str, code: str = "conflict"):
        super().__init__(message, code, status.HTTP_409_CONFLICT)


class ServiceUnavailableError(AppError):
    """Write failed and was rolled back; the client may retry."""

    def __init__(self, message: str = "Payment was not recorded, please retry"):
        super().__init__(message, "commit_failed", status.HTTP_503_SERVICE_UNAVAILABLE)


def from_ledger_error(error: LedgerError) -> AppError:
    """Translate a domain error to its HTTP counterpart."""
    if isinstance(error, ContractNotFoundError):
        return NotFoundError(str(error))
    if isinstance(error, EmptySelectionError):
        return InvalidRequestError(str(error), "empty_selection")
    if isinstance(error, NonContiguousSelectionError):
        return InvalidRequestError(str(error), "non_contiguous_selection")
    if isinstance(error, SelectionOutOfOrderError):
        return InvalidRequestError(str(error), "selection_out_of_order")
    if isinstance(error, (ContractNotLongTermError, ContractNotShortTermError)):
        return InvalidRequestError(str(error), "wrong_rental_type")
    if isinstance(error, MonthAlreadyPaidError):
        return ConflictError(str(error), "month_already_paid")
    if isinstance(error, ContractAlreadyTerminatedError):
        return ConflictError(str(error), "contract_terminated")
    if isinstance(error, IdempotencyKeyConflictError):
        return ConflictError(str(error), "idempotency_key_conflict")
    if isinstance(error, PaymentCommitError):
        return ServiceUnavailableError(str(error))
    return InvalidRequestError(str(error))


def error_response(error: AppError) -> Dict[str, Any]:
    """Create a standardized error response."""
    return {
        "error": {
            "code": error.code,
            "message": error.message,
        }
    }


def raise_app_error(error: AppError) -> NoReturn:
    """Raise an HTTPException from an AppError."""
    raise HTTPException(
        status_code=error.http_status,
        detail=error_response(error),
    )
