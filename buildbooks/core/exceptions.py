"""
Error taxonomy for ledger operations.

Services raise these; `buildbooks.common.error_handlers` maps them to
JSON error responses. Financial mutations always roll back before raising.
"""

from typing import Any, Dict, Optional

from fastapi import status


class LedgerError(Exception):
    """Base application exception."""

    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    error_code = "ERR_LEDGER"

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        self.message = message
        self.details = details or {}
        super().__init__(message)


class ValidationError(LedgerError, ValueError):
    """Malformed or out-of-range input. Nothing has been written."""

    status_code = status.HTTP_400_BAD_REQUEST
    error_code = "ERR_VALIDATION"


class NotFoundError(LedgerError):
    """Referenced record does not exist."""

    status_code = status.HTTP_404_NOT_FOUND
    error_code = "ERR_NOT_FOUND"

    def __init__(self, resource: str, resource_id: Any = None):
        message = f"{resource} not found"
        if resource_id:
            message = f"{resource} with ID {resource_id} not found"
        super().__init__(message, details={"resource": resource, "id": resource_id})


class ConflictError(LedgerError):
    """Referential-integrity guard refused the operation."""

    status_code = status.HTTP_409_CONFLICT
    error_code = "ERR_CONFLICT"


class PermissionDeniedError(LedgerError):
    """Acting user's role does not allow the operation."""

    status_code = status.HTTP_403_FORBIDDEN
    error_code = "ERR_PERMISSION"


class TransactionFailure(LedgerError):
    """Persistence failed mid-sequence; the unit of work was rolled back."""

    status_code = status.HTTP_503_SERVICE_UNAVAILABLE
    error_code = "ERR_TRANSACTION"
