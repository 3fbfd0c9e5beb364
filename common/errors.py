"""
Error taxonomy shared by every engine operation.

Each error carries a short human-readable message separate from its kind.
The HTTP layer maps kinds to status codes via `status_code`; the engine
never builds HTTP responses itself.
"""

from typing import Any, Optional

from fastapi import status


class ProcurementError(Exception):
    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    error: str = "Server error"

    def __init__(self, message: str, details: Optional[Any] = None):
        super().__init__(message)
        self.message = message
        self.details = details


class ValidationError(ProcurementError):
    """Malformed or missing input."""
    status_code = status.HTTP_400_BAD_REQUEST
    error = "Invalid data"


class AuthorizationError(ProcurementError):
    """Role not permitted, or row outside the actor's visibility."""
    status_code = status.HTTP_403_FORBIDDEN
    error = "Forbidden"


class NotFoundError(ProcurementError):
    """Entity absent or owned by another organization."""
    status_code = status.HTTP_404_NOT_FOUND
    error = "Not found"


class StateConflictError(ProcurementError):
    """Guard condition violated by the entity's current state."""
    status_code = status.HTTP_409_CONFLICT
    error = "Invalid status"


class IntegrityError(ProcurementError):
    """Stored data breaks an invariant, e.g. a vendor option with no pricing."""
    status_code = status.HTTP_409_CONFLICT
    error = "Integrity violation"


class UnexpectedError(ProcurementError):
    """Store or connection failure."""
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    error = "Server error"
