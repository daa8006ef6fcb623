"""Classified errors raised by the account use cases.

Every rule violation surfaces as one of the subclasses below. Each carries a
category and the HTTP status the boundary should answer with.
"""

from enum import Enum
from typing import Any


class ErrorCategory(str, Enum):
    """Caller-facing failure categories."""

    VALIDATION = "validation"
    UNAUTHORIZED = "unauthorized"
    FORBIDDEN = "forbidden"
    NOT_FOUND = "not_found"
    CONFLICT = "conflict"
    INTERNAL = "internal"


class AccountServiceError(Exception):
    """Base class for all classified account service errors."""

    category: ErrorCategory = ErrorCategory.INTERNAL
    status_code: int = 500

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)

    def to_dict(self) -> dict[str, Any]:
        """Return the payload the boundary renders for this error."""
        return {
            "error": self.message,
            "category": self.category.value,
            "status_code": self.status_code,
        }


class ValidationError(AccountServiceError):
    """Malformed identifiers or input, or an oversized batch."""

    category = ErrorCategory.VALIDATION
    status_code = 400


class UnauthorizedError(AccountServiceError):
    """Bad credentials or a missing, invalid or expired token."""

    category = ErrorCategory.UNAUTHORIZED
    status_code = 401


class ForbiddenError(AccountServiceError):
    """Insufficient role, protected target, or a deactivated actor."""

    category = ErrorCategory.FORBIDDEN
    status_code = 403


class NotFoundError(AccountServiceError):
    category = ErrorCategory.NOT_FOUND
    status_code = 404


class ConflictError(AccountServiceError):
    """Duplicate email on create or on an email-changing update."""

    category = ErrorCategory.CONFLICT
    status_code = 409


class InternalError(AccountServiceError):
    """Persistence, hashing or signing failure not caused by caller input."""

    category = ErrorCategory.INTERNAL
    status_code = 500
