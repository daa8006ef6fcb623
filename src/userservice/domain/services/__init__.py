"""Domain services for the user service.

Services contain business logic that doesn't naturally fit within a single
entity. They have no dependencies on infrastructure or external frameworks.
"""

from userservice.domain.services.account_policy import INVALID_CREDENTIALS, AccountPolicy
from userservice.domain.services.account_validator import AccountValidator
from userservice.domain.services.password_validator import (
    PasswordValidationError,
    PasswordValidator,
    default_password_validator,
)

__all__ = [
    "INVALID_CREDENTIALS",
    "AccountPolicy",
    "AccountValidator",
    "PasswordValidationError",
    "PasswordValidator",
    "default_password_validator",
]
