"""Field-level validation for account identifiers and attributes.

Every check either returns the normalised value or raises
``ValidationError`` with a caller-facing message.
"""

import re
from datetime import date, datetime, timezone
from typing import Any

from userservice.domain.entities import AccountStatus, JSONDocument, Pagination
from userservice.domain.exceptions import ValidationError
from userservice.domain.services.password_validator import (
    PasswordValidator,
    default_password_validator,
)


class AccountValidator:
    """Validates and normalises account input fields."""

    UUID_PATTERN = re.compile(
        r"^[0-9a-f]{8}-[0-9a-f]{4}-[1-5][0-9a-f]{3}-[89ab][0-9a-f]{3}-[0-9a-f]{12}$",
        re.IGNORECASE,
    )
    EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
    PHONE_PATTERN = re.compile(r"^\+?[0-9\-()\s]+$")

    MAX_EMAIL_LENGTH = 255
    MAX_NAME_LENGTH = 100
    MAX_PHONE_LENGTH = 32
    MAX_SEARCH_LENGTH = 255
    MAX_PAGE_SIZE = 100

    @classmethod
    def validate_account_id(cls, value: Any, label: str = "Account ID") -> str:
        """Require a UUID-shaped identifier before it is used to address the store."""
        if not value:
            raise ValidationError(f"{label} is required")
        if not isinstance(value, str) or not cls.UUID_PATTERN.match(value):
            raise ValidationError(f"Invalid {label[0].lower() + label[1:]} format")
        return value.lower()

    @staticmethod
    def normalize_email(email: str) -> str:
        return email.strip().lower()

    @classmethod
    def validate_email(cls, email: Any) -> str:
        """Validate an email address and return its normalised form."""
        if not email or not isinstance(email, str):
            raise ValidationError("Email is required")
        normalized = cls.normalize_email(email)
        if len(normalized) > cls.MAX_EMAIL_LENGTH or not cls.EMAIL_PATTERN.match(normalized):
            raise ValidationError("Invalid email format")
        return normalized

    @classmethod
    def validate_name(cls, value: Any, label: str) -> str:
        if not isinstance(value, str) or not value.strip():
            raise ValidationError(f"{label} must be a non-empty string")
        value = value.strip()
        if len(value) > cls.MAX_NAME_LENGTH:
            raise ValidationError(f"{label} must be less than {cls.MAX_NAME_LENGTH} characters")
        return value

    @classmethod
    def validate_phone(cls, value: Any) -> str | None:
        """Validate an optional phone number; empty values clear it."""
        if value is None or value == "":
            return None
        if not isinstance(value, str):
            raise ValidationError("Phone must be a string")
        value = value.strip()
        if len(value) > cls.MAX_PHONE_LENGTH or not cls.PHONE_PATTERN.match(value):
            raise ValidationError("Invalid phone number format")
        return value

    @staticmethod
    def validate_date_of_birth(value: Any) -> date | None:
        """Parse an optional date of birth and reject dates in the future."""
        if value is None:
            return None
        if isinstance(value, datetime):
            dob = value.date()
        elif isinstance(value, date):
            dob = value
        elif isinstance(value, str):
            # A full ISO date or timestamp; nothing may trail it
            try:
                dob = datetime.fromisoformat(value).date()
            except ValueError as e:
                raise ValidationError("Invalid date of birth") from e
        else:
            raise ValidationError("Invalid date of birth")

        if dob > datetime.now(timezone.utc).date():
            raise ValidationError("Date of birth cannot be in the future")
        return dob

    @staticmethod
    def validate_password(
        password: Any,
        field: str = "password",
        validator: PasswordValidator = default_password_validator,
    ) -> str:
        errors = validator.validate(password, field=field)
        if errors:
            raise ValidationError("; ".join(e.message for e in errors))
        return password

    @staticmethod
    def validate_status(value: Any) -> AccountStatus:
        try:
            return AccountStatus(value)
        except ValueError as e:
            allowed = ", ".join(s.value for s in AccountStatus)
            raise ValidationError(f"Invalid status. Must be one of: {allowed}") from e

    @staticmethod
    def validate_document(value: Any, label: str) -> JSONDocument:
        """Require a JSON object; the contents stay opaque."""
        if not isinstance(value, dict):
            raise ValidationError(f"{label} must be an object")
        return dict(value)

    @staticmethod
    def validate_flag(value: Any, label: str) -> bool:
        if not isinstance(value, bool):
            raise ValidationError(f"{label} must be a boolean")
        return value

    @classmethod
    def validate_search(cls, value: str | None) -> str | None:
        if value is None:
            return None
        value = value.strip()
        if not value:
            raise ValidationError("Search term cannot be empty")
        if len(value) > cls.MAX_SEARCH_LENGTH:
            raise ValidationError("Search term is too long")
        return value

    @classmethod
    def validate_pagination(cls, pagination: Pagination) -> Pagination:
        """Enforce page >= 1 and 1 <= limit <= 100."""
        if not isinstance(pagination.page, int) or pagination.page < 1:
            raise ValidationError("Page number must be greater than 0")
        if (
            not isinstance(pagination.limit, int)
            or pagination.limit < 1
            or pagination.limit > cls.MAX_PAGE_SIZE
        ):
            raise ValidationError(f"Limit must be between 1 and {cls.MAX_PAGE_SIZE}")
        return pagination
