"""Reclassification of store failures into caller-facing errors."""

from contextlib import asynccontextmanager
from typing import AsyncIterator

from userservice.core.logging import get_logger
from userservice.domain.exceptions import (
    AccountServiceError,
    ConflictError,
    InternalError,
    ValidationError,
)
from userservice.domain.interfaces import (
    ConstraintKind,
    ConstraintViolationError,
    StoreError,
)
from userservice.infrastructure.auth import PasswordHasher

logger = get_logger(__name__)


@asynccontextmanager
async def store_operation(operation: str) -> AsyncIterator[None]:
    """Run a block of store calls, translating failures.

    Classified errors pass through untouched. A unique violation becomes
    ``ConflictError``, not-null and foreign-key violations become
    ``ValidationError``, and everything else is wrapped as ``InternalError``
    carrying only the operation name.

    Example:
        async with store_operation("create account"):
            account = await store.create(account)
    """
    try:
        yield
    except AccountServiceError:
        raise
    except ConstraintViolationError as e:
        if e.kind is ConstraintKind.UNIQUE:
            raise ConflictError("Account already exists with this email") from e
        if e.kind is ConstraintKind.NOT_NULL:
            raise ValidationError("Required field is missing") from e
        if e.kind is ConstraintKind.FOREIGN_KEY:
            raise ValidationError("Referenced record does not exist") from e
        logger.error(
            "Unclassified constraint violation",
            operation=operation,
            constraint=e.kind.value,
            column=e.column,
        )
        raise InternalError(f"Failed to {operation}") from e
    except StoreError as e:
        logger.error("Store operation failed", operation=operation, error=e.message)
        raise InternalError(f"Failed to {operation}") from e
    except Exception as e:
        # Driver messages can carry statements and bound values
        logger.error(
            "Store operation failed",
            operation=operation,
            error_type=type(e).__name__,
        )
        raise InternalError(f"Failed to {operation}") from e


async def hash_password(hasher: PasswordHasher, password: str) -> str:
    """Hash on the hasher's worker pool; hashing failures are internal."""
    try:
        return await hasher.hash_async(password)
    except Exception as e:
        logger.error("Password hashing failed", error_type=type(e).__name__)
        raise InternalError("Failed to hash password") from e
