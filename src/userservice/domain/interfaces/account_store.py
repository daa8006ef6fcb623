"""Account Store port.

The use cases persist and query accounts only through this interface. The
SQLAlchemy adapter lives in
``userservice.infrastructure.persistence.repositories``.
"""

from datetime import datetime
from enum import Enum
from typing import Protocol, runtime_checkable

from userservice.domain.entities import (
    Account,
    AccountFilters,
    AccountUpdate,
    PaginatedAccounts,
    Pagination,
)


class ConstraintKind(str, Enum):
    """Database constraint families the use cases know how to reclassify."""

    UNIQUE = "unique"
    NOT_NULL = "not_null"
    FOREIGN_KEY = "foreign_key"
    UNKNOWN = "unknown"


class StoreError(Exception):
    """Raised by a store adapter when the backing database fails."""

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)


class ConstraintViolationError(StoreError):
    """Raised when a write breaks a database integrity constraint."""

    def __init__(self, kind: ConstraintKind, detail: str, column: str | None = None) -> None:
        self.kind = kind
        self.detail = detail
        self.column = column
        super().__init__(f"{kind.value} constraint violated: {detail}")


@runtime_checkable
class AccountStore(Protocol):
    """Persistence capability set consumed by the account use cases."""

    async def create(self, account: Account) -> Account:
        """Persist a new account and return it as stored."""
        ...

    async def find_by_id(self, account_id: str) -> Account | None:
        ...

    async def find_by_email(self, email: str) -> Account | None:
        """Look an account up by email, case-insensitively."""
        ...

    async def update(self, account_id: str, changes: AccountUpdate) -> Account | None:
        """Apply the populated slots of ``changes``; ``None`` if the id is unknown."""
        ...

    async def record_failed_login(
        self, account_id: str, max_attempts: int, locked_until: datetime
    ) -> Account | None:
        """Count one wrong password as a single atomic write.

        Reaching ``max_attempts`` resets the counter and sets ``locked_until``.
        Returns the account as stored, or ``None`` if the id is unknown.
        """
        ...

    async def delete(self, account_id: str) -> bool:
        """Remove an account; ``False`` if nothing was deleted."""
        ...

    async def find_all(
        self, pagination: Pagination, filters: AccountFilters | None = None
    ) -> PaginatedAccounts:
        ...
