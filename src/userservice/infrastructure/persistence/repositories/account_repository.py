"""Account repository for database operations.

SQLAlchemy implementation of the ``AccountStore`` port. Each call opens its
own session, so the repository holds no state between operations. Database
failures are re-raised as ``StoreError`` / ``ConstraintViolationError``.
"""

from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import Any, AsyncGenerator

from sqlalchemy import case, delete, func, literal, or_, select, update
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from userservice.core.logging import get_logger
from userservice.domain.entities import (
    Account,
    AccountFilters,
    AccountRole,
    AccountStatus,
    AccountUpdate,
    PaginatedAccounts,
    Pagination,
)
from userservice.domain.interfaces import (
    ConstraintKind,
    ConstraintViolationError,
    StoreError,
)
from userservice.infrastructure.persistence.models import AccountModel

logger = get_logger(__name__)

# Entity attribute -> mapped model attribute, where the names differ
_COLUMN_OVERRIDES = {
    "password_hash": "password",
    "metadata": "metadata_",
}


def _as_utc(value: datetime | None) -> datetime | None:
    """SQLite hands back naive datetimes; everything stored is UTC."""
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def _classify_integrity_error(error: IntegrityError) -> ConstraintViolationError:
    orig = error.orig
    code = getattr(orig, "sqlstate", None) or getattr(orig, "pgcode", None)
    message = str(orig)
    lowered = message.lower()

    if code == "23505" or "unique constraint" in lowered or "duplicate key" in lowered:
        kind = ConstraintKind.UNIQUE
    elif code == "23502" or "not null constraint" in lowered or "not-null constraint" in lowered:
        kind = ConstraintKind.NOT_NULL
    elif code == "23503" or "foreign key constraint" in lowered:
        kind = ConstraintKind.FOREIGN_KEY
    else:
        kind = ConstraintKind.UNKNOWN

    column = None
    if "constraint failed:" in message:
        # SQLite: "UNIQUE constraint failed: users.email"
        column = message.rsplit(":", 1)[-1].strip().split(",")[0].split(".")[-1]
    return ConstraintViolationError(kind, message, column=column)


class AccountRepository:
    """Repository for account database operations."""

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        """Initialize the repository.

        Args:
            session_factory: Factory producing one async session per operation.
        """
        self._session_factory = session_factory

    @asynccontextmanager
    async def _session(self, operation: str) -> AsyncGenerator[AsyncSession, None]:
        async with self._session_factory() as session:
            try:
                yield session
            except IntegrityError as e:
                await session.rollback()
                violation = _classify_integrity_error(e)
                logger.warning(
                    "Account constraint violated",
                    operation=operation,
                    constraint=violation.kind.value,
                    column=violation.column,
                )
                raise violation from e
            except SQLAlchemyError as e:
                await session.rollback()
                # str(e) embeds the SQL text and bound parameters
                cause = type(getattr(e, "orig", None) or e).__name__
                logger.error("Account store failure", operation=operation, error_type=cause)
                raise StoreError(f"{operation} failed ({cause})") from e

    async def create(self, account: Account) -> Account:
        """Insert a new account row.

        Raises:
            ConstraintViolationError: If the email is already taken.
        """
        model = self._to_model(account)
        async with self._session("create account") as session:
            session.add(model)
            await session.commit()
        return self._to_entity(model)

    async def find_by_id(self, account_id: str) -> Account | None:
        async with self._session("find account by id") as session:
            model = await session.get(AccountModel, account_id)
            return self._to_entity(model) if model else None

    async def find_by_email(self, email: str) -> Account | None:
        """Get an account by email, ignoring case and surrounding whitespace."""
        async with self._session("find account by email") as session:
            result = await session.execute(
                select(AccountModel).where(
                    func.lower(AccountModel.email) == email.strip().lower()
                )
            )
            model = result.scalar_one_or_none()
            return self._to_entity(model) if model else None

    async def update(self, account_id: str, changes: AccountUpdate) -> Account | None:
        """Write the populated slots of ``changes``.

        An update with no populated slots reads the account back unchanged.

        Returns:
            The updated account, or None if no account has this id.
        """
        values = self._to_values(changes.populated())
        if not values:
            return await self.find_by_id(account_id)
        values[AccountModel.updated_at] = datetime.now(timezone.utc)

        async with self._session("update account") as session:
            result = await session.execute(
                update(AccountModel)
                .where(AccountModel.id == account_id)
                .values(values)
                .execution_options(synchronize_session=False)
            )
            if result.rowcount == 0:
                return None
            await session.commit()
            model = await session.get(AccountModel, account_id, populate_existing=True)
            return self._to_entity(model) if model else None

    async def record_failed_login(
        self, account_id: str, max_attempts: int, locked_until: datetime
    ) -> Account | None:
        """Increment the failed-login counter in the database.

        The new count is computed from the stored value, so concurrent wrong
        passwords are all counted. At ``max_attempts`` the counter resets to
        zero and the lock is set.
        """
        attempts = AccountModel.login_attempts + 1
        reached = attempts >= max_attempts

        async with self._session("record failed login") as session:
            result = await session.execute(
                update(AccountModel)
                .where(AccountModel.id == account_id)
                .values(
                    login_attempts=case((reached, 0), else_=attempts),
                    locked_until=case(
                        (reached, literal(locked_until, AccountModel.locked_until.type)),
                        else_=AccountModel.locked_until,
                    ),
                    updated_at=datetime.now(timezone.utc),
                )
                .execution_options(synchronize_session=False)
            )
            if result.rowcount == 0:
                return None
            await session.commit()
            model = await session.get(AccountModel, account_id, populate_existing=True)
            return self._to_entity(model) if model else None

    async def delete(self, account_id: str) -> bool:
        async with self._session("delete account") as session:
            result = await session.execute(
                delete(AccountModel).where(AccountModel.id == account_id)
            )
            await session.commit()
            return result.rowcount > 0

    async def find_all(
        self, pagination: Pagination, filters: AccountFilters | None = None
    ) -> PaginatedAccounts:
        """Get one page of accounts, newest first.

        Args:
            pagination: Page number (1-indexed) and page size.
            filters: Optional role / active / verified / search filters.

        Returns:
            The page plus the total number of matching accounts.
        """
        conditions = self._build_conditions(filters)

        async with self._session("list accounts") as session:
            count_result = await session.execute(
                select(func.count(AccountModel.id)).where(*conditions)
            )
            total = count_result.scalar_one() or 0

            result = await session.execute(
                select(AccountModel)
                .where(*conditions)
                .order_by(AccountModel.created_at.desc(), AccountModel.id)
                .offset(pagination.offset)
                .limit(pagination.limit)
            )
            items = [self._to_entity(model) for model in result.scalars().all()]

        return PaginatedAccounts(
            items=items,
            total=total,
            page=pagination.page,
            limit=pagination.limit,
        )

    @staticmethod
    def _build_conditions(filters: AccountFilters | None) -> list[Any]:
        if filters is None:
            return []
        conditions: list[Any] = []
        if filters.is_active is not None:
            conditions.append(AccountModel.is_active == filters.is_active)
        if filters.role is not None:
            conditions.append(AccountModel.role == filters.role.value)
        if filters.email_verified is not None:
            conditions.append(AccountModel.email_verified == filters.email_verified)
        if filters.search:
            escaped = (
                filters.search.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
            )
            pattern = f"%{escaped}%"
            conditions.append(
                or_(
                    AccountModel.first_name.ilike(pattern, escape="\\"),
                    AccountModel.last_name.ilike(pattern, escape="\\"),
                    AccountModel.email.ilike(pattern, escape="\\"),
                )
            )
        return conditions

    @staticmethod
    def _to_values(populated: dict[str, Any]) -> dict[Any, Any]:
        """Translate populated update slots into column assignments."""
        values: dict[Any, Any] = {}
        for name, value in populated.items():
            if isinstance(value, (AccountRole, AccountStatus)):
                value = value.value
            elif isinstance(value, dict):
                value = dict(value)
            column = getattr(AccountModel, _COLUMN_OVERRIDES.get(name, name))
            values[column] = value
        return values

    @staticmethod
    def _to_model(account: Account) -> AccountModel:
        return AccountModel(
            id=account.id,
            email=account.email,
            password=account.password_hash,
            first_name=account.first_name,
            last_name=account.last_name,
            phone=account.phone,
            date_of_birth=account.date_of_birth,
            profile_image_url=account.profile_image_url,
            role=account.role.value,
            status=account.status.value,
            is_active=account.is_active,
            email_verified=account.email_verified,
            email_verification_token=account.email_verification_token,
            password_reset_token=account.password_reset_token,
            password_reset_expires=account.password_reset_expires,
            login_attempts=account.login_attempts,
            locked_until=account.locked_until,
            last_login=account.last_login,
            preferences=dict(account.preferences),
            metadata_=dict(account.metadata),
            created_at=account.created_at,
            updated_at=account.updated_at,
            created_by=account.created_by,
            updated_by=account.updated_by,
        )

    @staticmethod
    def _to_entity(model: AccountModel) -> Account:
        return Account(
            id=model.id,
            email=model.email,
            password_hash=model.password,
            first_name=model.first_name,
            last_name=model.last_name,
            role=AccountRole(model.role),
            is_active=model.is_active,
            status=AccountStatus(model.status),
            email_verified=model.email_verified,
            phone=model.phone,
            date_of_birth=model.date_of_birth,
            profile_image_url=model.profile_image_url,
            login_attempts=model.login_attempts or 0,
            locked_until=_as_utc(model.locked_until),
            last_login=_as_utc(model.last_login),
            password_reset_token=model.password_reset_token,
            password_reset_expires=_as_utc(model.password_reset_expires),
            email_verification_token=model.email_verification_token,
            preferences=dict(model.preferences or {}),
            metadata=dict(model.metadata_ or {}),
            created_at=_as_utc(model.created_at),
            updated_at=_as_utc(model.updated_at),
            created_by=model.created_by,
            updated_by=model.updated_by,
        )
