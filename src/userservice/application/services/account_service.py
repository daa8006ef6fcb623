"""Account service facade.

Single entry point for a boundary (HTTP handlers, CLI, workers): composes the
account use cases over one store, hasher, token service and notifier.
"""

from typing import Sequence

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from userservice.application.dto import (
    BulkDeleteResult,
    LoginInput,
    LoginResult,
    RegisterAccountInput,
    UpdateAccountInput,
    VerifiedToken,
)
from userservice.application.notifier import Notifier
from userservice.application.use_cases import (
    DeleteAccountUseCase,
    GetAccountUseCase,
    ListAccountsUseCase,
    LoginAccountUseCase,
    RegisterAccountUseCase,
    UpdateAccountUseCase,
    VerifyTokenUseCase,
)
from userservice.core.config import Settings, get_settings
from userservice.domain.entities import (
    AccountFilters,
    AccountRole,
    PaginatedSanitizedAccounts,
    Pagination,
    SanitizedAccount,
    TokenClaims,
)
from userservice.domain.interfaces import AccountStore, NotificationSink
from userservice.infrastructure.auth import PasswordHasher, TokenService
from userservice.infrastructure.events import LoggingNotificationSink
from userservice.infrastructure.persistence.repositories import AccountRepository


class AccountService:
    """Facade over the account use cases.

    Example:
        service = AccountService.from_settings(get_settings(), db.session_factory)
        account = await service.register(RegisterAccountInput(...))
        result = await service.login(LoginInput(email, password))
        claims = await service.verify_token(result.token)
    """

    def __init__(
        self,
        store: AccountStore,
        hasher: PasswordHasher,
        tokens: TokenService,
        notifier: Notifier | None = None,
        max_login_attempts: int = 5,
        lockout_seconds: int = 900,
    ) -> None:
        self.store = store
        self.hasher = hasher
        self.tokens = tokens
        self.notifier = notifier or Notifier()

        self._register = RegisterAccountUseCase(store, hasher, self.notifier)
        self._login = LoginAccountUseCase(
            store,
            hasher,
            tokens,
            self.notifier,
            max_login_attempts=max_login_attempts,
            lockout_seconds=lockout_seconds,
        )
        self._verify = VerifyTokenUseCase(store, tokens)
        self._update = UpdateAccountUseCase(store, hasher)
        self._delete = DeleteAccountUseCase(store)
        self._get = GetAccountUseCase(store)
        self._list = ListAccountsUseCase(store)

    @classmethod
    def from_settings(
        cls,
        settings: Settings | None,
        session_factory: async_sessionmaker[AsyncSession],
        sink: NotificationSink | None = None,
    ) -> "AccountService":
        """Wire the service with the SQLAlchemy store and configured auth."""
        settings = settings or get_settings()
        return cls(
            store=AccountRepository(session_factory),
            hasher=PasswordHasher.from_settings(settings),
            tokens=TokenService.from_settings(settings),
            notifier=Notifier(sink or LoggingNotificationSink()),
            max_login_attempts=settings.max_login_attempts,
            lockout_seconds=settings.lockout_seconds,
        )

    async def register(
        self, data: RegisterAccountInput, actor_id: str | None = None
    ) -> SanitizedAccount:
        return await self._register.execute(data, actor_id)

    async def create_superadmin(self, data: RegisterAccountInput) -> SanitizedAccount:
        return await self._register.create_superadmin(data)

    async def login(self, data: LoginInput) -> LoginResult:
        return await self._login.execute(data)

    async def verify_token(self, token: str) -> TokenClaims:
        return await self._verify.execute(token)

    async def verify_token_with_renewal(self, token: str) -> VerifiedToken:
        return await self._verify.execute_with_renewal(token)

    async def get_by_id(self, account_id: str) -> SanitizedAccount:
        return await self._get.by_id(account_id)

    async def get_by_email(self, email: str) -> SanitizedAccount:
        return await self._get.by_email(email)

    async def update(
        self, account_id: str, data: UpdateAccountInput, actor_id: str | None = None
    ) -> SanitizedAccount:
        return await self._update.execute(account_id, data, actor_id)

    async def update_profile(
        self, account_id: str, data: UpdateAccountInput, actor_id: str | None = None
    ) -> SanitizedAccount:
        return await self._update.update_profile(account_id, data, actor_id)

    async def change_password(
        self, account_id: str, current_password: str, new_password: str
    ) -> SanitizedAccount:
        return await self._update.change_password(account_id, current_password, new_password)

    async def deactivate(self, account_id: str, actor_id: str | None = None) -> SanitizedAccount:
        return await self._update.deactivate(account_id, actor_id)

    async def activate(self, account_id: str, actor_id: str | None = None) -> SanitizedAccount:
        return await self._update.activate(account_id, actor_id)

    async def update_role(
        self, account_id: str, role: AccountRole | str, actor_id: str | None = None
    ) -> SanitizedAccount:
        return await self._update.update_role(account_id, role, actor_id)

    async def confirm_email(self, account_id: str, token: str) -> SanitizedAccount:
        return await self._update.confirm_email(account_id, token)

    async def delete(self, account_id: str, actor_id: str | None = None) -> bool:
        return await self._delete.execute(account_id, actor_id)

    async def soft_delete(self, account_id: str, actor_id: str | None = None) -> SanitizedAccount:
        return await self._delete.soft_delete(account_id, actor_id)

    async def admin_delete(self, account_id: str, actor_id: str, force: bool = False) -> bool:
        return await self._delete.admin_delete(account_id, actor_id, force)

    async def bulk_delete(self, account_ids: Sequence[str], actor_id: str) -> BulkDeleteResult:
        return await self._delete.bulk_delete(account_ids, actor_id)

    async def list(
        self,
        pagination: Pagination | None = None,
        filters: AccountFilters | None = None,
    ) -> PaginatedSanitizedAccounts:
        return await self._list.execute(pagination, filters)

    async def count_active(self) -> int:
        return await self._list.count_active()

    async def list_by_role(
        self, role: AccountRole | str, pagination: Pagination | None = None
    ) -> PaginatedSanitizedAccounts:
        return await self._list.list_by_role(role, pagination)

    async def close(self) -> None:
        """Wait for pending notifications and release the hashing pool."""
        await self.notifier.drain()
        self.hasher.shutdown()
