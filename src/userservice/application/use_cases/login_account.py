"""Login use case.

Every refusal (unknown email, wrong password, locked or deactivated account)
is reported with the same error and message. Unknown emails and locked
accounts are still charged a full hash verification so response timing does
not reveal which case applied.
"""

from datetime import timedelta

from userservice.application.dto import LoginInput, LoginResult
from userservice.application.errors import hash_password, store_operation
from userservice.application.notifier import Notifier
from userservice.core.logging import get_logger
from userservice.domain.entities import AccountEvent, AccountEventType
from userservice.domain.entities.account import utcnow
from userservice.domain.exceptions import InternalError, UnauthorizedError, ValidationError
from userservice.domain.interfaces import AccountStore
from userservice.domain.services import INVALID_CREDENTIALS, AccountPolicy, AccountValidator
from userservice.infrastructure.auth import PasswordHasher, TokenService

logger = get_logger(__name__)


class LoginAccountUseCase:
    """Use case for password login."""

    def __init__(
        self,
        store: AccountStore,
        hasher: PasswordHasher,
        tokens: TokenService,
        notifier: Notifier,
        max_login_attempts: int = 5,
        lockout_seconds: int = 900,
    ) -> None:
        self.store = store
        self.hasher = hasher
        self.tokens = tokens
        self.notifier = notifier
        self.max_login_attempts = max_login_attempts
        self.lockout = timedelta(seconds=lockout_seconds)

    async def execute(self, data: LoginInput) -> LoginResult:
        """Authenticate with email and password and issue an access token.

        Args:
            data: Email and plaintext password.

        Returns:
            LoginResult with the sanitized account, token and its lifetime.

        Raises:
            ValidationError: If email or password is missing.
            UnauthorizedError: If the credentials are not accepted.
        """
        if not isinstance(data.email, str) or not data.email.strip():
            raise ValidationError("Email and password are required")
        if not isinstance(data.password, str) or not data.password:
            raise ValidationError("Email and password are required")

        email = AccountValidator.normalize_email(data.email)
        now = utcnow()

        async with store_operation("find account"):
            account = await self.store.find_by_email(email)

        if account is None:
            await self.hasher.verify_dummy_async(data.password)
            logger.info("Login failed", reason="unknown_email")
            raise UnauthorizedError(INVALID_CREDENTIALS)

        if account.is_locked(now):
            await self.hasher.verify_dummy_async(data.password)
            logger.warning("Login refused for locked account", account_id=account.id)
            raise UnauthorizedError(INVALID_CREDENTIALS)

        matches = await self.hasher.verify_async(data.password, account.password_hash)
        if not matches:
            async with store_operation("record failed login"):
                recorded = await self.store.record_failed_login(
                    account.id, self.max_login_attempts, now + self.lockout
                )
            logger.info(
                "Login failed",
                reason="wrong_password",
                account_id=account.id,
                locked=recorded is not None and recorded.is_locked(now),
            )
            raise UnauthorizedError(INVALID_CREDENTIALS)

        if not AccountPolicy.can_authenticate(account, matches, now):
            logger.info("Login failed", reason="inactive", account_id=account.id)
            raise UnauthorizedError(INVALID_CREDENTIALS)

        changes = AccountPolicy.successful_login_update(now)
        if self.hasher.needs_rehash(account.password_hash):
            changes.password_hash = await hash_password(self.hasher, data.password)
        async with store_operation("record login"):
            updated = await self.store.update(account.id, changes)
        account = updated or account

        try:
            token = self.tokens.issue(account.id, account.email, account.role)
        except Exception as e:
            logger.error("Token issuance failed", account_id=account.id, error=str(e))
            raise InternalError("Failed to issue token") from e

        self.notifier.notify(
            AccountEvent(
                event_type=AccountEventType.LOGGED_IN,
                account_id=account.id,
                email=account.email,
            )
        )
        logger.info("Login succeeded", account_id=account.id, role=account.role.value)

        return LoginResult(
            account=account.sanitized(),
            token=token,
            expires_in=self.tokens.expires_in,
        )
