"""Register account use case.

Creates a new account from a registration payload: the input is validated
and normalised, the password hashed off the event loop, and the row
persisted. The store's unique email index settles concurrent registrations
of the same address.
"""

import secrets
import time
import uuid

from userservice.application.dto import RegisterAccountInput
from userservice.application.errors import hash_password, store_operation
from userservice.application.lookup import load_actor
from userservice.application.notifier import Notifier
from userservice.core.logging import get_logger
from userservice.domain.entities import (
    ADMIN_ROLES,
    Account,
    AccountEvent,
    AccountEventType,
    AccountFilters,
    AccountRole,
    AccountStatus,
    Pagination,
    SanitizedAccount,
)
from userservice.domain.exceptions import ConflictError, ForbiddenError
from userservice.domain.interfaces import AccountStore
from userservice.domain.services import AccountPolicy, AccountValidator
from userservice.infrastructure.auth import PasswordHasher

logger = get_logger(__name__)


class RegisterAccountUseCase:
    """Use case for registering accounts."""

    def __init__(
        self,
        store: AccountStore,
        hasher: PasswordHasher,
        notifier: Notifier,
    ) -> None:
        self.store = store
        self.hasher = hasher
        self.notifier = notifier

    async def execute(
        self, data: RegisterAccountInput, actor_id: str | None = None
    ) -> SanitizedAccount:
        """Register a new account.

        Accounts register as ``USER``. Any other role must be granted by an
        active administrator (``actor_id``) holding at least that role.

        Args:
            data: Registration payload.
            actor_id: Administrator creating the account, if any.

        Returns:
            The created account, without its password hash.

        Raises:
            ValidationError: If any field is malformed or the password is weak.
            ForbiddenError: If a privileged role is requested without the right actor.
            ConflictError: If the email is already registered.
        """
        started = time.perf_counter()

        email = AccountValidator.validate_email(data.email)
        password = AccountValidator.validate_password(data.password)
        first_name = AccountValidator.validate_name(data.first_name, "First name")
        last_name = AccountValidator.validate_name(data.last_name, "Last name")
        phone = AccountValidator.validate_phone(data.phone)
        date_of_birth = AccountValidator.validate_date_of_birth(data.date_of_birth)
        preferences = AccountValidator.validate_document(data.preferences, "Preferences")
        metadata = AccountValidator.validate_document(data.metadata, "Metadata")
        role = AccountPolicy.parse_role(data.role)

        created_by = None
        if actor_id is not None:
            created_by = AccountValidator.validate_account_id(actor_id, "Actor ID")
        if role is not AccountRole.USER:
            await self._ensure_can_grant(role, created_by)

        async with store_operation("check existing account"):
            existing = await self.store.find_by_email(email)
        AccountPolicy.ensure_email_available(existing)
        validated_at = time.perf_counter()

        password_hash = await hash_password(self.hasher, password)
        hashed_at = time.perf_counter()

        account = Account(
            id=str(uuid.uuid4()),
            email=email,
            password_hash=password_hash,
            first_name=first_name,
            last_name=last_name,
            role=role,
            status=AccountStatus.ACTIVE,
            phone=phone,
            date_of_birth=date_of_birth,
            profile_image_url=data.profile_image_url,
            email_verification_token=secrets.token_urlsafe(32),
            preferences=preferences,
            metadata=metadata,
            created_by=created_by,
            updated_by=created_by,
        )
        async with store_operation("create account"):
            created = await self.store.create(account)
        persisted_at = time.perf_counter()

        self.notifier.notify(
            AccountEvent(
                event_type=AccountEventType.REGISTERED,
                account_id=created.id,
                email=created.email,
                payload={"role": created.role.value},
            )
        )

        logger.info(
            "Account registered",
            account_id=created.id,
            role=created.role.value,
            validation_ms=round((validated_at - started) * 1000, 2),
            hashing_ms=round((hashed_at - validated_at) * 1000, 2),
            persistence_ms=round((persisted_at - hashed_at) * 1000, 2),
        )
        return created.sanitized()

    async def create_superadmin(self, data: RegisterAccountInput) -> SanitizedAccount:
        """Bootstrap the first super admin; refused once one exists.

        Raises:
            ConflictError: If a super admin or the email already exists.
        """
        async with store_operation("check existing super admins"):
            page = await self.store.find_all(
                Pagination(page=1, limit=1),
                AccountFilters(role=AccountRole.SUPER_ADMIN, is_active=None),
            )
        if page.total > 0:
            raise ConflictError("A super admin already exists")

        email = AccountValidator.validate_email(data.email)
        password = AccountValidator.validate_password(data.password)
        first_name = AccountValidator.validate_name(data.first_name, "First name")
        last_name = AccountValidator.validate_name(data.last_name, "Last name")

        async with store_operation("check existing account"):
            existing = await self.store.find_by_email(email)
        AccountPolicy.ensure_email_available(existing)

        account = Account(
            id=str(uuid.uuid4()),
            email=email,
            password_hash=await hash_password(self.hasher, password),
            first_name=first_name,
            last_name=last_name,
            role=AccountRole.SUPER_ADMIN,
            email_verified=True,
        )
        async with store_operation("create super admin"):
            created = await self.store.create(account)

        logger.info("Super admin created", account_id=created.id)
        return created.sanitized()

    async def _ensure_can_grant(self, role: AccountRole, actor_id: str | None) -> None:
        if actor_id is None:
            raise ForbiddenError("Only administrators can assign elevated roles")
        actor = await load_actor(self.store, actor_id)
        if actor.role not in ADMIN_ROLES or role.outranks(actor.role):
            raise ForbiddenError("Insufficient permissions to assign this role")
