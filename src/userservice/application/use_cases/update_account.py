"""Update account use case.

Covers every in-place mutation of an account: general partial updates,
profile edits, password changes, activation state, role changes and email
confirmation. Each entry point validates before it writes, so a rejected
request leaves the stored account untouched.
"""

import secrets
from typing import Any

from userservice.application.dto import UpdateAccountInput
from userservice.application.errors import hash_password, store_operation
from userservice.application.lookup import load_account, load_actor
from userservice.core.logging import get_logger
from userservice.domain.entities import (
    ADMIN_ROLES,
    Account,
    AccountRole,
    AccountStatus,
    AccountUpdate,
    SanitizedAccount,
)
from userservice.domain.exceptions import (
    ForbiddenError,
    NotFoundError,
    UnauthorizedError,
    ValidationError,
)
from userservice.domain.interfaces import AccountStore
from userservice.domain.services import AccountPolicy, AccountValidator
from userservice.infrastructure.auth import PasswordHasher

logger = get_logger(__name__)

PROFILE_FIELDS = frozenset(
    {
        "first_name",
        "last_name",
        "phone",
        "date_of_birth",
        "profile_image_url",
        "preferences",
    }
)


class UpdateAccountUseCase:
    """Use case for modifying existing accounts."""

    def __init__(self, store: AccountStore, hasher: PasswordHasher) -> None:
        self.store = store
        self.hasher = hasher

    async def execute(
        self,
        account_id: str,
        data: UpdateAccountInput,
        actor_id: str | None = None,
    ) -> SanitizedAccount:
        """Apply a partial update.

        Args:
            account_id: Account to modify.
            data: Fields to change; unpopulated slots are left alone.
            actor_id: Account performing the change. Defaults to the
                account itself for the ``updated_by`` audit field.

        Returns:
            The updated account. With nothing to change, the current account.

        Raises:
            ValidationError: If the id or any provided field is invalid.
            NotFoundError: If the account does not exist.
            ConflictError: If the new email belongs to another account.
            ForbiddenError: If the actor may not make this change.
        """
        account_id = AccountValidator.validate_account_id(account_id)
        account = await load_account(self.store, account_id)

        actor = None
        if actor_id is not None:
            actor = await load_actor(self.store, actor_id)
            self._ensure_can_modify(actor, account)

        changes = await self._build_changes(account, data.populated(), actor)
        if changes.is_empty():
            return account.sanitized()

        changes.updated_by = actor.id if actor else account_id
        updated = await self._persist(account_id, changes)
        logger.info(
            "Account updated",
            account_id=account_id,
            updated_by=changes.updated_by,
            fields=sorted(data.populated()),
        )
        return updated.sanitized()

    async def update_profile(
        self,
        account_id: str,
        data: UpdateAccountInput,
        actor_id: str | None = None,
    ) -> SanitizedAccount:
        """Update only the self-service profile fields; anything else is ignored."""
        profile = UpdateAccountInput(
            **{k: v for k, v in data.populated().items() if k in PROFILE_FIELDS}
        )
        return await self.execute(account_id, profile, actor_id)

    async def change_password(
        self, account_id: str, current_password: str, new_password: str
    ) -> SanitizedAccount:
        """Replace the password after re-checking the current one.

        Raises:
            UnauthorizedError: If the current password does not verify.
            ValidationError: If the new password fails the policy.
        """
        account_id = AccountValidator.validate_account_id(account_id)
        if not isinstance(current_password, str) or not current_password:
            raise ValidationError("Current password is required")
        new_password = AccountValidator.validate_password(new_password, field="new password")

        account = await load_account(self.store, account_id)
        if not account.is_active:
            raise ForbiddenError("Account is deactivated")

        if not await self.hasher.verify_async(current_password, account.password_hash):
            logger.info("Password change refused", account_id=account_id)
            raise UnauthorizedError("Current password is incorrect")

        changes = AccountUpdate(
            password_hash=await hash_password(self.hasher, new_password),
            password_reset_token=None,
            password_reset_expires=None,
            updated_by=account_id,
        )
        updated = await self._persist(account_id, changes)
        logger.info("Password changed", account_id=account_id)
        return updated.sanitized()

    async def deactivate(self, account_id: str, actor_id: str | None = None) -> SanitizedAccount:
        """Mark an account inactive; it can no longer log in or act."""
        return await self.execute(
            account_id,
            UpdateAccountInput(is_active=False, status=AccountStatus.INACTIVE),
            actor_id,
        )

    async def activate(self, account_id: str, actor_id: str | None = None) -> SanitizedAccount:
        """Reactivate an account and clear any lockout."""
        account_id = AccountValidator.validate_account_id(account_id)
        account = await load_account(self.store, account_id)
        actor = None
        if actor_id is not None:
            actor = await load_actor(self.store, actor_id)
            self._ensure_can_modify(actor, account)

        changes = AccountUpdate(
            is_active=True,
            status=AccountStatus.ACTIVE,
            login_attempts=0,
            locked_until=None,
            updated_by=actor.id if actor else account_id,
        )
        updated = await self._persist(account_id, changes)
        logger.info("Account activated", account_id=account_id, updated_by=changes.updated_by)
        return updated.sanitized()

    async def update_role(
        self, account_id: str, role: AccountRole | str, actor_id: str | None = None
    ) -> SanitizedAccount:
        """Change an account's role.

        Raises:
            ValidationError: If the role is not one of the known roles.
            ForbiddenError: If the actor may not grant this role to this account.
        """
        AccountPolicy.parse_role(role)
        return await self.execute(account_id, UpdateAccountInput(role=role), actor_id)

    async def confirm_email(self, account_id: str, token: str) -> SanitizedAccount:
        """Mark the email verified when ``token`` matches the pending one.

        Raises:
            ValidationError: If the token is missing or does not match.
        """
        account_id = AccountValidator.validate_account_id(account_id)
        if not isinstance(token, str) or not token:
            raise ValidationError("Verification token is required")

        account = await load_account(self.store, account_id)
        if account.email_verified:
            return account.sanitized()

        expected = account.email_verification_token
        if not expected or not secrets.compare_digest(expected.encode(), token.encode()):
            logger.info("Email confirmation refused", account_id=account_id)
            raise ValidationError("Invalid verification token")

        changes = AccountUpdate(
            email_verified=True,
            email_verification_token=None,
            updated_by=account_id,
        )
        if account.status is AccountStatus.PENDING_VERIFICATION:
            changes.status = AccountStatus.ACTIVE
        updated = await self._persist(account_id, changes)
        logger.info("Email confirmed", account_id=account_id)
        return updated.sanitized()

    @staticmethod
    def _ensure_can_modify(actor: Account, target: Account) -> None:
        """Anyone may modify themselves; others need an admin that is not outranked."""
        if actor.id == target.id:
            return
        if actor.role not in ADMIN_ROLES:
            raise ForbiddenError("Insufficient permissions to modify this account")
        if target.role.outranks(actor.role):
            raise ForbiddenError("Cannot modify an account with a higher role")

    async def _build_changes(
        self, account: Account, fields: dict[str, Any], actor: Account | None
    ) -> AccountUpdate:
        changes = AccountUpdate()

        if "email" in fields:
            email = AccountValidator.validate_email(fields["email"])
            if email != account.email:
                async with store_operation("check existing account"):
                    existing = await self.store.find_by_email(email)
                if existing is not None and existing.id != account.id:
                    AccountPolicy.ensure_email_available(existing)
                changes.email = email
        if "first_name" in fields:
            changes.first_name = AccountValidator.validate_name(fields["first_name"], "First name")
        if "last_name" in fields:
            changes.last_name = AccountValidator.validate_name(fields["last_name"], "Last name")
        if "phone" in fields:
            changes.phone = AccountValidator.validate_phone(fields["phone"])
        if "date_of_birth" in fields:
            changes.date_of_birth = AccountValidator.validate_date_of_birth(fields["date_of_birth"])
        if "profile_image_url" in fields:
            changes.profile_image_url = fields["profile_image_url"] or None
        if "role" in fields:
            role = AccountPolicy.parse_role(fields["role"])
            if actor is not None:
                AccountPolicy.ensure_can_assign_role(actor, account, role)
            changes.role = role
        if "status" in fields:
            changes.status = AccountValidator.validate_status(fields["status"])
        if "is_active" in fields:
            changes.is_active = AccountValidator.validate_flag(fields["is_active"], "is_active")
        if "email_verified" in fields:
            changes.email_verified = AccountValidator.validate_flag(
                fields["email_verified"], "email_verified"
            )
        if "preferences" in fields:
            changes.preferences = AccountValidator.validate_document(
                fields["preferences"], "Preferences"
            )
        if "metadata" in fields:
            changes.metadata = AccountValidator.validate_document(fields["metadata"], "Metadata")

        # Hash last so a rejected field never costs a hash
        if "password" in fields:
            password = AccountValidator.validate_password(fields["password"])
            changes.password_hash = await hash_password(self.hasher, password)

        return changes

    async def _persist(self, account_id: str, changes: AccountUpdate) -> Account:
        async with store_operation("update account"):
            updated = await self.store.update(account_id, changes)
        if updated is None:
            raise NotFoundError("Account not found")
        return updated
