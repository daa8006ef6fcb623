"""Account lifecycle rules.

Pure decision logic over accounts: who may register, authenticate, be
deleted, deactivated or promoted. Nothing here touches storage; every rule
either returns quietly or raises a classified error.
"""

from datetime import datetime
from typing import Any, Sequence

from userservice.domain.entities import (
    ADMIN_ROLES,
    Account,
    AccountRole,
    AccountUpdate,
)
from userservice.domain.exceptions import (
    ConflictError,
    ForbiddenError,
    NotFoundError,
    UnauthorizedError,
    ValidationError,
)

INVALID_CREDENTIALS = "Invalid credentials"


class AccountPolicy:
    """Lifecycle and authorization rules for accounts."""

    MAX_BULK_DELETE = 50

    @staticmethod
    def ensure_email_available(existing: Account | None) -> None:
        if existing is not None:
            raise ConflictError("Account already exists with this email")

    @staticmethod
    def parse_role(value: Any) -> AccountRole:
        """Map a role value or name onto the closed role set.

        Raises:
            ValidationError: If the value is not one of the known roles.
        """
        if isinstance(value, AccountRole):
            return value
        if isinstance(value, str):
            candidate = value.strip().lower()
            for role in AccountRole:
                if role.value == candidate:
                    return role
        raise ValidationError("Invalid role specified")

    @staticmethod
    def can_authenticate(account: Account | None, password_matches: bool, now: datetime) -> bool:
        """Decide whether a login attempt succeeds.

        The account must exist, not be locked, match the password and be
        active. Callers report every refusal with the same message.
        """
        if account is None or not password_matches:
            return False
        if account.is_locked(now):
            return False
        return account.is_active

    @classmethod
    def ensure_can_authenticate(
        cls, account: Account | None, password_matches: bool, now: datetime
    ) -> None:
        if not cls.can_authenticate(account, password_matches, now):
            raise UnauthorizedError(INVALID_CREDENTIALS)

    @staticmethod
    def successful_login_update(now: datetime) -> AccountUpdate:
        return AccountUpdate(login_attempts=0, locked_until=None, last_login=now)

    @staticmethod
    def ensure_active_actor(actor: Account | None, label: str = "Actor") -> Account:
        """Require that the acting account exists and is active."""
        if actor is None:
            raise NotFoundError(f"{label} account not found")
        if not actor.is_active:
            raise ForbiddenError(f"{label} account is deactivated")
        return actor

    @staticmethod
    def ensure_not_self(target_id: str, actor_id: str | None) -> None:
        if actor_id is not None and actor_id == target_id:
            raise ValidationError("You cannot delete your own account")

    @classmethod
    def ensure_can_delete(cls, target: Account, actor_id: str | None) -> None:
        """Self-service delete: never oneself, never an administrator."""
        cls.ensure_not_self(target.id, actor_id)
        if target.role in ADMIN_ROLES:
            raise ForbiddenError("Admin accounts cannot be deleted directly")

    @classmethod
    def ensure_can_admin_delete(cls, actor: Account, target: Account, force: bool) -> None:
        """Elevated delete performed by an administrator.

        Without ``force`` only a super admin may delete an admin, and super
        admins are never deletable. Forcing is itself reserved to super
        admins.
        """
        if actor.role not in ADMIN_ROLES:
            raise ForbiddenError("Insufficient permissions to perform admin delete")
        cls.ensure_not_self(target.id, actor.id)

        if force:
            if actor.role is not AccountRole.SUPER_ADMIN:
                raise ForbiddenError("Only super admins can force delete accounts")
            return

        if target.role is AccountRole.ADMIN and actor.role is not AccountRole.SUPER_ADMIN:
            raise ForbiddenError("Only super admins can delete admin accounts")
        if target.role is AccountRole.SUPER_ADMIN:
            raise ForbiddenError("Super admin accounts cannot be deleted")

    @classmethod
    def ensure_bulk_size(cls, account_ids: Sequence[str] | None) -> None:
        if not account_ids:
            raise ValidationError("Account IDs are required")
        if len(account_ids) > cls.MAX_BULK_DELETE:
            raise ValidationError(
                f"Cannot delete more than {cls.MAX_BULK_DELETE} accounts at once"
            )

    @staticmethod
    def ensure_can_bulk_delete(actor: Account | None) -> Account:
        if actor is None or actor.role not in ADMIN_ROLES:
            raise ForbiddenError("Insufficient permissions for bulk delete")
        if not actor.is_active:
            raise ForbiddenError("Actor account is deactivated")
        return actor

    @staticmethod
    def ensure_can_assign_role(actor: Account, target: Account, new_role: AccountRole) -> None:
        """An administrator may grant at most its own role, and only to accounts it does not rank below."""
        if actor.role not in ADMIN_ROLES:
            raise ForbiddenError("Insufficient permissions to change roles")
        if new_role.outranks(actor.role):
            raise ForbiddenError("Cannot grant a role above your own")
        if target.role.outranks(actor.role):
            raise ForbiddenError("Cannot modify an account with a higher role")
