"""Delete account use case.

Four ways to remove an account:

- ``execute``: hard delete through the self-service rules (never oneself,
  never an administrator).
- ``soft_delete``: same rules, but the row stays and is deactivated.
- ``admin_delete``: elevated delete by an administrator, optionally forced.
- ``bulk_delete``: up to 50 ids, each through the self-service rules, with
  per-id outcomes.
"""

from typing import Sequence

from userservice.application.dto import BulkDeleteResult
from userservice.application.errors import store_operation
from userservice.application.lookup import load_account, load_actor
from userservice.core.logging import get_logger
from userservice.domain.entities import AccountStatus, AccountUpdate, SanitizedAccount
from userservice.domain.exceptions import AccountServiceError, NotFoundError
from userservice.domain.interfaces import AccountStore
from userservice.domain.services import AccountPolicy, AccountValidator

logger = get_logger(__name__)


class DeleteAccountUseCase:
    """Use case for removing accounts."""

    def __init__(self, store: AccountStore) -> None:
        self.store = store

    async def execute(self, account_id: str, actor_id: str | None = None) -> bool:
        """Hard delete an account.

        Raises:
            ValidationError: If an id is malformed or the actor targets itself.
            NotFoundError: If the account does not exist.
            ForbiddenError: If the target is an administrator.
        """
        account_id = AccountValidator.validate_account_id(account_id)
        if actor_id is not None:
            actor_id = AccountValidator.validate_account_id(actor_id, "Actor ID")
        AccountPolicy.ensure_not_self(account_id, actor_id)

        target = await load_account(self.store, account_id)
        if actor_id is not None:
            await load_actor(self.store, actor_id)
        AccountPolicy.ensure_can_delete(target, actor_id)

        await self._delete(account_id)
        logger.info("Account deleted", account_id=account_id, deleted_by=actor_id)
        return True

    async def soft_delete(
        self, account_id: str, actor_id: str | None = None
    ) -> SanitizedAccount:
        """Deactivate an account in place under the hard delete rules."""
        account_id = AccountValidator.validate_account_id(account_id)
        if actor_id is not None:
            actor_id = AccountValidator.validate_account_id(actor_id, "Actor ID")
        AccountPolicy.ensure_not_self(account_id, actor_id)

        target = await load_account(self.store, account_id)
        if actor_id is not None:
            await load_actor(self.store, actor_id)
        AccountPolicy.ensure_can_delete(target, actor_id)

        changes = AccountUpdate(
            is_active=False,
            status=AccountStatus.INACTIVE,
            updated_by=actor_id or account_id,
        )
        async with store_operation("soft delete account"):
            updated = await self.store.update(account_id, changes)
        if updated is None:
            raise NotFoundError("Account not found")

        logger.info("Account soft deleted", account_id=account_id, deleted_by=actor_id)
        return updated.sanitized()

    async def admin_delete(self, account_id: str, actor_id: str, force: bool = False) -> bool:
        """Delete an account with administrator privileges.

        Args:
            account_id: Account to delete.
            actor_id: Administrator performing the delete.
            force: Skip the admin-target protections (super admins only).

        Raises:
            NotFoundError: If the actor or target does not exist.
            ForbiddenError: If the actor lacks the privileges for this target.
        """
        account_id = AccountValidator.validate_account_id(account_id)
        actor = await load_actor(self.store, actor_id)
        target = await load_account(self.store, account_id)
        AccountPolicy.ensure_can_admin_delete(actor, target, force)

        await self._delete(account_id)
        logger.warning(
            "Account deleted by administrator",
            account_id=account_id,
            target_role=target.role.value,
            deleted_by=actor.id,
            force=force,
        )
        return True

    async def bulk_delete(self, account_ids: Sequence[str], actor_id: str) -> BulkDeleteResult:
        """Delete many accounts, isolating each failure.

        Batch-level checks (size, actor privileges) fail the whole call.
        After that every id is deleted independently and its outcome recorded.

        Returns:
            BulkDeleteResult partitioning the ids into succeeded and failed.
        """
        AccountPolicy.ensure_bulk_size(account_ids)
        actor_id = AccountValidator.validate_account_id(actor_id, "Actor ID")
        async with store_operation("load actor"):
            actor = await self.store.find_by_id(actor_id)
        actor = AccountPolicy.ensure_can_bulk_delete(actor)

        result = BulkDeleteResult()
        for account_id in account_ids:
            try:
                await self.execute(account_id, actor.id)
            except AccountServiceError as e:
                result.failed.append(account_id)
                result.errors[account_id] = e.message
            else:
                result.succeeded.append(account_id)

        logger.info(
            "Bulk delete completed",
            deleted_by=actor.id,
            succeeded=len(result.succeeded),
            failed=len(result.failed),
        )
        return result

    async def _delete(self, account_id: str) -> None:
        async with store_operation("delete account"):
            deleted = await self.store.delete(account_id)
        if not deleted:
            raise NotFoundError("Account not found")
