"""Store lookups shared by the account use cases."""

from userservice.application.errors import store_operation
from userservice.domain.entities import Account
from userservice.domain.exceptions import NotFoundError
from userservice.domain.interfaces import AccountStore
from userservice.domain.services import AccountPolicy, AccountValidator


async def load_account(store: AccountStore, account_id: str) -> Account:
    """Fetch an already validated account id or raise ``NotFoundError``."""
    async with store_operation("load account"):
        account = await store.find_by_id(account_id)
    if account is None:
        raise NotFoundError("Account not found")
    return account


async def load_actor(store: AccountStore, actor_id: str) -> Account:
    """Validate, fetch and require an active acting account."""
    actor_id = AccountValidator.validate_account_id(actor_id, "Actor ID")
    async with store_operation("load actor"):
        actor = await store.find_by_id(actor_id)
    return AccountPolicy.ensure_active_actor(actor)
