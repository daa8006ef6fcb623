"""Get account use case."""

from userservice.application.errors import store_operation
from userservice.application.lookup import load_account
from userservice.domain.entities import Account, SanitizedAccount
from userservice.domain.exceptions import ForbiddenError, NotFoundError
from userservice.domain.interfaces import AccountStore
from userservice.domain.services import AccountValidator


class GetAccountUseCase:
    """Fetches a single account; deactivated accounts are not served."""

    def __init__(self, store: AccountStore) -> None:
        self.store = store

    async def by_id(self, account_id: str) -> SanitizedAccount:
        account_id = AccountValidator.validate_account_id(account_id)
        return self._visible(await load_account(self.store, account_id))

    async def by_email(self, email: str) -> SanitizedAccount:
        email = AccountValidator.validate_email(email)
        async with store_operation("find account by email"):
            account = await self.store.find_by_email(email)
        if account is None:
            raise NotFoundError("Account not found")
        return self._visible(account)

    @staticmethod
    def _visible(account: Account) -> SanitizedAccount:
        if not account.is_active:
            raise ForbiddenError("Account is deactivated")
        return account.sanitized()
