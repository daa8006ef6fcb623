"""List accounts use case."""

from dataclasses import replace

from userservice.application.errors import store_operation
from userservice.core.logging import get_logger
from userservice.domain.entities import (
    AccountFilters,
    AccountRole,
    PaginatedSanitizedAccounts,
    Pagination,
)
from userservice.domain.interfaces import AccountStore
from userservice.domain.services import AccountPolicy, AccountValidator

logger = get_logger(__name__)


class ListAccountsUseCase:
    """Paginated, filtered account listings with hashes stripped."""

    def __init__(self, store: AccountStore) -> None:
        self.store = store

    async def execute(
        self,
        pagination: Pagination | None = None,
        filters: AccountFilters | None = None,
    ) -> PaginatedSanitizedAccounts:
        """List one page of accounts.

        Without filters only active accounts are listed; pass
        ``AccountFilters(is_active=None)`` to include deactivated ones.

        Raises:
            ValidationError: If page < 1, limit is outside 1..100, or the
                search term is empty or too long.
        """
        pagination = AccountValidator.validate_pagination(pagination or Pagination())
        filters = filters or AccountFilters()
        if filters.search is not None:
            filters = replace(filters, search=AccountValidator.validate_search(filters.search))

        async with store_operation("list accounts"):
            page = await self.store.find_all(pagination, filters)

        logger.debug(
            "Accounts listed",
            page=page.page,
            limit=page.limit,
            total=page.total,
        )
        return PaginatedSanitizedAccounts.from_page(page)

    async def count_active(self) -> int:
        async with store_operation("count active accounts"):
            page = await self.store.find_all(
                Pagination(page=1, limit=1), AccountFilters(is_active=True)
            )
        return page.total

    async def list_by_role(
        self, role: AccountRole | str, pagination: Pagination | None = None
    ) -> PaginatedSanitizedAccounts:
        """List active accounts holding ``role``."""
        parsed = AccountPolicy.parse_role(role)
        return await self.execute(pagination, AccountFilters(role=parsed))
