"""Pagination, filtering and paged-result types for account listings."""

import math
from dataclasses import dataclass, field

from userservice.domain.entities.account import Account, AccountRole, SanitizedAccount


@dataclass(frozen=True)
class Pagination:
    """Requested page (1-indexed) and page size."""

    page: int = 1
    limit: int = 10

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.limit


@dataclass(frozen=True)
class AccountFilters:
    """Listing filters.

    ``is_active`` defaults to ``True`` so listings hide deactivated accounts
    unless the caller overrides it; ``None`` matches both states.
    """

    role: AccountRole | None = None
    is_active: bool | None = True
    email_verified: bool | None = None
    search: str | None = None


@dataclass
class PaginatedAccounts:
    """One page of accounts plus the totals needed to navigate the rest."""

    items: list[Account] = field(default_factory=list)
    total: int = 0
    page: int = 1
    limit: int = 10

    @property
    def total_pages(self) -> int:
        if self.limit <= 0:
            return 0
        return math.ceil(self.total / self.limit)


@dataclass(frozen=True)
class PaginatedSanitizedAccounts:
    """Caller-facing page of accounts with password hashes stripped."""

    items: list[SanitizedAccount]
    total: int
    page: int
    limit: int
    total_pages: int

    @classmethod
    def from_page(cls, page: PaginatedAccounts) -> "PaginatedSanitizedAccounts":
        return cls(
            items=[account.sanitized() for account in page.items],
            total=page.total,
            page=page.page,
            limit=page.limit,
            total_pages=page.total_pages,
        )
