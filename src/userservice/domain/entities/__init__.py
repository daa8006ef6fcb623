"""Domain entities for the user service.

Entities are plain dataclasses with no dependency on infrastructure or
frameworks.
"""

from userservice.domain.entities.account import (
    ADMIN_ROLES,
    UNSET,
    Account,
    AccountRole,
    AccountStatus,
    AccountUpdate,
    JSONDocument,
    SanitizedAccount,
)
from userservice.domain.entities.account_event import AccountEvent, AccountEventType
from userservice.domain.entities.pagination import (
    AccountFilters,
    PaginatedAccounts,
    PaginatedSanitizedAccounts,
    Pagination,
)
from userservice.domain.entities.token_claims import TokenClaims

__all__ = [
    "ADMIN_ROLES",
    "Account",
    "AccountEvent",
    "AccountEventType",
    "AccountFilters",
    "AccountRole",
    "AccountStatus",
    "AccountUpdate",
    "JSONDocument",
    "PaginatedAccounts",
    "PaginatedSanitizedAccounts",
    "Pagination",
    "SanitizedAccount",
    "TokenClaims",
    "UNSET",
]
