"""Input and result types for the account use cases."""

from dataclasses import dataclass, field, fields
from datetime import date
from typing import Any

from userservice.domain.entities import (
    UNSET,
    AccountRole,
    AccountStatus,
    JSONDocument,
    SanitizedAccount,
    TokenClaims,
)


@dataclass
class RegisterAccountInput:
    """Registration payload. ``date_of_birth`` may be a date or ISO string."""

    email: str
    password: str
    first_name: str
    last_name: str
    phone: str | None = None
    date_of_birth: date | str | None = None
    profile_image_url: str | None = None
    role: AccountRole | str = AccountRole.USER
    preferences: JSONDocument = field(default_factory=dict)
    metadata: JSONDocument = field(default_factory=dict)


@dataclass
class LoginInput:
    email: str
    password: str


@dataclass
class UpdateAccountInput:
    """Caller-supplied changes; slots left as ``UNSET`` are not touched.

    ``password`` is plaintext here and is hashed before it reaches the store.
    """

    email: str = UNSET
    password: str = UNSET
    first_name: str = UNSET
    last_name: str = UNSET
    phone: str | None = UNSET
    date_of_birth: date | str | None = UNSET
    profile_image_url: str | None = UNSET
    role: AccountRole | str = UNSET
    status: AccountStatus | str = UNSET
    is_active: bool = UNSET
    email_verified: bool = UNSET
    preferences: JSONDocument = UNSET
    metadata: JSONDocument = UNSET

    def populated(self) -> dict[str, Any]:
        return {
            f.name: getattr(self, f.name)
            for f in fields(self)
            if getattr(self, f.name) is not UNSET
        }


@dataclass(frozen=True)
class LoginResult:
    """Successful login: the sanitized account and its bearer token.

    Attributes:
        account: Caller-safe view of the account.
        token: Signed access token.
        expires_in: Token lifetime in seconds.
    """

    account: SanitizedAccount
    token: str
    expires_in: int


@dataclass(frozen=True)
class VerifiedToken:
    claims: TokenClaims
    renewed_token: str | None = None


@dataclass
class BulkDeleteResult:
    """Per-id outcome of a bulk delete.

    ``errors`` maps each failed id to the reason it was not deleted.
    """

    succeeded: list[str] = field(default_factory=list)
    failed: list[str] = field(default_factory=list)
    errors: dict[str, str] = field(default_factory=dict)
