"""Identity claims carried by a bearer token."""

from dataclasses import dataclass
from datetime import datetime

from userservice.domain.entities.account import AccountRole


@dataclass(frozen=True)
class TokenClaims:
    """Validated identity assertions extracted from a bearer token.

    Attributes:
        account_id: Identifier of the account the token was issued to.
        email: Email of the account at issue time.
        role: Role of the account at issue time.
        issued_at: When the token was signed.
        expires_at: When the token stops being valid.
    """

    account_id: str
    email: str
    role: AccountRole
    issued_at: datetime
    expires_at: datetime
