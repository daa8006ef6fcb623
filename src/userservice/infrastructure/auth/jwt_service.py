"""JWT token service.

Signs and validates the bearer tokens handed out at login. Tokens carry the
account identity claims and an expiry; validation fails closed on any
signature, structure, issuer or expiry problem.
"""

from datetime import datetime, timedelta, timezone
from typing import Any

import jwt

from userservice.core.config import Settings, get_settings
from userservice.domain.entities import AccountRole, TokenClaims


class JWTError(Exception):
    """Base exception for JWT-related errors."""

    pass


class TokenExpiredError(JWTError):
    """Raised when a token has expired."""

    pass


class InvalidTokenError(JWTError):
    """Raised when a token is malformed, tampered with or otherwise unusable."""

    pass


class TokenService:
    """Service for issuing and validating access tokens."""

    ALGORITHM = "HS256"
    TOKEN_TYPE = "access"
    REQUIRED_CLAIMS = ("exp", "iat", "iss", "sub")

    def __init__(
        self,
        secret_key: str | None = None,
        issuer: str | None = None,
        expires_in: int | None = None,
        renewal_threshold: int | None = None,
    ) -> None:
        """Initialize the token service.

        Args:
            secret_key: Secret for signing tokens. Defaults to settings.
            issuer: Value of the ``iss`` claim. Defaults to settings.
            expires_in: Default token lifetime in seconds. Defaults to settings.
            renewal_threshold: Remaining lifetime in seconds below which a
                token is renewed. Defaults to settings.
        """
        if None in (secret_key, issuer, expires_in, renewal_threshold):
            settings = get_settings()
            secret_key = secret_key or settings.secret_key
            issuer = issuer or settings.token_issuer
            if expires_in is None:
                expires_in = settings.token_expire_seconds
            if renewal_threshold is None:
                renewal_threshold = settings.token_renewal_threshold_seconds

        self._secret_key = secret_key
        self.issuer = issuer
        self.expires_in = expires_in
        self.renewal_threshold = renewal_threshold

    @classmethod
    def from_settings(cls, settings: Settings) -> "TokenService":
        return cls(
            secret_key=settings.secret_key,
            issuer=settings.token_issuer,
            expires_in=settings.token_expire_seconds,
            renewal_threshold=settings.token_renewal_threshold_seconds,
        )

    def issue(
        self,
        account_id: str,
        email: str,
        role: AccountRole | str,
        expires_delta: timedelta | None = None,
        expires_at: datetime | None = None,
    ) -> str:
        """Create a signed access token.

        Args:
            account_id: The account's unique identifier.
            email: The account's email address.
            role: The account's role.
            expires_delta: Lifetime relative to now.
            expires_at: Absolute expiry; takes precedence over ``expires_delta``.

        Returns:
            Encoded JWT access token.
        """
        now = datetime.now(timezone.utc)
        if expires_at is None:
            if expires_delta is None:
                expires_delta = timedelta(seconds=self.expires_in)
            expires_at = now + expires_delta

        payload = {
            "iss": self.issuer,
            "sub": account_id,
            "iat": now,
            "exp": expires_at,
            "account_id": account_id,
            "email": email,
            "role": role.value if isinstance(role, AccountRole) else role,
            "type": self.TOKEN_TYPE,
        }
        return jwt.encode(payload, self._secret_key, algorithm=self.ALGORITHM)

    def decode_token(self, token: str) -> dict[str, Any]:
        """Decode and verify a JWT token.

        Raises:
            TokenExpiredError: If the token has expired.
            InvalidTokenError: If the token is invalid.
        """
        if not token or not isinstance(token, str):
            raise InvalidTokenError("Token is required")
        try:
            return jwt.decode(
                token,
                self._secret_key,
                algorithms=[self.ALGORITHM],
                issuer=self.issuer,
                options={"require": list(self.REQUIRED_CLAIMS)},
            )
        except jwt.ExpiredSignatureError as e:
            raise TokenExpiredError("Token has expired") from e
        except jwt.InvalidTokenError as e:
            raise InvalidTokenError("Invalid token") from e

    def validate(self, token: str) -> TokenClaims:
        """Validate an access token and return its identity claims.

        Raises:
            TokenExpiredError: If the token has expired.
            InvalidTokenError: If the signature, structure or claims are wrong.
        """
        payload = self.decode_token(token)
        if payload.get("type") != self.TOKEN_TYPE:
            raise InvalidTokenError("Not an access token")

        account_id = payload.get("account_id")
        email = payload.get("email")
        role = payload.get("role")
        if not account_id or not email or not role:
            raise InvalidTokenError("Invalid token payload")
        try:
            parsed_role = AccountRole(role)
        except ValueError as e:
            raise InvalidTokenError("Invalid token payload") from e

        return TokenClaims(
            account_id=account_id,
            email=email,
            role=parsed_role,
            issued_at=datetime.fromtimestamp(payload["iat"], tz=timezone.utc),
            expires_at=datetime.fromtimestamp(payload["exp"], tz=timezone.utc),
        )

    def remaining_lifetime(self, claims: TokenClaims, now: datetime | None = None) -> timedelta:
        return claims.expires_at - (now or datetime.now(timezone.utc))

    def renew_if_expiring(
        self,
        claims: TokenClaims,
        threshold: timedelta | None = None,
        now: datetime | None = None,
    ) -> str | None:
        """Issue a replacement token when the remaining lifetime is short.

        The original token is not invalidated.

        Returns:
            A freshly issued token with the same identity claims, or ``None``
            if the token still has at least ``threshold`` left.
        """
        if threshold is None:
            threshold = timedelta(seconds=self.renewal_threshold)
        if self.remaining_lifetime(claims, now) >= threshold:
            return None
        return self.issue(claims.account_id, claims.email, claims.role)
