"""Unit tests for the access token service."""

import uuid
from datetime import datetime, timedelta, timezone

import jwt
import pytest

from userservice.domain.entities import AccountRole
from userservice.infrastructure.auth import InvalidTokenError, TokenExpiredError, TokenService

SECRET = "test-secret-key-that-is-at-least-32-characters-long"
ACCOUNT_ID = str(uuid.uuid4())


@pytest.fixture
def tokens() -> TokenService:
    return TokenService(secret_key=SECRET, issuer="issuer-a", expires_in=3600, renewal_threshold=600)


class TestIssue:
    """Tests for TokenService.issue."""

    def test_issue_carries_identity_claims(self, tokens):
        token = tokens.issue(ACCOUNT_ID, "user@example.com", AccountRole.MANAGER)

        decoded = jwt.decode(token, SECRET, algorithms=["HS256"], issuer="issuer-a")
        assert decoded["sub"] == ACCOUNT_ID
        assert decoded["account_id"] == ACCOUNT_ID
        assert decoded["email"] == "user@example.com"
        assert decoded["role"] == "manager"
        assert decoded["type"] == "access"
        assert decoded["exp"] - decoded["iat"] == 3600

    def test_issue_with_expires_delta(self, tokens):
        token = tokens.issue(ACCOUNT_ID, "user@example.com", "user", expires_delta=timedelta(minutes=5))

        claims = tokens.validate(token)
        assert claims.expires_at - claims.issued_at == timedelta(minutes=5)

    def test_issue_with_absolute_expiry(self, tokens):
        expires_at = (datetime.now(timezone.utc) + timedelta(days=2)).replace(microsecond=0)
        token = tokens.issue(ACCOUNT_ID, "user@example.com", "user", expires_at=expires_at)

        assert tokens.validate(token).expires_at == expires_at

    def test_default_lifetime_is_seven_days(self, settings):
        tokens = TokenService(secret_key=SECRET, issuer="x")

        assert tokens.expires_in == settings.token_expire_seconds == 7 * 24 * 3600


class TestValidate:
    """Tests for TokenService.validate."""

    def test_validate_round_trip(self, tokens):
        token = tokens.issue(ACCOUNT_ID, "user@example.com", AccountRole.ADMIN)

        claims = tokens.validate(token)
        assert claims.account_id == ACCOUNT_ID
        assert claims.email == "user@example.com"
        assert claims.role is AccountRole.ADMIN

    def test_expired_token(self, tokens):
        token = tokens.issue(
            ACCOUNT_ID,
            "user@example.com",
            "user",
            expires_at=datetime.now(timezone.utc) - timedelta(seconds=10),
        )

        with pytest.raises(TokenExpiredError):
            tokens.validate(token)

    def test_tampered_signature(self, tokens):
        token = tokens.issue(ACCOUNT_ID, "user@example.com", "user")
        header, payload, signature = token.split(".")
        tampered = f"{header}.{payload}.{signature[::-1]}"

        with pytest.raises(InvalidTokenError):
            tokens.validate(tampered)

    def test_tampered_payload(self, tokens):
        """Re-signing an elevated payload with another key is rejected."""
        forged = jwt.encode(
            {
                "iss": "issuer-a",
                "sub": ACCOUNT_ID,
                "iat": datetime.now(timezone.utc),
                "exp": datetime.now(timezone.utc) + timedelta(hours=1),
                "account_id": ACCOUNT_ID,
                "email": "user@example.com",
                "role": "super_admin",
                "type": "access",
            },
            "another-secret-key-that-is-32-characters-or-more",
            algorithm="HS256",
        )

        with pytest.raises(InvalidTokenError):
            tokens.validate(forged)

    def test_wrong_issuer(self, tokens):
        other = TokenService(secret_key=SECRET, issuer="issuer-b", expires_in=3600, renewal_threshold=600)

        with pytest.raises(InvalidTokenError):
            tokens.validate(other.issue(ACCOUNT_ID, "user@example.com", "user"))

    @pytest.mark.parametrize("token", ["", "not.a.token", "abc"])
    def test_malformed_token(self, tokens, token):
        with pytest.raises(InvalidTokenError):
            tokens.validate(token)

    @pytest.mark.parametrize("missing", ["account_id", "email", "role"])
    def test_missing_identity_claim(self, tokens, missing):
        payload = {
            "iss": "issuer-a",
            "sub": ACCOUNT_ID,
            "iat": datetime.now(timezone.utc),
            "exp": datetime.now(timezone.utc) + timedelta(hours=1),
            "account_id": ACCOUNT_ID,
            "email": "user@example.com",
            "role": "user",
            "type": "access",
        }
        del payload[missing]

        with pytest.raises(InvalidTokenError):
            tokens.validate(jwt.encode(payload, SECRET, algorithm="HS256"))

    def test_unknown_role(self, tokens):
        token = tokens.issue(ACCOUNT_ID, "user@example.com", "owner")

        with pytest.raises(InvalidTokenError):
            tokens.validate(token)

    def test_wrong_token_type(self, tokens):
        token = jwt.encode(
            {
                "iss": "issuer-a",
                "sub": ACCOUNT_ID,
                "iat": datetime.now(timezone.utc),
                "exp": datetime.now(timezone.utc) + timedelta(hours=1),
                "account_id": ACCOUNT_ID,
                "email": "user@example.com",
                "role": "user",
                "type": "refresh",
            },
            SECRET,
            algorithm="HS256",
        )

        with pytest.raises(InvalidTokenError):
            tokens.validate(token)


class TestRenewal:
    """Tests for proactive renewal."""

    def test_no_renewal_with_plenty_of_lifetime(self, tokens):
        claims = tokens.validate(tokens.issue(ACCOUNT_ID, "user@example.com", "user"))

        assert tokens.renew_if_expiring(claims) is None

    def test_renewal_near_expiry_keeps_claims(self, tokens):
        original = tokens.issue(
            ACCOUNT_ID, "user@example.com", "manager", expires_delta=timedelta(seconds=120)
        )
        claims = tokens.validate(original)

        renewed = tokens.renew_if_expiring(claims)

        assert renewed is not None
        renewed_claims = tokens.validate(renewed)
        assert renewed_claims.account_id == claims.account_id
        assert renewed_claims.email == claims.email
        assert renewed_claims.role == claims.role
        assert renewed_claims.expires_at > claims.expires_at
        # The original is not revoked
        assert tokens.validate(original) == claims

    def test_explicit_threshold(self, tokens):
        claims = tokens.validate(tokens.issue(ACCOUNT_ID, "user@example.com", "user"))

        assert tokens.renew_if_expiring(claims, threshold=timedelta(hours=2)) is not None

    def test_remaining_lifetime(self, tokens):
        claims = tokens.validate(tokens.issue(ACCOUNT_ID, "user@example.com", "user"))
        now = claims.issued_at + timedelta(minutes=10)

        assert tokens.remaining_lifetime(claims, now) == timedelta(minutes=50)
