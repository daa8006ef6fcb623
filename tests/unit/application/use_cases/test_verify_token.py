"""Unit tests for the verify token use case."""

import uuid
from datetime import datetime, timedelta, timezone
from unittest.mock import AsyncMock

import pytest

from userservice.application.use_cases import VerifyTokenUseCase
from userservice.domain.entities import AccountRole, AccountUpdate
from userservice.domain.exceptions import UnauthorizedError


@pytest.fixture
def use_case(store, token_service) -> VerifyTokenUseCase:
    return VerifyTokenUseCase(store, token_service)


class TestVerifyToken:
    """Tests for VerifyTokenUseCase.execute."""

    @pytest.mark.asyncio
    async def test_valid_token(self, use_case, make_account, token_service):
        account = await make_account(role=AccountRole.ADMIN)
        token = token_service.issue(account.id, account.email, account.role)

        claims = await use_case.execute(token)

        assert claims.account_id == account.id
        assert claims.email == account.email
        assert claims.role is AccountRole.ADMIN

    @pytest.mark.asyncio
    async def test_expired_token(self, use_case, make_account, token_service):
        account = await make_account()
        token = token_service.issue(
            account.id,
            account.email,
            account.role,
            expires_at=datetime.now(timezone.utc) - timedelta(minutes=1),
        )

        with pytest.raises(UnauthorizedError, match="expired"):
            await use_case.execute(token)

    @pytest.mark.asyncio
    async def test_tampered_token(self, use_case, make_account, token_service):
        account = await make_account()
        token = token_service.issue(account.id, account.email, account.role)

        with pytest.raises(UnauthorizedError, match="Invalid token"):
            await use_case.execute(token[:-4] + "abcd")

    @pytest.mark.asyncio
    @pytest.mark.parametrize("token", ["", None, "garbage"])
    async def test_missing_or_garbage_token(self, use_case, token):
        with pytest.raises(UnauthorizedError):
            await use_case.execute(token)

    @pytest.mark.asyncio
    async def test_deleted_account(self, use_case, token_service):
        token = token_service.issue(str(uuid.uuid4()), "ghost@example.com", "user")

        with pytest.raises(UnauthorizedError, match="not found or inactive"):
            await use_case.execute(token)

    @pytest.mark.asyncio
    @pytest.mark.parametrize("account_id", ["not-a-uuid", "1 OR 1=1", "../admin"])
    async def test_malformed_account_id_rejected_before_lookup(self, token_service, account_id):
        store = AsyncMock()
        token = token_service.issue(account_id, "jane@example.com", "user")

        with pytest.raises(UnauthorizedError) as exc_info:
            await VerifyTokenUseCase(store, token_service).execute(token)

        assert exc_info.value.message == "Invalid token"
        store.find_by_id.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_deactivated_account(self, use_case, make_account, token_service, store):
        account = await make_account()
        token = token_service.issue(account.id, account.email, account.role)
        await store.update(account.id, AccountUpdate(is_active=False))

        with pytest.raises(UnauthorizedError):
            await use_case.execute(token)


class TestVerifyWithRenewal:
    """Tests for VerifyTokenUseCase.execute_with_renewal."""

    @pytest.mark.asyncio
    async def test_fresh_token_not_renewed(self, use_case, make_account, token_service):
        account = await make_account()
        token = token_service.issue(account.id, account.email, account.role)

        result = await use_case.execute_with_renewal(token)

        assert result.claims.account_id == account.id
        assert result.renewed_token is None

    @pytest.mark.asyncio
    async def test_token_near_expiry_renewed(self, use_case, make_account, token_service):
        account = await make_account()
        token = token_service.issue(
            account.id, account.email, account.role, expires_delta=timedelta(seconds=60)
        )

        result = await use_case.execute_with_renewal(token)

        assert result.renewed_token is not None
        renewed = await use_case.execute(result.renewed_token)
        assert renewed.account_id == account.id
        assert renewed.expires_at > result.claims.expires_at
        # Original remains valid
        assert (await use_case.execute(token)).account_id == account.id
