"""Unit tests for the update account use case."""

import uuid

import pytest
import pytest_asyncio

from userservice.application.dto import UpdateAccountInput
from userservice.application.use_cases import UpdateAccountUseCase
from userservice.domain.entities import AccountRole, AccountStatus, AccountUpdate
from userservice.domain.exceptions import (
    ConflictError,
    ForbiddenError,
    NotFoundError,
    UnauthorizedError,
    ValidationError,
)

from conftest import TEST_PASSWORD


@pytest.fixture
def use_case(store, hasher) -> UpdateAccountUseCase:
    return UpdateAccountUseCase(store, hasher)


class TestUpdate:
    """Tests for UpdateAccountUseCase.execute."""

    @pytest.mark.asyncio
    async def test_partial_update_leaves_other_fields(self, use_case, make_account, store):
        account = await make_account("jane@example.com", first_name="Jane", last_name="Doe")

        result = await use_case.execute(account.id, UpdateAccountInput(first_name="  Janet "))

        assert result.first_name == "Janet"
        assert result.last_name == "Doe"
        assert result.email == "jane@example.com"
        stored = await store.find_by_id(account.id)
        assert stored.updated_by == account.id
        assert stored.password_hash == account.password_hash

    @pytest.mark.asyncio
    async def test_empty_update_is_noop(self, use_case, make_account, store):
        account = await make_account()
        before = await store.find_by_id(account.id)

        result = await use_case.execute(account.id, UpdateAccountInput())

        assert result.id == account.id
        assert (await store.find_by_id(account.id)).updated_at == before.updated_at

    @pytest.mark.asyncio
    async def test_email_change_normalized(self, use_case, make_account):
        account = await make_account("jane@example.com")

        result = await use_case.execute(account.id, UpdateAccountInput(email=" New@Example.COM"))

        assert result.email == "new@example.com"

    @pytest.mark.asyncio
    async def test_email_taken_by_other_account(self, use_case, make_account):
        await make_account("taken@example.com")
        account = await make_account("jane@example.com")

        with pytest.raises(ConflictError):
            await use_case.execute(account.id, UpdateAccountInput(email="TAKEN@example.com"))

    @pytest.mark.asyncio
    async def test_same_email_different_case_allowed(self, use_case, make_account):
        account = await make_account("jane@example.com")

        result = await use_case.execute(account.id, UpdateAccountInput(email="JANE@example.com"))

        assert result.email == "jane@example.com"

    @pytest.mark.asyncio
    async def test_password_is_hashed(self, use_case, make_account, store, hasher):
        account = await make_account()

        await use_case.execute(account.id, UpdateAccountInput(password="NewSecure456"))

        stored = await store.find_by_id(account.id)
        assert stored.password_hash != "NewSecure456"
        assert hasher.verify("NewSecure456", stored.password_hash)

    @pytest.mark.asyncio
    async def test_weak_password_rejected(self, use_case, make_account, store):
        account = await make_account()

        with pytest.raises(ValidationError):
            await use_case.execute(account.id, UpdateAccountInput(password="short"))

        assert (await store.find_by_id(account.id)).password_hash == account.password_hash

    @pytest.mark.asyncio
    async def test_invalid_role_leaves_account_unchanged(self, use_case, make_account, store):
        account = await make_account(first_name="Jane")

        with pytest.raises(ValidationError, match="Invalid role"):
            await use_case.execute(
                account.id, UpdateAccountInput(first_name="Changed", role="superuser")
            )

        stored = await store.find_by_id(account.id)
        assert stored.first_name == "Jane"
        assert stored.role is AccountRole.USER

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "data",
        [
            UpdateAccountInput(first_name=""),
            UpdateAccountInput(last_name="x" * 101),
            UpdateAccountInput(phone="not a phone"),
            UpdateAccountInput(date_of_birth="2999-01-01"),
            UpdateAccountInput(status="archived"),
            UpdateAccountInput(is_active="yes"),
            UpdateAccountInput(preferences=["dark"]),
        ],
    )
    async def test_invalid_fields(self, use_case, make_account, data):
        account = await make_account()

        with pytest.raises(ValidationError):
            await use_case.execute(account.id, data)

    @pytest.mark.asyncio
    async def test_preferences_round_trip(self, use_case, make_account):
        account = await make_account()
        prefs = {"theme": "dark", "notifications": {"email": False}}

        result = await use_case.execute(account.id, UpdateAccountInput(preferences=prefs))

        assert result.preferences == prefs

    @pytest.mark.asyncio
    async def test_unknown_account(self, use_case):
        with pytest.raises(NotFoundError):
            await use_case.execute(str(uuid.uuid4()), UpdateAccountInput(first_name="X"))

    @pytest.mark.asyncio
    async def test_malformed_id(self, use_case):
        with pytest.raises(ValidationError):
            await use_case.execute("not-a-uuid", UpdateAccountInput(first_name="X"))


class TestUpdateByActor:
    """Updates performed by another account."""

    @pytest.mark.asyncio
    async def test_admin_updates_user(self, use_case, make_account, store):
        admin = await make_account(role=AccountRole.ADMIN)
        user = await make_account()

        await use_case.execute(user.id, UpdateAccountInput(first_name="Renamed"), admin.id)

        assert (await store.find_by_id(user.id)).updated_by == admin.id

    @pytest.mark.asyncio
    async def test_non_admin_cannot_update_others(self, use_case, make_account):
        manager = await make_account(role=AccountRole.MANAGER)
        user = await make_account()

        with pytest.raises(ForbiddenError):
            await use_case.execute(user.id, UpdateAccountInput(first_name="X"), manager.id)

    @pytest.mark.asyncio
    async def test_admin_cannot_update_super_admin(self, use_case, make_account):
        admin = await make_account(role=AccountRole.ADMIN)
        root = await make_account(role=AccountRole.SUPER_ADMIN)

        with pytest.raises(ForbiddenError):
            await use_case.execute(root.id, UpdateAccountInput(first_name="X"), admin.id)

    @pytest.mark.asyncio
    async def test_deactivated_actor(self, use_case, make_account):
        admin = await make_account(role=AccountRole.ADMIN, is_active=False)
        user = await make_account()

        with pytest.raises(ForbiddenError):
            await use_case.execute(user.id, UpdateAccountInput(first_name="X"), admin.id)

    @pytest.mark.asyncio
    async def test_unknown_actor(self, use_case, make_account):
        user = await make_account()

        with pytest.raises(NotFoundError):
            await use_case.execute(user.id, UpdateAccountInput(first_name="X"), str(uuid.uuid4()))


class TestUpdateRole:
    """Tests for UpdateAccountUseCase.update_role."""

    @pytest.mark.asyncio
    async def test_admin_promotes_user_to_manager(self, use_case, make_account):
        admin = await make_account(role=AccountRole.ADMIN)
        user = await make_account()

        result = await use_case.update_role(user.id, "MANAGER", admin.id)

        assert result.role is AccountRole.MANAGER

    @pytest.mark.asyncio
    async def test_admin_cannot_grant_super_admin(self, use_case, make_account):
        admin = await make_account(role=AccountRole.ADMIN)
        user = await make_account()

        with pytest.raises(ForbiddenError):
            await use_case.update_role(user.id, AccountRole.SUPER_ADMIN, admin.id)

    @pytest.mark.asyncio
    async def test_user_cannot_promote_self(self, use_case, make_account):
        user = await make_account()

        with pytest.raises(ForbiddenError):
            await use_case.update_role(user.id, AccountRole.ADMIN, user.id)

    @pytest.mark.asyncio
    async def test_unknown_role(self, use_case, make_account, store):
        user = await make_account()

        with pytest.raises(ValidationError):
            await use_case.update_role(user.id, "owner")

        assert (await store.find_by_id(user.id)).role is AccountRole.USER


class TestUpdateProfile:
    """Tests for UpdateAccountUseCase.update_profile."""

    @pytest.mark.asyncio
    async def test_privileged_fields_ignored(self, use_case, make_account, store):
        account = await make_account("jane@example.com")

        result = await use_case.update_profile(
            account.id,
            UpdateAccountInput(
                first_name="Janet",
                role=AccountRole.SUPER_ADMIN,
                email="other@example.com",
                is_active=False,
            ),
        )

        assert result.first_name == "Janet"
        stored = await store.find_by_id(account.id)
        assert stored.role is AccountRole.USER
        assert stored.email == "jane@example.com"
        assert stored.is_active is True


class TestChangePassword:
    """Tests for UpdateAccountUseCase.change_password."""

    @pytest.mark.asyncio
    async def test_change_password(self, use_case, make_account, store, hasher):
        account = await make_account()

        await use_case.change_password(account.id, TEST_PASSWORD, "BrandNew789")

        stored = await store.find_by_id(account.id)
        assert hasher.verify("BrandNew789", stored.password_hash)
        assert not hasher.verify(TEST_PASSWORD, stored.password_hash)

    @pytest.mark.asyncio
    async def test_wrong_current_password(self, use_case, make_account):
        account = await make_account()

        with pytest.raises(UnauthorizedError, match="Current password is incorrect"):
            await use_case.change_password(account.id, "WrongPass123", "BrandNew789")

    @pytest.mark.asyncio
    async def test_weak_new_password(self, use_case, make_account):
        account = await make_account()

        with pytest.raises(ValidationError):
            await use_case.change_password(account.id, TEST_PASSWORD, "weak")

    @pytest.mark.asyncio
    async def test_missing_current_password(self, use_case, make_account):
        account = await make_account()

        with pytest.raises(ValidationError, match="Current password is required"):
            await use_case.change_password(account.id, "", "BrandNew789")

    @pytest.mark.asyncio
    async def test_deactivated_account(self, use_case, make_account):
        account = await make_account(is_active=False)

        with pytest.raises(ForbiddenError):
            await use_case.change_password(account.id, TEST_PASSWORD, "BrandNew789")


class TestActivation:
    """Tests for deactivate and activate."""

    @pytest.mark.asyncio
    async def test_deactivate(self, use_case, make_account):
        account = await make_account()

        result = await use_case.deactivate(account.id)

        assert result.is_active is False
        assert result.status is AccountStatus.INACTIVE

    @pytest.mark.asyncio
    async def test_activate_clears_lockout(self, use_case, make_account, store):
        admin = await make_account(role=AccountRole.ADMIN)
        account = await make_account(is_active=False, login_attempts=2)

        result = await use_case.activate(account.id, admin.id)

        assert result.is_active is True
        assert result.status is AccountStatus.ACTIVE
        stored = await store.find_by_id(account.id)
        assert stored.login_attempts == 0
        assert stored.locked_until is None
        assert stored.updated_by == admin.id


class TestConfirmEmail:
    """Tests for UpdateAccountUseCase.confirm_email."""

    @pytest_asyncio.fixture
    async def pending(self, make_account, store):
        account = await make_account()
        return await store.update(
            account.id,
            AccountUpdate(
                email_verified=False,
                email_verification_token="verify-me",
                status=AccountStatus.PENDING_VERIFICATION,
            ),
        )

    @pytest.mark.asyncio
    async def test_confirm(self, use_case, pending, store):
        result = await use_case.confirm_email(pending.id, "verify-me")

        assert result.email_verified is True
        assert result.status is AccountStatus.ACTIVE
        assert (await store.find_by_id(pending.id)).email_verification_token is None

    @pytest.mark.asyncio
    async def test_wrong_token(self, use_case, pending, store):
        with pytest.raises(ValidationError, match="Invalid verification token"):
            await use_case.confirm_email(pending.id, "guess")

        assert (await store.find_by_id(pending.id)).email_verified is False

    @pytest.mark.asyncio
    async def test_already_verified(self, use_case, make_account):
        account = await make_account(email_verified=True)

        result = await use_case.confirm_email(account.id, "anything")

        assert result.email_verified is True
