"""Pytest configuration for all tests."""

import uuid
from typing import AsyncGenerator, Callable, Awaitable

import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from userservice.application.notifier import Notifier
from userservice.application.services import AccountService
from userservice.core.config import Settings
from userservice.domain.entities import Account, AccountEvent, AccountRole, AccountStatus
from userservice.infrastructure.auth import PasswordHasher, TokenService
from userservice.infrastructure.persistence import models  # noqa: F401
from userservice.infrastructure.persistence.database import Base
from userservice.infrastructure.persistence.repositories import AccountRepository

TEST_SECRET_KEY = "test-secret-key-that-is-at-least-32-characters-long"
TEST_ISSUER = "userservice-test"
TEST_PASSWORD = "SecurePass123"


class RecordingSink:
    """Notification sink that keeps every published event."""

    def __init__(self) -> None:
        self.events: list[AccountEvent] = []

    async def publish(self, event: AccountEvent) -> None:
        self.events.append(event)

    def types(self) -> list[str]:
        return [e.event_type for e in self.events]


@pytest.fixture
def settings() -> Settings:
    return Settings(
        _env_file=None,
        environment="testing",
        database_url="sqlite+aiosqlite:///:memory:",
        secret_key=TEST_SECRET_KEY,
        token_issuer=TEST_ISSUER,
        password_hash_time_cost=2,
        password_hash_memory_cost=19456,
        hash_workers=2,
        max_login_attempts=3,
        lockout_seconds=900,
    )


@pytest_asyncio.fixture
async def session_factory() -> AsyncGenerator[async_sessionmaker[AsyncSession], None]:
    """Session factory over an in-memory SQLite database."""
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
        echo=False,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await engine.dispose()


@pytest.fixture
def store(session_factory) -> AccountRepository:
    return AccountRepository(session_factory)


@pytest.fixture
def hasher():
    """Argon2 hasher at the lowest permitted cost."""
    hasher = PasswordHasher(time_cost=2, memory_cost=19456, parallelism=1, workers=2)
    yield hasher
    hasher.shutdown()


@pytest.fixture
def token_service() -> TokenService:
    return TokenService(
        secret_key=TEST_SECRET_KEY,
        issuer=TEST_ISSUER,
        expires_in=3600,
        renewal_threshold=600,
    )


@pytest.fixture
def sink() -> RecordingSink:
    return RecordingSink()


@pytest.fixture
def notifier(sink) -> Notifier:
    return Notifier(sink)


@pytest.fixture
def service(store, hasher, token_service, notifier) -> AccountService:
    return AccountService(
        store=store,
        hasher=hasher,
        tokens=token_service,
        notifier=notifier,
        max_login_attempts=3,
        lockout_seconds=900,
    )


@pytest.fixture
def make_account(store, hasher) -> Callable[..., Awaitable[Account]]:
    """Insert an account directly through the store.

    Lets tests create administrators and deactivated accounts without going
    through registration rules.
    """

    async def _make(
        email: str | None = None,
        role: AccountRole = AccountRole.USER,
        is_active: bool = True,
        password: str = TEST_PASSWORD,
        **kwargs,
    ) -> Account:
        account = Account(
            id=str(uuid.uuid4()),
            email=email or f"{uuid.uuid4().hex[:10]}@example.com",
            password_hash=hasher.hash(password),
            first_name=kwargs.pop("first_name", "Test"),
            last_name=kwargs.pop("last_name", "User"),
            role=role,
            is_active=is_active,
            status=AccountStatus.ACTIVE if is_active else AccountStatus.INACTIVE,
            **kwargs,
        )
        return await store.create(account)

    return _make
