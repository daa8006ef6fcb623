"""Async engine and session management for the users table.

SQLite (``aiosqlite``) serves development and tests; PostgreSQL
(``asyncpg``) serves production. The store opens one session per operation
from :attr:`DatabaseManager.session_factory`.
"""

from contextlib import asynccontextmanager
from pathlib import Path
from typing import Any, AsyncGenerator

from sqlalchemy import text
from sqlalchemy.engine import make_url
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase

from userservice.core.config import Settings, get_settings
from userservice.core.logging import get_logger

logger = get_logger(__name__)


class Base(DeclarativeBase):
    pass


def _engine_options(settings: Settings) -> dict[str, Any]:
    if settings.database_url.startswith("sqlite"):
        # aiosqlite runs the connection on its own thread
        return {"connect_args": {"check_same_thread": False}}
    return {
        "pool_size": settings.db_pool_size,
        "max_overflow": settings.db_max_overflow,
        "pool_timeout": settings.db_pool_timeout,
        "pool_recycle": settings.db_pool_recycle,
        "pool_pre_ping": True,
    }


def _ensure_sqlite_directory(database_url: str) -> None:
    url = make_url(database_url)
    if url.get_backend_name() != "sqlite" or url.database in (None, "", ":memory:"):
        return
    Path(url.database).parent.mkdir(parents=True, exist_ok=True)


class DatabaseManager:
    """Owns the engine and session factory; both are built on first use."""

    def __init__(self, settings: Settings | None = None) -> None:
        self.settings = settings or get_settings()
        self._engine: AsyncEngine | None = None
        self._session_factory: async_sessionmaker[AsyncSession] | None = None

    @property
    def engine(self) -> AsyncEngine:
        if self._engine is None:
            _ensure_sqlite_directory(self.settings.database_url)
            self._engine = create_async_engine(
                self.settings.database_url,
                echo=self.settings.db_echo,
                hide_parameters=True,
                **_engine_options(self.settings),
            )
            logger.info(
                "Database engine created",
                database_url=self._engine.url.render_as_string(hide_password=True),
                dialect=self._engine.dialect.name,
            )
        return self._engine

    @property
    def session_factory(self) -> async_sessionmaker[AsyncSession]:
        if self._session_factory is None:
            self._session_factory = async_sessionmaker(
                bind=self.engine,
                class_=AsyncSession,
                expire_on_commit=False,
                autoflush=False,
            )
        return self._session_factory

    async def create_tables(self) -> None:
        """Create the users table from the model metadata.

        Development shortcut; deployed databases are migrated with Alembic.
        """
        from userservice.infrastructure.persistence import models  # noqa: F401

        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)
        logger.info("Database tables created", tables=sorted(Base.metadata.tables))

    async def drop_tables(self) -> None:
        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.drop_all)
        logger.warning("Database tables dropped")

    async def disconnect(self) -> None:
        if self._engine is None:
            return
        await self._engine.dispose()
        self._engine = None
        self._session_factory = None
        logger.info("Database engine disposed")

    @asynccontextmanager
    async def session(self) -> AsyncGenerator[AsyncSession, None]:
        """Session scope that rolls back when the block raises.

        Example:
            async with db.session() as session:
                row = await session.get(AccountModel, account_id)
        """
        async with self.session_factory() as session:
            try:
                yield session
            except Exception:
                await session.rollback()
                raise

    async def check_connection(self) -> bool:
        try:
            async with self.engine.connect() as conn:
                await conn.execute(text("SELECT 1"))
        except Exception as e:
            logger.error("Database connection check failed", error=str(e))
            return False
        return True


_db_manager: DatabaseManager | None = None


def get_db_manager() -> DatabaseManager:
    """Process-wide manager built from the cached settings."""
    global _db_manager
    if _db_manager is None:
        _db_manager = DatabaseManager()
    return _db_manager


async def init_database() -> None:
    await get_db_manager().create_tables()
