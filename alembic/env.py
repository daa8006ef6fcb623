"""Alembic environment for the users schema.

The URL comes from ``alembic.ini`` when set there, otherwise from
``USERSERVICE_DATABASE_URL``. Migrations always run through the async driver.
"""

import asyncio
from logging.config import fileConfig

from alembic import context
from sqlalchemy import pool
from sqlalchemy.engine import Connection
from sqlalchemy.ext.asyncio import async_engine_from_config

from userservice.core.config import get_settings
from userservice.infrastructure.persistence import models  # noqa: F401
from userservice.infrastructure.persistence.database import Base

config = context.config
if config.config_file_name is not None:
    fileConfig(config.config_file_name)

database_url = config.get_main_option("sqlalchemy.url") or get_settings().database_url
config.set_main_option("sqlalchemy.url", database_url)


def _configure(**options) -> None:
    # SQLite cannot ALTER most constraints in place
    context.configure(
        target_metadata=Base.metadata,
        render_as_batch=database_url.startswith("sqlite"),
        compare_type=True,
        **options,
    )


def _migrate(connection: Connection) -> None:
    _configure(connection=connection)
    with context.begin_transaction():
        context.run_migrations()


async def _migrate_async() -> None:
    engine = async_engine_from_config(
        config.get_section(config.config_ini_section, {}),
        prefix="sqlalchemy.",
        poolclass=pool.NullPool,
    )
    try:
        async with engine.connect() as connection:
            await connection.run_sync(_migrate)
    finally:
        await engine.dispose()


shared_connection = config.attributes.get("connection")

if context.is_offline_mode():
    _configure(url=database_url, literal_binds=True, dialect_opts={"paramstyle": "named"})
    with context.begin_transaction():
        context.run_migrations()
elif shared_connection is not None:
    _migrate(shared_connection)
else:
    asyncio.run(_migrate_async())
