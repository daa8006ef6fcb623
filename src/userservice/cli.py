"""Administrative commands for the user service.

Example:
    userservice init-db --force
    userservice create-superadmin --email root@example.com
    userservice check-db
"""

import asyncio
from typing import Awaitable, Callable, NoReturn

import click

from userservice import __version__
from userservice.core.config import Settings, get_settings
from userservice.core.logging import configure_logging, get_logger

LOG_LEVELS = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]


def _run_with_database(work: Callable[..., Awaitable[None]], *args) -> None:
    """Run ``work(db, *args)`` on a fresh event loop and always dispose the engine."""
    from userservice.infrastructure.persistence.database import get_db_manager

    async def runner() -> None:
        db = get_db_manager()
        try:
            await work(db, *args)
        finally:
            await db.disconnect()

    asyncio.run(runner())


@click.group()
@click.version_option(version=__version__, prog_name="userservice")
@click.option(
    "--log-level",
    type=click.Choice(LOG_LEVELS, case_sensitive=False),
    default=None,
    help="Override USERSERVICE_LOG_LEVEL for this invocation",
)
@click.pass_context
def cli(ctx: click.Context, log_level: str | None) -> None:
    """Manage the user account store."""
    settings = get_settings()
    if log_level:
        settings = settings.model_copy(update={"log_level": log_level.upper()})
    configure_logging(settings)
    ctx.obj = settings


@cli.command("init-db")
@click.option("--force", is_flag=True, help="Do not ask for confirmation")
@click.pass_obj
def init_db(settings: Settings, force: bool) -> None:
    """Create the users table directly from the models.

    Meant for development databases. Deployed databases are upgraded with
    ``alembic upgrade head``.
    """
    if settings.is_production and not force:
        raise click.ClickException(
            "refusing to run init-db in production; use alembic migrations"
        )
    if not force:
        click.confirm("Create the users table?", abort=True, default=False)

    async def create(db) -> None:
        await db.create_tables()

    _run_with_database(create)
    click.echo("Database initialized.")


@cli.command("check-db")
@click.pass_obj
def check_db(settings: Settings) -> None:
    """Verify that the configured database accepts connections."""
    reachable = False

    async def ping(db) -> None:
        nonlocal reachable
        reachable = await db.check_connection()

    _run_with_database(ping)
    if not reachable:
        raise click.ClickException("database is not reachable")
    click.echo("Database connection OK.")


@cli.command("create-superadmin")
@click.option("--email", default=None, help="Defaults to USERSERVICE_SUPERADMIN_EMAIL, then a prompt")
@click.option(
    "--password",
    default=None,
    help="Defaults to USERSERVICE_SUPERADMIN_PASSWORD, then a hidden prompt",
)
@click.option("--first-name", default="Super", show_default=True)
@click.option("--last-name", default="Admin", show_default=True)
@click.pass_obj
def create_superadmin(
    settings: Settings,
    email: str | None,
    password: str | None,
    first_name: str,
    last_name: str,
) -> None:
    """Bootstrap the first super admin.

    Fails once any super admin exists; further administrators are granted
    through the service by an existing one.
    """
    from userservice.application.dto import RegisterAccountInput
    from userservice.application.services import AccountService
    from userservice.domain.exceptions import AccountServiceError

    logger = get_logger(__name__)
    data = RegisterAccountInput(
        email=email or settings.superadmin_email or click.prompt("Email"),
        password=password
        or settings.superadmin_password
        or click.prompt("Password", hide_input=True, confirmation_prompt=True),
        first_name=first_name,
        last_name=last_name,
    )

    async def create(db) -> None:
        service = AccountService.from_settings(settings, db.session_factory)
        try:
            account = await service.create_superadmin(data)
        finally:
            await service.close()
        logger.info("Super admin created via CLI", account_id=account.id)
        click.echo(f"Super admin created successfully: {account.email} ({account.id})")

    try:
        _run_with_database(create)
    except AccountServiceError as e:
        logger.error("Super admin creation failed", error=e.message, category=e.category.value)
        raise click.ClickException(e.message) from e


@cli.command()
@click.pass_obj
def info(settings: Settings) -> None:
    """Show the effective configuration without credentials."""
    from sqlalchemy.engine import make_url

    rows = [
        ("Environment", settings.environment),
        ("Database", make_url(settings.database_url).render_as_string(hide_password=True)),
        ("Pool size", settings.db_pool_size),
        ("Token issuer", settings.token_issuer),
        ("Token lifetime", f"{settings.token_expire_seconds}s"),
        ("Renew below", f"{settings.token_renewal_threshold_seconds}s"),
        ("Lockout", f"{settings.max_login_attempts} attempts / {settings.lockout_seconds}s"),
        ("Hash workers", settings.hash_workers),
        ("Log level", settings.log_level),
        ("Log format", settings.log_format),
    ]
    click.echo(f"userservice {settings.app_version}")
    for label, value in rows:
        click.echo(f"  {label + ':':<16}{value}")


def main() -> NoReturn:
    cli()


if __name__ == "__main__":
    main()
