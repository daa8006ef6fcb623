"""Structured logging for the user service.

Every entry is a flat key-value record carrying a level, the emitting module,
an ISO timestamp and a correlation id. Values stored under credential-like
keys are masked before rendering, so a stray ``password=...`` never reaches
the output.
"""

import logging
import sys
import uuid
from typing import Any

import structlog
from structlog.types import EventDict, Processor

from userservice.core.config import Settings, get_settings

REDACTED = "***"

SENSITIVE_KEYS = frozenset(
    {
        "password",
        "current_password",
        "new_password",
        "password_hash",
        "token",
        "renewed_token",
        "secret_key",
        "email_verification_token",
        "password_reset_token",
    }
)


def add_correlation_id(logger: Any, method_name: str, event_dict: EventDict) -> EventDict:
    # Bound by the caller per request; otherwise one id per entry
    event_dict.setdefault("correlation_id", f"cid_{uuid.uuid4().hex[:12]}")
    return event_dict


def add_logger_name(logger: Any, method_name: str, event_dict: EventDict) -> EventDict:
    event_dict["logger"] = getattr(logger, "name", None) or "userservice"
    return event_dict


def redact_secrets(logger: Any, method_name: str, event_dict: EventDict) -> EventDict:
    """Mask the value of any credential-like key."""
    for key in SENSITIVE_KEYS.intersection(event_dict):
        event_dict[key] = REDACTED
    return event_dict


def rename_message_field(logger: Any, method_name: str, event_dict: EventDict) -> EventDict:
    """Publish the log text as ``message`` instead of structlog's ``event``."""
    if "event" in event_dict:
        event_dict["message"] = event_dict.pop("event")
    return event_dict


def _select_renderer(settings: Settings) -> tuple[Processor, bool]:
    """Pick the final renderer and whether loggers may be cached.

    Development and ``log_format=console`` get the coloured console renderer.
    Everything else gets one JSON object per line.
    """
    if settings.is_development or settings.log_format == "console":
        console = structlog.dev.ConsoleRenderer(
            colors=True,
            exception_formatter=structlog.dev.plain_traceback,
        )
        return console, False
    return structlog.processors.JSONRenderer(), True


def configure_logging(settings: Settings | None = None) -> None:
    """Install the structlog pipeline and route stdlib logging to stdout.

    Safe to call more than once; the last call wins. Tests and the CLI call
    it with explicit settings.
    """
    settings = settings or get_settings()
    level = logging.getLevelName(settings.log_level)
    renderer, cacheable = _select_renderer(settings)

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.stdlib.add_log_level,
            add_logger_name,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.UnicodeDecoder(),
            add_correlation_id,
            redact_secrets,
            rename_message_field,
            renderer,
        ],
        wrapper_class=structlog.make_filtering_bound_logger(level),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(),
        cache_logger_on_first_use=cacheable,
    )

    # SQLAlchemy and Alembic log through the stdlib
    logging.basicConfig(format="%(message)s", stream=sys.stdout, level=level)


def get_logger(name: str | None = None) -> structlog.stdlib.BoundLogger:
    return structlog.get_logger(name or "userservice")


class LoggingContext:
    """Bind key-value pairs to every entry logged inside the block.

    Example:
        with LoggingContext(correlation_id=request_id, account_id=account.id):
            await service.update(account.id, changes)
    """

    def __init__(self, **values: str) -> None:
        self.values = values

    def __enter__(self) -> "LoggingContext":
        structlog.contextvars.bind_contextvars(**self.values)
        return self

    def __exit__(self, *exc_info: Any) -> None:
        structlog.contextvars.unbind_contextvars(*self.values)


def bind_correlation_id(correlation_id: str) -> None:
    structlog.contextvars.bind_contextvars(correlation_id=correlation_id)


def clear_context() -> None:
    structlog.contextvars.clear_contextvars()
