"""Notification events emitted after successful account operations."""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

from userservice.domain.entities.account import utcnow


class AccountEventType:
    """Event names published to the notification sink.

    Adding event names is non-breaking; renaming one breaks subscribers.
    """

    REGISTERED = "account.registered"
    LOGGED_IN = "account.logged_in"


@dataclass(frozen=True)
class AccountEvent:
    """A fire-and-forget notification about an account.

    Attributes:
        event_type: One of the ``AccountEventType`` names.
        account_id: Account the event is about.
        email: Email of that account.
        payload: Event-specific extra fields (never secrets).
        occurred_at: When the triggering operation completed.
    """

    event_type: str
    account_id: str
    email: str
    payload: dict[str, Any] = field(default_factory=dict)
    occurred_at: datetime = field(default_factory=utcnow)
