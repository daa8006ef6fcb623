"""Domain ports implemented by infrastructure adapters."""

from userservice.domain.interfaces.account_store import (
    AccountStore,
    ConstraintKind,
    ConstraintViolationError,
    StoreError,
)
from userservice.domain.interfaces.notification_sink import NotificationSink

__all__ = [
    "AccountStore",
    "ConstraintKind",
    "ConstraintViolationError",
    "NotificationSink",
    "StoreError",
]
