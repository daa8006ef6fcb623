"""Notification Sink port for fire-and-forget account events."""

from typing import Protocol, runtime_checkable

from userservice.domain.entities import AccountEvent


@runtime_checkable
class NotificationSink(Protocol):
    """Receives account events after a successful operation.

    Implementations may raise; callers discard such failures.
    """

    async def publish(self, event: AccountEvent) -> None:
        ...
