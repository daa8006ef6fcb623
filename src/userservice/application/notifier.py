"""Fire-and-forget delivery of account events."""

import asyncio

from userservice.core.logging import get_logger
from userservice.domain.entities import AccountEvent
from userservice.domain.interfaces import NotificationSink

logger = get_logger(__name__)


class Notifier:
    """Schedules events on a sink without making the caller wait.

    Delivery runs as a background task; its outcome never reaches the use
    case that triggered it. Failures are logged.
    """

    def __init__(self, sink: NotificationSink | None = None) -> None:
        self.sink = sink
        self._pending: set[asyncio.Task[None]] = set()

    @property
    def pending(self) -> int:
        return len(self._pending)

    def notify(self, event: AccountEvent) -> None:
        if self.sink is None:
            return
        task = asyncio.create_task(self._deliver(event))
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)

    async def _deliver(self, event: AccountEvent) -> None:
        try:
            await self.sink.publish(event)
        except Exception as e:
            logger.warning(
                "Notification delivery failed",
                event_type=event.event_type,
                account_id=event.account_id,
                error=str(e),
            )

    async def drain(self) -> None:
        """Wait for every scheduled delivery to finish."""
        while self._pending:
            await asyncio.gather(*list(self._pending), return_exceptions=True)
