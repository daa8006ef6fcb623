"""Notification sink that only writes events to the log."""

from userservice.core.logging import get_logger
from userservice.domain.entities import AccountEvent

logger = get_logger(__name__)


class LoggingNotificationSink:
    """Default sink when no event transport is wired in."""

    async def publish(self, event: AccountEvent) -> None:
        logger.info(
            "Account event",
            event_type=event.event_type,
            account_id=event.account_id,
            occurred_at=event.occurred_at.isoformat(),
            **event.payload,
        )
