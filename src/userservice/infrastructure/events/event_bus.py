"""In-process event bus for account notifications.

Subscribers register an async callback for an event type (or ``"*"`` for
every event) with a priority. Publishing runs matching subscribers in
priority order; a failing subscriber is logged and the rest still run.
"""

import asyncio
import uuid
from dataclasses import dataclass
from typing import Any, Awaitable, Callable

from userservice.core.logging import get_logger
from userservice.domain.entities import AccountEvent

logger = get_logger(__name__)

ALL_EVENTS = "*"

Subscriber = Callable[[AccountEvent], Awaitable[Any] | Any]


@dataclass
class Subscription:
    """Internal representation of a registered subscriber.

    Attributes:
        id: Unique identifier for this subscription.
        event_type: Event name, or ``"*"`` for all events.
        callback: Function called with the event.
        priority: Execution priority (higher = earlier).
        registration_order: Tie-breaker keeping FIFO order within a priority.
    """

    id: str
    event_type: str
    callback: Subscriber
    priority: int = 0
    registration_order: int = 0


class EventBus:
    """Notification sink that fans events out to in-process subscribers.

    Example:
        bus = EventBus()
        sub_id = bus.subscribe("account.registered", send_welcome_email, priority=10)
        await bus.publish(event)
        bus.unsubscribe(sub_id)
    """

    def __init__(self) -> None:
        self._subscriptions: dict[str, Subscription] = {}
        self._registration_counter: int = 0

    def subscribe(self, event_type: str, callback: Subscriber, priority: int = 0) -> str:
        """Register a subscriber.

        Args:
            event_type: Event name such as ``"account.registered"``, or ``"*"``.
            callback: Sync or async function accepting the event.
            priority: Higher priority subscribers run first. Default is 0.

        Returns:
            Subscription id for later removal.
        """
        subscription_id = f"sub_{uuid.uuid4().hex[:12]}"
        self._registration_counter += 1
        self._subscriptions[subscription_id] = Subscription(
            id=subscription_id,
            event_type=event_type,
            callback=callback,
            priority=priority,
            registration_order=self._registration_counter,
        )
        logger.debug(
            "Subscriber registered",
            subscription_id=subscription_id,
            event_type=event_type,
            priority=priority,
        )
        return subscription_id

    def unsubscribe(self, subscription_id: str) -> bool:
        """Remove a subscriber. Returns False if the id is unknown."""
        if self._subscriptions.pop(subscription_id, None) is None:
            logger.warning("Subscriber not found", subscription_id=subscription_id)
            return False
        return True

    def subscribers_for(self, event_type: str) -> list[Subscription]:
        """Matching subscriptions sorted by priority, then registration order."""
        matching = [
            s
            for s in self._subscriptions.values()
            if s.event_type in (event_type, ALL_EVENTS)
        ]
        return sorted(matching, key=lambda s: (-s.priority, s.registration_order))

    async def publish(self, event: AccountEvent) -> None:
        """Deliver an event to every matching subscriber."""
        subscribers = self.subscribers_for(event.event_type)
        if not subscribers:
            return

        logger.debug(
            "Publishing event",
            event_type=event.event_type,
            subscriber_count=len(subscribers),
        )
        for subscription in subscribers:
            try:
                result = subscription.callback(event)
                if asyncio.iscoroutine(result):
                    await result
            except Exception as e:
                logger.error(
                    "Subscriber failed",
                    subscription_id=subscription.id,
                    event_type=event.event_type,
                    error=str(e),
                )
