"""Notification sink adapters."""

from userservice.infrastructure.events.event_bus import ALL_EVENTS, EventBus, Subscription
from userservice.infrastructure.events.logging_sink import LoggingNotificationSink

__all__ = ["ALL_EVENTS", "EventBus", "LoggingNotificationSink", "Subscription"]
