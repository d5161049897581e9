"""
Event system for decoupling account side effects (notifications, event
logging) from the request path.
"""

from .event_bus import EventBus, InMemoryEventBus
from .base_event import BaseEvent
from .account_events import (
    UserRegisteredEvent,
    UserLoggedInEvent,
    UserLoggedOutEvent,
    AccountDeletedEvent
)
from .handlers import EventLogHandler, NotificationEventHandler

__all__ = [
    "EventBus",
    "InMemoryEventBus",
    "BaseEvent",
    "UserRegisteredEvent",
    "UserLoggedInEvent",
    "UserLoggedOutEvent",
    "AccountDeletedEvent",
    "EventLogHandler",
    "NotificationEventHandler"
]
