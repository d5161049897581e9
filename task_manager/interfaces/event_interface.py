"""
Event system interfaces for dependency abstraction.
"""

from typing import Any, Dict, List, Protocol, runtime_checkable, Callable, Awaitable
from datetime import datetime
from abc import ABC, abstractmethod


class IEvent(ABC):
    """Base interface for all events."""

    correlation_id: str
    timestamp: datetime

    @property
    @abstractmethod
    def event_type(self) -> str:
        """Event type identifier."""
        ...

    @property
    @abstractmethod
    def data(self) -> Dict[str, Any]:
        """Event data payload."""
        ...


EventHandler = Callable[[IEvent], Awaitable[None]]


@runtime_checkable
class IEventBus(Protocol):
    """Protocol for event bus operations."""

    async def publish(self, event: IEvent) -> bool:
        """
        Publish an event to the event bus.

        Handler failures are contained by the bus and never reach the publisher.

        Args:
            event: Event to publish

        Returns:
            True if published successfully, False otherwise
        """
        ...

    async def subscribe(self, event_type: str, handler: EventHandler) -> bool:
        """
        Subscribe to events of a specific type.

        Args:
            event_type: Type of events to subscribe to
            handler: Async function to handle events

        Returns:
            True if subscription successful, False otherwise
        """
        ...

    async def unsubscribe(self, event_type: str, handler: EventHandler) -> bool:
        """Unsubscribe a handler from events of a specific type."""
        ...

    async def subscribe_to_all(self, handler: EventHandler) -> bool:
        """Subscribe a handler to every event."""
        ...

    async def get_handlers(self, event_type: str) -> List[EventHandler]:
        """Get all handlers for a specific event type."""
        ...
