"""
Event bus implementation for publishing and subscribing to events.
Handlers run concurrently; a failing handler is logged and never affects the
publisher or the other handlers.
"""

import asyncio
from collections import defaultdict
from typing import Dict, List, Set
import structlog

from ..interfaces.event_interface import EventHandler, IEvent, IEventBus

logger = structlog.get_logger()


def _handler_name(handler: EventHandler) -> str:
    return getattr(handler, "__qualname__", None) or repr(handler)


class InMemoryEventBus(IEventBus):
    """In-memory event bus implementation for single-instance deployments."""

    def __init__(self):
        self._handlers: Dict[str, Set[EventHandler]] = defaultdict(set)
        self._global_handlers: Set[EventHandler] = set()
        self._lock = asyncio.Lock()

    async def publish(self, event: IEvent) -> bool:
        """
        Publish an event to every handler of its type and every global handler,
        and wait for them to finish.

        Args:
            event: Event to publish

        Returns:
            True once all handlers have run, False if dispatch itself failed
        """
        event_type = event.event_type
        handlers = list(self._handlers.get(event_type, set()) | self._global_handlers)

        if not handlers:
            logger.debug("No handlers registered for event", event_type=event_type)
            return True

        try:
            results = await asyncio.gather(
                *(handler(event) for handler in handlers),
                return_exceptions=True
            )
        except Exception as e:
            logger.error("Failed to publish event", event_type=event_type, error=str(e))
            return False

        for handler, result in zip(handlers, results):
            if isinstance(result, Exception):
                logger.error(
                    "Event handler failed",
                    event_type=event_type,
                    handler=_handler_name(handler),
                    correlation_id=event.correlation_id,
                    error=str(result)
                )

        logger.debug(
            "Event published",
            event_type=event_type,
            handler_count=len(handlers),
            correlation_id=event.correlation_id
        )
        return True

    async def subscribe(self, event_type: str, handler: EventHandler) -> bool:
        """
        Subscribe to events of a specific type.

        Args:
            event_type: Event class name to subscribe to
            handler: Async function to handle events

        Returns:
            True if subscription successful
        """
        async with self._lock:
            self._handlers[event_type].add(handler)

        logger.info(
            "Handler subscribed to event type",
            event_type=event_type,
            handler=_handler_name(handler)
        )
        return True

    async def unsubscribe(self, event_type: str, handler: EventHandler) -> bool:
        async with self._lock:
            handlers = self._handlers.get(event_type)
            if not handlers or handler not in handlers:
                return False
            handlers.discard(handler)
            if not handlers:
                del self._handlers[event_type]

        logger.info(
            "Handler unsubscribed from event type",
            event_type=event_type,
            handler=_handler_name(handler)
        )
        return True

    async def subscribe_to_all(self, handler: EventHandler) -> bool:
        async with self._lock:
            self._global_handlers.add(handler)

        logger.info("Global handler subscribed", handler=_handler_name(handler))
        return True

    async def get_handlers(self, event_type: str) -> List[EventHandler]:
        return list(self._handlers.get(event_type, set()) | self._global_handlers)

    async def clear(self) -> None:
        """Drop every subscription. Called at shutdown."""
        async with self._lock:
            self._handlers.clear()
            self._global_handlers.clear()


# Alias for the main event bus implementation
EventBus = InMemoryEventBus
