"""
Event handlers wiring account events to their side effects.
"""

import asyncio
from typing import Awaitable, Set
import structlog

from ..interfaces.event_interface import IEvent, IEventBus
from ..interfaces.notification_interface import INotificationService
from .account_events import AccountDeletedEvent, UserRegisteredEvent

logger = structlog.get_logger()


class NotificationEventHandler:
    """
    Sends the welcome and cancellation emails.

    Sends run as detached tasks so the publishing request never waits for the
    email provider. Pending sends are awaited by drain() at shutdown.
    """

    def __init__(self, notification_service: INotificationService):
        self.notification_service = notification_service
        self._pending: Set[asyncio.Task] = set()

    @property
    def pending(self) -> int:
        return len(self._pending)

    async def on_user_registered(self, event: UserRegisteredEvent) -> None:
        self._dispatch(
            self.notification_service.send_welcome_email(event.email, event.name),
            "welcome",
            event
        )

    async def on_account_deleted(self, event: AccountDeletedEvent) -> None:
        self._dispatch(
            self.notification_service.send_cancellation_email(event.email, event.name),
            "cancellation",
            event
        )

    def _dispatch(self, send: Awaitable[bool], kind: str, event: IEvent) -> None:
        task = asyncio.ensure_future(send)
        self._pending.add(task)

        def _done(finished: asyncio.Task) -> None:
            self._pending.discard(finished)
            if finished.cancelled():
                logger.warning("Notification cancelled", kind=kind, correlation_id=event.correlation_id)
                return

            error = finished.exception()
            if error is not None:
                logger.error(
                    "Notification failed",
                    kind=kind,
                    correlation_id=event.correlation_id,
                    error=str(error)
                )
                return

            logger.info(
                "Notification processed",
                kind=kind,
                correlation_id=event.correlation_id,
                sent=finished.result()
            )

        task.add_done_callback(_done)

    async def drain(self) -> None:
        """Wait for every pending send to finish."""
        if self._pending:
            await asyncio.gather(*list(self._pending), return_exceptions=True)

    async def register(self, event_bus: IEventBus) -> None:
        await event_bus.subscribe(UserRegisteredEvent.__name__, self.on_user_registered)
        await event_bus.subscribe(AccountDeletedEvent.__name__, self.on_account_deleted)


class EventLogHandler:
    """Writes every published event to the structured log."""

    async def handle_event(self, event: IEvent) -> None:
        # Never log email addresses
        data = {k: v for k, v in event.data.items() if k != "email"}
        logger.info(
            "Account event",
            event_type=event.event_type,
            correlation_id=event.correlation_id,
            **data
        )

    async def register(self, event_bus: IEventBus) -> None:
        await event_bus.subscribe_to_all(self.handle_event)
