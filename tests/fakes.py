"""
In-memory test doubles for external collaborators.
"""
import asyncio
from typing import List, Tuple

from task_manager.interfaces.notification_interface import INotificationService


class FakeNotificationService(INotificationService):
    """Records messages instead of calling the email provider."""

    def __init__(self, fail: bool = False, delay: float = 0):
        self.fail = fail
        self.delay = delay
        self.sent: List[Tuple[str, str, str]] = []
        self.cleaned_up = False

    async def send_welcome_email(self, email: str, name: str) -> bool:
        return await self._record("welcome", email, name)

    async def send_cancellation_email(self, email: str, name: str) -> bool:
        return await self._record("cancellation", email, name)

    async def cleanup(self) -> None:
        self.cleaned_up = True

    async def _record(self, kind: str, email: str, name: str) -> bool:
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.fail:
            raise RuntimeError("email provider unavailable")
        self.sent.append((kind, email, name))
        return True

    def messages(self, kind: str) -> List[Tuple[str, str, str]]:
        return [message for message in self.sent if message[0] == kind]
