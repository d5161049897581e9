"""
Notification collaborator interface.
"""

from typing import Protocol, runtime_checkable


@runtime_checkable
class INotificationService(Protocol):
    """Protocol for outbound account notifications (email)."""

    async def send_welcome_email(self, email: str, name: str) -> bool:
        """
        Send the welcome message after registration.

        Returns:
            True if the provider accepted the message
        """
        ...

    async def send_cancellation_email(self, email: str, name: str) -> bool:
        """
        Send the goodbye message when an account is deleted.

        Returns:
            True if the provider accepted the message
        """
        ...

    async def cleanup(self) -> None:
        """Release network resources."""
        ...
