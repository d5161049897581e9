"""
Account lifecycle events. Published by the account service and consumed by
the notification and event-logging handlers.
"""

from dataclasses import dataclass

from .base_event import BaseEvent


@dataclass
class UserRegisteredEvent(BaseEvent):
    """Event published after a new account is persisted."""

    user_id: str
    email: str
    name: str


@dataclass
class UserLoggedInEvent(BaseEvent):
    """Event published when a login issues a new session token."""

    user_id: str
    session_count: int


@dataclass
class UserLoggedOutEvent(BaseEvent):
    """Event published when one or all sessions of a user end."""

    user_id: str
    logout_all: bool = False
    sessions_removed: int = 1


@dataclass
class AccountDeletedEvent(BaseEvent):
    """Event published when an account is about to be deleted."""

    user_id: str
    email: str
    name: str
