"""
Interface definitions for dependency abstractions.
These Protocol classes define contracts for collaborators to enable dependency
injection and improve testability.
"""

from .event_interface import IEventBus, IEvent, EventHandler
from .image_interface import IImageProcessor, ImageProcessingError
from .notification_interface import INotificationService
from .repository_interface import IUserRepository, ITaskRepository

__all__ = [
    "IEventBus",
    "IEvent",
    "EventHandler",
    "IImageProcessor",
    "ImageProcessingError",
    "INotificationService",
    "IUserRepository",
    "ITaskRepository"
]
