"""
Dependency injection container for managing service dependencies.
"""

from .container import Container
from .service_implementations import PillowImageProcessor, PostmarkNotificationService

__all__ = [
    "Container",
    "PillowImageProcessor",
    "PostmarkNotificationService"
]
