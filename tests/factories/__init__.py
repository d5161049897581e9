"""
Test factories for generating model instances.
"""
from .user_factory import UserFactory, DEFAULT_PASSWORD
from .task_factory import TaskFactory

__all__ = ["UserFactory", "TaskFactory", "DEFAULT_PASSWORD"]
