"""
Database models for the task manager service.
"""
from .base import Base, BaseModel
from .user import User
from .token import UserToken
from .task import Task

__all__ = [
    "Base",
    "BaseModel",
    "User",
    "UserToken",
    "Task"
]
