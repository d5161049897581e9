"""
Service layer. Services receive their collaborators through the container
and take the request's database session as the first argument of every
operation.
"""

from .account_service import AccountService
from .authenticator import Authenticator, Identity
from .task_service import TaskService, parse_sort

__all__ = [
    "AccountService",
    "Authenticator",
    "Identity",
    "TaskService",
    "parse_sort"
]
