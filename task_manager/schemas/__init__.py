"""
Request and response schemas.
"""

from .common import ErrorResponse, HealthResponse
from .task_schemas import TaskCreate, TaskResponse, TaskUpdate
from .user_schemas import (
    AuthResponse,
    LoginRequest,
    MessageResponse,
    UserCreate,
    UserResponse,
    UserUpdate
)

__all__ = [
    "ErrorResponse",
    "HealthResponse",
    "TaskCreate",
    "TaskResponse",
    "TaskUpdate",
    "AuthResponse",
    "LoginRequest",
    "MessageResponse",
    "UserCreate",
    "UserResponse",
    "UserUpdate"
]
