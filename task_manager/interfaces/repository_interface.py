"""
Repository interfaces for dependency abstraction.
Defines contracts for data access operations to enable dependency injection
and improve testability.
"""

from typing import Any, Dict, List, Optional, Protocol, runtime_checkable
from sqlalchemy.ext.asyncio import AsyncSession

from ..models.user import User
from ..models.task import Task


@runtime_checkable
class IUserRepository(Protocol):
    """Protocol for credential store operations."""

    async def create(
        self,
        db: AsyncSession,
        name: str,
        email: str,
        hashed_password: str,
        age: int = 0
    ) -> User:
        """
        Persist a new user.

        Args:
            db: Database session
            name: Display name (already validated)
            email: Normalized email (already validated)
            hashed_password: Password hash, never the plaintext
            age: Age in years

        Returns:
            Created user instance
        """
        ...

    async def get_by_id(self, db: AsyncSession, user_id: str) -> Optional[User]:
        """Get user by ID, or None."""
        ...

    async def get_by_email(self, db: AsyncSession, email: str) -> Optional[User]:
        """Get user by normalized email, or None."""
        ...

    async def exists_by_email(
        self,
        db: AsyncSession,
        email: str,
        exclude_user_id: Optional[str] = None
    ) -> bool:
        """
        Check if an email is already registered.

        Args:
            db: Database session
            email: Normalized email
            exclude_user_id: User to ignore, for updates of the user's own record

        Returns:
            True if another user holds the email
        """
        ...

    async def update(self, db: AsyncSession, user: User, update_data: Dict[str, Any]) -> User:
        """Apply already validated field values to a user and persist."""
        ...

    async def delete(self, db: AsyncSession, user: User) -> None:
        """Delete a user and its session tokens."""
        ...

    async def get_by_token(self, db: AsyncSession, user_id: str, token: str) -> Optional[User]:
        """
        Get the user with the given ID whose token collection holds the exact token.

        Args:
            db: Database session
            user_id: ID embedded in the token
            token: Raw token string

        Returns:
            User instance or None if there is no such user/token pair
        """
        ...

    async def add_token(self, db: AsyncSession, user_id: str, token: str) -> None:
        """Append a token to the user's token collection."""
        ...

    async def remove_token(self, db: AsyncSession, user_id: str, token: str) -> int:
        """Remove one token. Returns the number of tokens removed."""
        ...

    async def clear_tokens(self, db: AsyncSession, user_id: str) -> int:
        """Remove every token of a user. Returns the number removed."""
        ...

    async def list_tokens(self, db: AsyncSession, user_id: str) -> List[str]:
        """Return a user's tokens in the order they were issued."""
        ...


@runtime_checkable
class ITaskRepository(Protocol):
    """Protocol for task store operations. Every lookup is scoped by owner."""

    async def create(
        self,
        db: AsyncSession,
        owner_id: str,
        description: str,
        completed: bool = False
    ) -> Task:
        """Persist a new task for an owner."""
        ...

    async def get_for_owner(self, db: AsyncSession, task_id: str, owner_id: str) -> Optional[Task]:
        """Get a task matching both ID and owner, or None."""
        ...

    async def list_for_owner(
        self,
        db: AsyncSession,
        owner_id: str,
        completed: Optional[bool] = None,
        limit: Optional[int] = None,
        skip: int = 0,
        sort_field: Optional[str] = None,
        descending: bool = False
    ) -> List[Task]:
        """
        List an owner's tasks.

        Args:
            db: Database session
            owner_id: Owner ID
            completed: Optional equality filter on the completion flag
            limit: Maximum number of tasks, None for no limit
            skip: Number of tasks to skip
            sort_field: Model attribute to sort by, None for creation order
            descending: Sort direction

        Returns:
            List of tasks
        """
        ...

    async def update(self, db: AsyncSession, task: Task, update_data: Dict[str, Any]) -> Task:
        """Apply already validated field values to a task and persist."""
        ...

    async def delete_for_owner(self, db: AsyncSession, task_id: str, owner_id: str) -> Optional[Task]:
        """Delete a task matching both ID and owner. Returns the deleted task or None."""
        ...

    async def delete_all_for_owner(self, db: AsyncSession, owner_id: str) -> int:
        """Delete every task of an owner. Returns the number deleted."""
        ...
