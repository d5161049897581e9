"""
User repository implementation following the Repository pattern.
Handles user and session token data access. Store faults are logged and
surfaced as InternalFailure.
"""

from typing import Any, Dict, List, Optional
from sqlalchemy import delete, func
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select
import structlog

from ..core.exceptions import InternalFailure, ValidationError
from ..interfaces.repository_interface import IUserRepository
from ..models.token import UserToken
from ..models.user import User

logger = structlog.get_logger()


class UserRepository(IUserRepository):
    """Repository for user and token data access operations."""

    async def create(
        self,
        db: AsyncSession,
        name: str,
        email: str,
        hashed_password: str,
        age: int = 0
    ) -> User:
        """
        Create a new user.

        Args:
            db: Database session
            name: Display name
            email: Normalized email
            hashed_password: Password hash
            age: Age in years

        Returns:
            Created user instance
        """
        try:
            user = User(
                name=name,
                email=email,
                hashed_password=hashed_password,
                age=age
            )
            db.add(user)
            await db.flush()
            await db.refresh(user)

            logger.info("User created successfully", user_id=user.id)
            return user

        except IntegrityError as e:
            # Lost a race with a concurrent registration of the same email
            logger.warning("User creation conflict", error=str(e.orig))
            raise ValidationError(
                "Validation error",
                errors=[{"field": "email", "message": "Email is already registered."}]
            )
        except SQLAlchemyError as e:
            logger.error("User creation failed", error=str(e))
            raise InternalFailure("Failed to create user")

    async def get_by_id(self, db: AsyncSession, user_id: str) -> Optional[User]:
        try:
            result = await db.execute(select(User).where(User.id == user_id))
            return result.scalar_one_or_none()
        except SQLAlchemyError as e:
            logger.error("Failed to get user by ID", user_id=user_id, error=str(e))
            raise InternalFailure()

    async def get_by_email(self, db: AsyncSession, email: str) -> Optional[User]:
        try:
            result = await db.execute(select(User).where(User.email == email))
            return result.scalar_one_or_none()
        except SQLAlchemyError as e:
            logger.error("Failed to get user by email", error=str(e))
            raise InternalFailure()

    async def exists_by_email(
        self,
        db: AsyncSession,
        email: str,
        exclude_user_id: Optional[str] = None
    ) -> bool:
        try:
            query = select(func.count()).select_from(User).where(User.email == email)
            if exclude_user_id is not None:
                query = query.where(User.id != exclude_user_id)

            result = await db.execute(query)
            return result.scalar_one() > 0
        except SQLAlchemyError as e:
            logger.error("Failed to check email existence", error=str(e))
            raise InternalFailure()

    async def update(self, db: AsyncSession, user: User, update_data: Dict[str, Any]) -> User:
        """
        Apply field values to a user.

        Args:
            db: Database session
            user: User to update
            update_data: Validated values keyed by column name

        Returns:
            Updated user
        """
        try:
            for field, value in update_data.items():
                setattr(user, field, value)

            await db.flush()
            await db.refresh(user)

            logger.info("User updated successfully", user_id=user.id, fields=sorted(update_data))
            return user

        except IntegrityError as e:
            logger.warning("User update conflict", user_id=user.id, error=str(e.orig))
            raise ValidationError(
                "Validation error",
                errors=[{"field": "email", "message": "Email is already registered."}]
            )
        except SQLAlchemyError as e:
            logger.error("User update failed", user_id=user.id, error=str(e))
            raise InternalFailure("Failed to update user")

    async def delete(self, db: AsyncSession, user: User) -> None:
        try:
            await db.execute(delete(UserToken).where(UserToken.user_id == user.id))
            await db.delete(user)
            await db.flush()

            logger.info("User deleted", user_id=user.id)

        except SQLAlchemyError as e:
            logger.error("User deletion failed", user_id=user.id, error=str(e))
            raise InternalFailure("Failed to delete user")

    async def get_by_token(self, db: AsyncSession, user_id: str, token: str) -> Optional[User]:
        """
        Resolve a user from the ID embedded in a token, requiring the exact
        token to still be present in the user's token collection.
        """
        try:
            query = (
                select(User)
                .join(UserToken, UserToken.user_id == User.id)
                .where(User.id == user_id, UserToken.token == token)
            )
            result = await db.execute(query)
            return result.scalar_one_or_none()
        except SQLAlchemyError as e:
            logger.error("Failed to resolve user by token", user_id=user_id, error=str(e))
            raise InternalFailure()

    async def add_token(self, db: AsyncSession, user_id: str, token: str) -> None:
        try:
            db.add(UserToken(user_id=user_id, token=token))
            await db.flush()
        except SQLAlchemyError as e:
            logger.error("Failed to store session token", user_id=user_id, error=str(e))
            raise InternalFailure("Failed to store session token")

    async def remove_token(self, db: AsyncSession, user_id: str, token: str) -> int:
        try:
            result = await db.execute(
                delete(UserToken).where(
                    UserToken.user_id == user_id,
                    UserToken.token == token
                )
            )
            return result.rowcount
        except SQLAlchemyError as e:
            logger.error("Failed to remove session token", user_id=user_id, error=str(e))
            raise InternalFailure()

    async def clear_tokens(self, db: AsyncSession, user_id: str) -> int:
        try:
            result = await db.execute(delete(UserToken).where(UserToken.user_id == user_id))
            return result.rowcount
        except SQLAlchemyError as e:
            logger.error("Failed to clear session tokens", user_id=user_id, error=str(e))
            raise InternalFailure()

    async def list_tokens(self, db: AsyncSession, user_id: str) -> List[str]:
        try:
            result = await db.execute(
                select(UserToken.token)
                .where(UserToken.user_id == user_id)
                .order_by(UserToken.created_at, UserToken.id)
            )
            return list(result.scalars().all())
        except SQLAlchemyError as e:
            logger.error("Failed to list session tokens", user_id=user_id, error=str(e))
            raise InternalFailure()
