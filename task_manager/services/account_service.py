"""
Account operations: registration, login/logout, profile, account deletion
and avatar management.
"""

import re
from typing import Any, Dict, Optional, Tuple
from sqlalchemy.ext.asyncio import AsyncSession
from starlette.concurrency import run_in_threadpool
import structlog

from ..core.config import Settings
from ..core.exceptions import InvalidCredentials, NotFound, ServiceError, ValidationError
from ..core.security import SecurityService
from ..core.validation import (
    Violation, ensure_valid, normalize_email, normalize_text, validate_user
)
from ..events.account_events import (
    AccountDeletedEvent, UserLoggedInEvent, UserLoggedOutEvent, UserRegisteredEvent
)
from ..interfaces.event_interface import IEventBus
from ..interfaces.image_interface import IImageProcessor, ImageProcessingError
from ..interfaces.repository_interface import ITaskRepository, IUserRepository
from ..models.user import User
from .authenticator import Identity

logger = structlog.get_logger()

AVATAR_FILENAME_PATTERN = re.compile(r"\.(jpg|jpeg|png)$", re.IGNORECASE)
EMAIL_TAKEN = Violation("email", "Email is already registered.")


class AccountService:
    """Service responsible for the account lifecycle."""

    def __init__(
        self,
        user_repository: IUserRepository,
        task_repository: ITaskRepository,
        security_service: SecurityService,
        event_bus: IEventBus,
        image_processor: IImageProcessor,
        settings: Settings
    ):
        self.user_repository = user_repository
        self.task_repository = task_repository
        self.security_service = security_service
        self.event_bus = event_bus
        self.image_processor = image_processor
        self.settings = settings

    async def register(
        self,
        db: AsyncSession,
        name: str,
        email: str,
        password: str,
        age: int = 0
    ) -> Tuple[User, str]:
        """
        Create an account and open its first session.

        Args:
            db: Database session
            name: Display name
            email: Email address, stored trimmed and lowercased
            password: Plaintext password, stored only as a hash
            age: Age in years

        Returns:
            Tuple of (user, session token)

        Raises:
            ValidationError: If any field breaks a rule or the email is taken
        """
        name = normalize_text(name)
        email = normalize_email(email)

        violations = validate_user(
            name, email, password, age,
            password_min_length=self.settings.PASSWORD_MIN_LENGTH
        )
        if email and await self.user_repository.exists_by_email(db, email):
            violations.append(EMAIL_TAKEN)
        ensure_valid(violations)

        try:
            user = await self.user_repository.create(
                db,
                name=name,
                email=email,
                hashed_password=self.security_service.get_password_hash(password),
                age=age
            )
            token = await self._open_session(db, user)
            await db.commit()

        except ServiceError:
            raise
        except Exception as e:
            logger.error("User registration failed", error=str(e))
            raise

        logger.info("User registered", user_id=user.id)
        await self.event_bus.publish(
            UserRegisteredEvent(user_id=user.id, email=user.email, name=user.name)
        )
        return user, token

    async def login(self, db: AsyncSession, email: str, password: str) -> Tuple[User, str]:
        """
        Verify credentials and open a new session.

        Raises:
            InvalidCredentials: Same error for an unknown email and a wrong password
        """
        user = await self.user_repository.get_by_email(db, normalize_email(email) or "")
        if user is None or not self.security_service.verify_password(password, user.hashed_password):
            logger.info("Login failed")
            raise InvalidCredentials()

        token = await self._open_session(db, user)
        await db.commit()

        session_count = len(await self.user_repository.list_tokens(db, user.id))
        await self.event_bus.publish(UserLoggedInEvent(user_id=user.id, session_count=session_count))
        return user, token

    async def logout(self, db: AsyncSession, identity: Identity) -> None:
        """End the session of the token the request was made with."""
        removed = await self.user_repository.remove_token(db, identity.user.id, identity.token)
        await db.commit()

        await self.event_bus.publish(
            UserLoggedOutEvent(user_id=identity.user.id, sessions_removed=removed)
        )

    async def logout_all(self, db: AsyncSession, identity: Identity) -> None:
        """End every session of the caller, including the current one."""
        removed = await self.user_repository.clear_tokens(db, identity.user.id)
        await db.commit()

        await self.event_bus.publish(
            UserLoggedOutEvent(user_id=identity.user.id, logout_all=True, sessions_removed=removed)
        )

    def get_profile(self, identity: Identity) -> User:
        return identity.user

    async def update_profile(
        self,
        db: AsyncSession,
        identity: Identity,
        changes: Dict[str, Any]
    ) -> User:
        """
        Apply a partial profile update.

        Only the keys present in `changes` are applied. The merged record is
        validated with the registration rules before anything is written.

        Args:
            db: Database session
            identity: Caller
            changes: Submitted fields, a subset of name, email, password and age

        Returns:
            Updated user
        """
        user = identity.user

        name = normalize_text(changes["name"]) if "name" in changes else user.name
        email = normalize_email(changes["email"]) if "email" in changes else user.email
        age = changes["age"] if "age" in changes else user.age
        password_changed = "password" in changes

        violations = validate_user(
            name, email, changes.get("password"), age,
            password_min_length=self.settings.PASSWORD_MIN_LENGTH,
            check_password=password_changed
        )
        if (
            "email" in changes
            and email
            and await self.user_repository.exists_by_email(db, email, exclude_user_id=user.id)
        ):
            violations.append(EMAIL_TAKEN)
        ensure_valid(violations)

        update_data: Dict[str, Any] = {}
        if "name" in changes:
            update_data["name"] = name
        if "email" in changes:
            update_data["email"] = email
        if "age" in changes:
            update_data["age"] = age
        if password_changed:
            update_data["hashed_password"] = self.security_service.get_password_hash(changes["password"])

        if update_data:
            user = await self.user_repository.update(db, user, update_data)
            await db.commit()

        return user

    async def delete_account(self, db: AsyncSession, identity: Identity) -> User:
        """
        Delete the caller's account with all of its tasks and sessions.

        Every step runs in the request's transaction, so a failure leaves the
        account untouched.

        Returns:
            The deleted user
        """
        user = identity.user

        await self.event_bus.publish(
            AccountDeletedEvent(user_id=user.id, email=user.email, name=user.name)
        )

        try:
            task_count = await self.task_repository.delete_all_for_owner(db, user.id)
            await self.user_repository.delete(db, user)
            await db.commit()
        except ServiceError:
            raise
        except Exception as e:
            logger.error("Account deletion failed", user_id=user.id, error=str(e))
            raise

        logger.info("Account deleted", user_id=user.id, tasks_deleted=task_count)
        return user

    async def set_avatar(
        self,
        db: AsyncSession,
        identity: Identity,
        filename: Optional[str],
        content: bytes
    ) -> None:
        """
        Validate, resize and store an uploaded avatar.

        Raises:
            ValidationError: Bad extension, oversize upload or undecodable image
        """
        if not filename or not AVATAR_FILENAME_PATTERN.search(filename):
            raise ValidationError("Please upload an image (.jpg, .jpeg or .png).")

        if len(content) > self.settings.AVATAR_MAX_BYTES:
            raise ValidationError(
                f"File too large. Avatars are limited to {self.settings.AVATAR_MAX_BYTES} bytes."
            )

        try:
            avatar = await run_in_threadpool(self.image_processor.process_avatar, content)
        except ImageProcessingError as e:
            raise ValidationError(str(e))

        await self.user_repository.update(db, identity.user, {"avatar": avatar})
        await db.commit()

    async def clear_avatar(self, db: AsyncSession, identity: Identity) -> None:
        await self.user_repository.update(db, identity.user, {"avatar": None})
        await db.commit()

    async def get_avatar(self, db: AsyncSession, user_id: str) -> bytes:
        """
        Return a user's stored avatar PNG.

        Raises:
            NotFound: If the user does not exist or has no avatar
        """
        user = await self.user_repository.get_by_id(db, user_id)
        if user is None or user.avatar is None:
            raise NotFound("Avatar not found")
        return user.avatar

    async def _open_session(self, db: AsyncSession, user: User) -> str:
        token = self.security_service.create_session_token(user.id)
        await self.user_repository.add_token(db, user.id, token)
        return token
