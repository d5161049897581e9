"""
Bearer-token authentication.
A token is valid only while its signature verifies and the exact token string
is still stored in its user's token collection.
"""

from dataclasses import dataclass
from typing import Optional
from sqlalchemy.ext.asyncio import AsyncSession
import structlog

from ..core.exceptions import Unauthenticated
from ..core.security import SecurityService
from ..interfaces.repository_interface import IUserRepository
from ..models.user import User

logger = structlog.get_logger()


@dataclass(frozen=True)
class Identity:
    """The authenticated user and the token the request presented."""

    user: User
    token: str


class Authenticator:
    """Resolves a raw bearer token to an Identity."""

    def __init__(self, user_repository: IUserRepository, security_service: SecurityService):
        self.user_repository = user_repository
        self.security_service = security_service

    async def authenticate(self, db: AsyncSession, token: Optional[str]) -> Identity:
        """
        Verify a token and load its user.

        Args:
            db: Database session
            token: Raw token from the Authorization header, if any

        Returns:
            Identity of the caller

        Raises:
            Unauthenticated: If the token is missing, does not verify, or has
                been revoked
        """
        if not token:
            raise Unauthenticated()

        payload = self.security_service.decode_token(token)
        user = await self.user_repository.get_by_token(db, payload["sub"], token)
        if user is None:
            logger.info("Rejected revoked or unknown token", user_id=payload["sub"])
            raise Unauthenticated()

        return Identity(user=user, token=token)
