from datetime import datetime, timedelta, timezone
from typing import Dict, Any
from jose import JWTError, jwt
from passlib.context import CryptContext
import secrets
import structlog

from .config import Settings
from .exceptions import Unauthenticated

logger = structlog.get_logger()


class SecurityService:
    """Handles password hashing and session token signing"""

    def __init__(self, settings: Settings):
        self.settings = settings
        self.pwd_context = CryptContext(
            schemes=["bcrypt"],
            deprecated="auto",
            bcrypt__rounds=settings.BCRYPT_ROUNDS
        )

    def verify_password(self, plain_password: str, hashed_password: str) -> bool:
        """Verify a password against its hash"""
        return self.pwd_context.verify(plain_password, hashed_password)

    def get_password_hash(self, password: str) -> str:
        """Generate password hash"""
        return self.pwd_context.hash(password)

    def create_session_token(self, user_id: str) -> str:
        """
        Create a signed session token for a user.

        The token stays valid for as long as it is stored in the user's token
        collection; an expiry is only embedded when one is configured.
        """
        now = datetime.now(timezone.utc)
        to_encode: Dict[str, Any] = {
            "sub": user_id,
            "iat": now,
            "jti": secrets.token_urlsafe(16),  # Distinguishes tokens issued in the same second
        }

        if self.settings.ACCESS_TOKEN_EXPIRE_MINUTES:
            to_encode["exp"] = now + timedelta(minutes=self.settings.ACCESS_TOKEN_EXPIRE_MINUTES)

        return jwt.encode(to_encode, self.settings.SECRET_KEY, algorithm=self.settings.ALGORITHM)

    def decode_token(self, token: str) -> Dict[str, Any]:
        """Decode and validate a session token"""
        try:
            payload = jwt.decode(
                token,
                self.settings.SECRET_KEY,
                algorithms=[self.settings.ALGORITHM]
            )
        except JWTError as e:
            logger.debug("Token verification failed", error=str(e))
            raise Unauthenticated()

        if not payload.get("sub"):
            raise Unauthenticated()

        return payload
