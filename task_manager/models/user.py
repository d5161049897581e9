"""
User model: account credentials, profile fields and avatar.
"""
from sqlalchemy import Column, Integer, LargeBinary, String

from .base import BaseModel


class User(BaseModel):
    """Registered account. Session tokens live in the user_token table."""

    __tablename__ = 'user'

    name = Column(String(255), nullable=False)
    email = Column(String(320), nullable=False, unique=True, index=True)
    hashed_password = Column(String(255), nullable=False)
    age = Column(Integer, nullable=False, default=0)
    avatar = Column(LargeBinary, nullable=True)

    def __repr__(self) -> str:
        return f"<User(id={self.id}, email=***MASKED***)>"
