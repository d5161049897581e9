"""
Session token model. A user holds an ordered collection of active tokens,
one per logged-in session.
"""
from sqlalchemy import Column, String, Text, ForeignKey, Index, UniqueConstraint

from .base import BaseModel


class UserToken(BaseModel):
    """An active session token belonging to a user."""

    __tablename__ = 'user_token'

    user_id = Column(String(36), ForeignKey('user.id'), nullable=False)
    token = Column(Text, nullable=False)

    __table_args__ = (
        UniqueConstraint('token', name='uq_user_token_token'),
        Index('idx_user_token_user_id', 'user_id'),
    )

    def __repr__(self) -> str:
        return f"<UserToken(id={self.id}, user_id={self.user_id})>"
