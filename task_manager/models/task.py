"""
Task model for personal to-do items.
"""
from sqlalchemy import Boolean, Column, ForeignKey, Index, String, Text

from .base import BaseModel


class Task(BaseModel):
    """A to-do item owned by exactly one user."""

    __tablename__ = 'task'

    description = Column(Text, nullable=False)
    completed = Column(Boolean, nullable=False, default=False)
    owner_id = Column(String(36), ForeignKey('user.id'), nullable=False)

    __table_args__ = (
        Index('idx_task_owner_id', 'owner_id'),
        Index('idx_task_owner_completed', 'owner_id', 'completed'),
    )

    def __repr__(self) -> str:
        return f"<Task(id={self.id}, owner_id={self.owner_id}, completed={self.completed})>"
