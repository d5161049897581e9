"""
Task-related Pydantic schemas.
"""
from typing import Optional
from datetime import datetime
from pydantic import BaseModel, ConfigDict, Field


class TaskCreate(BaseModel):
    """
    Task creation request schema.
    Unknown keys are dropped, so a client cannot choose the owner.
    """

    description: str = Field(..., description="What needs doing")
    completed: bool = Field(False, description="Whether the task is done")

    model_config = ConfigDict(
        extra="ignore",
        json_schema_extra={
            "example": {"description": "Renew passport", "completed": False}
        }
    )


class TaskUpdate(BaseModel):
    """Task update request schema. Any other key rejects the whole request."""

    description: Optional[str] = None
    completed: Optional[bool] = None

    model_config = ConfigDict(extra="forbid")


class TaskResponse(BaseModel):
    id: str
    description: str
    completed: bool
    owner_id: str
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)
