"""
User-related Pydantic schemas for request/response validation.
Field rules (name, email, password, age) are enforced by the validation
module, not here, so that every violation is reported in one response.
"""
from typing import Optional
from datetime import datetime
from pydantic import BaseModel, ConfigDict, Field


class UserCreate(BaseModel):
    """Registration request schema."""

    name: str = Field(..., description="Display name")
    email: str = Field(..., description="Email address, stored lowercased")
    password: str = Field(..., description="Password, at least 6 characters and not containing 'password'")
    age: int = Field(0, description="Age in years")

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "name": "Nada",
                "email": "nadarach@example.com",
                "password": "keY@W087!",
                "age": 27
            }
        }
    )


class LoginRequest(BaseModel):
    """Login request schema."""

    email: str = Field(..., description="Email address")
    password: str = Field(..., description="Password")


class UserUpdate(BaseModel):
    """
    Profile update request schema.
    Any key other than these rejects the whole request.
    """

    name: Optional[str] = None
    email: Optional[str] = None
    password: Optional[str] = None
    age: Optional[int] = None

    model_config = ConfigDict(extra="forbid")


class UserResponse(BaseModel):
    """Public view of a user. Never includes the password hash, tokens or avatar."""

    id: str
    name: str
    email: str
    age: int
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


class AuthResponse(BaseModel):
    """Registration and login response."""

    user: UserResponse
    token: str


class MessageResponse(BaseModel):
    message: str
