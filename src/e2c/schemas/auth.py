"""Authentication schemas."""

from datetime import datetime
from typing import Optional
from uuid import UUID

from pydantic import BaseModel, EmailStr, Field

from e2c.db.models import UserRole


class RegisterRequest(BaseModel):
    """Register user request."""

    name: str = Field(min_length=1, max_length=100)
    email: EmailStr
    password: str = Field(min_length=6)


class LoginRequest(BaseModel):
    """Login request."""

    email: EmailStr
    password: str


class User(BaseModel):
    """User response."""

    id: UUID
    name: str
    email: str
    role: UserRole
    image: Optional[str] = None
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True
