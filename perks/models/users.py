"""
SQLModel database model for platform users.
"""
import uuid
from enum import Enum
from typing import Optional

import sqlalchemy as sa
from sqlmodel import Field

from .base import BaseModel


class UserRole(str, Enum):
    FOUNDER = "founder"
    TEAM_MEMBER = "team_member"
    INDIE_HACKER = "indie_hacker"


class User(BaseModel, table=True):
    """User model; ``is_verified`` gates access to locked deals."""
    __tablename__ = "users"

    id: str = Field(default_factory=lambda: str(uuid.uuid4()), primary_key=True, max_length=36)
    name: str = Field(max_length=50)
    email: str = Field(unique=True, index=True, max_length=255)  # stored lower-cased
    password_hash: str = Field(max_length=255)
    company: Optional[str] = Field(default=None, max_length=100)
    role: str = Field(default=UserRole.INDIE_HACKER.value, sa_type=sa.String(length=32))
    is_verified: bool = Field(default=False, index=True)
    avatar: Optional[str] = Field(default=None, max_length=500)
    bio: Optional[str] = Field(default=None, max_length=500)
    # Only the most recently issued refresh token is honoured
    refresh_token: Optional[str] = Field(default=None, sa_type=sa.Text)

    def __repr__(self):
        return f"<User(id={self.id}, email='{self.email}' name='{self.name}')>"
