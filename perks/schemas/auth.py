"""
Pydantic schemas for authentication request/response models.
"""
from datetime import datetime
from typing import Annotated, Optional

from pydantic import EmailStr, Field, StringConstraints, field_validator

from perks.models.users import UserRole
from perks.schemas.common import CamelModel

Name = Annotated[str, StringConstraints(strip_whitespace=True, min_length=2, max_length=50)]
Company = Annotated[str, StringConstraints(strip_whitespace=True, max_length=100)]


class RegisterRequest(CamelModel):
    """Schema for user registration request."""
    name: Name
    email: EmailStr
    password: str = Field(min_length=6)
    company: Optional[Company] = None
    role: Optional[UserRole] = None

    @field_validator("email")
    @classmethod
    def normalize_email(cls, value: str) -> str:
        return value.strip().lower()


class LoginRequest(CamelModel):
    """Schema for user login request."""
    email: EmailStr
    password: str = Field(min_length=1)

    @field_validator("email")
    @classmethod
    def normalize_email(cls, value: str) -> str:
        return value.strip().lower()


class RefreshRequest(CamelModel):
    refresh_token: Optional[str] = None


class UserPublic(CamelModel):
    """Public-safe projection of a user: no password hash, no refresh token."""
    id: str
    name: str
    email: str
    company: Optional[str] = None
    role: UserRole
    is_verified: bool
    avatar: Optional[str] = None
    bio: Optional[str] = None
    created_at: datetime


class TokenPair(CamelModel):
    access_token: str
    refresh_token: str


class AuthPayload(TokenPair):
    user: UserPublic


class ProfilePayload(CamelModel):
    user: UserPublic
