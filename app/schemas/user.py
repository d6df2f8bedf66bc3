"""User Pydantic schemas for request/response validation."""

from datetime import datetime

from pydantic import BaseModel, field_validator

from app.models.enums import UserRole


class UserBase(BaseModel):
    """Base user schema."""

    username: str

    @field_validator("username")
    @classmethod
    def validate_username(cls, v: str) -> str:
        """Strip whitespace and reject empty usernames."""
        v = v.strip()
        if not v:
            raise ValueError("Username cannot be empty.")
        return v


class UserCreate(UserBase):
    """Schema for creating a new user."""

    password: str
    role: UserRole = UserRole.TENANT
    flat_id: int | None = None


class UserResponse(UserBase):
    """Schema for user response."""

    id: int
    role: UserRole
    flat_id: int | None = None
    created_at: datetime
    is_active: bool

    model_config = {"from_attributes": True}


class UserProfileUpdate(BaseModel):
    """Schema for an admin editing a user's profile."""

    username: str | None = None
    owner_name: str | None = None


class PasswordReset(BaseModel):
    """Schema for an admin resetting a user's password."""

    new_password: str


class Token(BaseModel):
    """Schema for JWT token response."""

    access_token: str
    token_type: str


class TokenData(BaseModel):
    """Schema for token payload data."""

    user_id: int | None = None


class LoginRequest(BaseModel):
    """Schema for login request."""

    username: str
    password: str
