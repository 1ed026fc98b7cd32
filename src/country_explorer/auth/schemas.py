"""Request/response schemas for authentication endpoints.

JSON field names are camelCase (``firstName``, ``refreshToken``); Python
attributes stay snake_case.
"""

from __future__ import annotations

from datetime import datetime
from typing import Annotated

from pydantic import BaseModel, ConfigDict, EmailStr, Field, StringConstraints, field_validator
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# Trimmed before the length check, so "   " and " x " are rejected
PersonName = Annotated[str, StringConstraints(strip_whitespace=True, min_length=2, max_length=50)]


# ---------------------------------------------------------------------------
# Requests
# ---------------------------------------------------------------------------


class RegisterRequest(CamelModel):
    """Email registration request."""

    email: EmailStr
    password: str = Field(..., min_length=1, max_length=128)
    first_name: PersonName
    last_name: PersonName

    @field_validator("email")
    @classmethod
    def normalize_email(cls, v: str) -> str:
        """Normalize email to lowercase."""
        return v.lower().strip()


class LoginRequest(CamelModel):
    """Login with email + password."""

    email: EmailStr
    password: str = Field(..., min_length=1, max_length=128)

    @field_validator("email")
    @classmethod
    def normalize_email(cls, v: str) -> str:
        """Normalize email to lowercase."""
        return v.lower().strip()


class RefreshRequest(CamelModel):
    """Refresh token rotation request."""

    refresh_token: str = Field(..., min_length=1)


class ProfileUpdateRequest(CamelModel):
    """Update user profile fields. At least one field must be present."""

    first_name: PersonName | None = None
    last_name: PersonName | None = None


class ChangePasswordRequest(CamelModel):
    """Change password (requires current password)."""

    current_password: str = Field(..., min_length=1, max_length=128)
    new_password: str = Field(..., min_length=1, max_length=128)


# ---------------------------------------------------------------------------
# Responses
# ---------------------------------------------------------------------------


class UserResponse(CamelModel):
    """User profile. The password hash is never part of it."""

    id: str
    email: str
    first_name: str
    last_name: str
    full_name: str
    favorites: list[str] = Field(default_factory=list)
    created_at: datetime | None = None
    updated_at: datetime | None = None

    model_config = ConfigDict(from_attributes=True)


class TokenPair(CamelModel):
    access_token: str
    refresh_token: str
    token_type: str = "bearer"
    expires_in: int = 900


class AuthPayload(CamelModel):
    user: UserResponse
    tokens: TokenPair


class AuthResponse(CamelModel):
    """Envelope for register/login."""

    success: bool = True
    data: AuthPayload
    message: str | None = None


class TokenResponse(CamelModel):
    """Envelope for refresh."""

    success: bool = True
    data: dict[str, TokenPair]
    message: str | None = None


class UserEnvelope(CamelModel):
    success: bool = True
    data: UserResponse
    message: str | None = None


class FavoritesEnvelope(CamelModel):
    success: bool = True
    data: dict[str, list[str]]
    message: str | None = None


class MessageResponse(CamelModel):
    success: bool = True
    message: str
