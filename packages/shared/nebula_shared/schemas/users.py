"""Account schemas: registration, login, session and profile."""

from __future__ import annotations

from typing import Optional

from pydantic import EmailStr, Field, UUID4

from .common import APIModel


# ---------------------------------------------------------------------------
# Request schemas
# ---------------------------------------------------------------------------

class RegisterRequest(APIModel):
    """Credential registration."""
    name: str = Field(min_length=2, max_length=100)
    email: EmailStr
    password: str = Field(min_length=6, max_length=128)


class LoginRequest(APIModel):
    email: EmailStr
    password: str = Field(min_length=6, max_length=128)


class ProfileUpdateRequest(APIModel):
    """Update the caller's display name and, optionally, avatar URL."""
    name: str = Field(min_length=2, max_length=100)
    image: Optional[str] = None


# ---------------------------------------------------------------------------
# Response schemas
# ---------------------------------------------------------------------------

class RegisterResponse(APIModel):
    message: str
    user_id: UUID4


class UserProfile(APIModel):
    id: UUID4
    name: Optional[str] = None
    email: str
    image: Optional[str] = None


class SessionResponse(APIModel):
    user: UserProfile


class OAuthLoginResponse(APIModel):
    provider: str
    authorization_url: str
