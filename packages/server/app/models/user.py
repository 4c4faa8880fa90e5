"""User model."""

from typing import Optional

from sqlmodel import Field, SQLModel

from .base import TimestampMixin, UUIDMixin


class User(UUIDMixin, TimestampMixin, SQLModel, table=True):
    __tablename__ = "users"

    name: Optional[str] = None
    email: str = Field(unique=True, index=True, nullable=False)
    image: Optional[str] = None
    password_hash: Optional[str] = Field(default=None)  # bcrypt hash, absent for OAuth-only users
    oauth_provider: Optional[str] = Field(default=None, index=True)
    oauth_subject: Optional[str] = Field(default=None, index=True)
