"""Notification model: a per-user inbox entry."""

from typing import Optional
import uuid

from sqlmodel import Field, SQLModel

from .base import CreatedAtMixin, UUIDMixin


class Notification(UUIDMixin, CreatedAtMixin, SQLModel, table=True):
    __tablename__ = "notifications"

    user_id: uuid.UUID = Field(foreign_key="users.id", nullable=False, index=True)
    title: str = Field(nullable=False)
    message: Optional[str] = None
    type: str = Field(nullable=False, default="info")
    read: bool = Field(default=False, nullable=False)
