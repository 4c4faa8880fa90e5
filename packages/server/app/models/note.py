"""Note model."""

import uuid

import sqlalchemy as sa
from sqlmodel import Field, SQLModel

from .base import TimestampMixin, UUIDMixin


class Note(UUIDMixin, TimestampMixin, SQLModel, table=True):
    __tablename__ = "notes"

    project_id: uuid.UUID = Field(foreign_key="projects.id", nullable=False, index=True)
    title: str = Field(nullable=False)
    content: str = Field(default="", sa_type=sa.Text, nullable=False)  # serialized rich text
    created_by_id: uuid.UUID = Field(foreign_key="users.id", nullable=False)
