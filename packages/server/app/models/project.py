"""Project model."""

from typing import Optional
import uuid

import sqlalchemy as sa
from sqlmodel import Field, SQLModel

from .base import TimestampMixin, UUIDMixin


class Project(UUIDMixin, TimestampMixin, SQLModel, table=True):
    __tablename__ = "projects"

    workspace_id: uuid.UUID = Field(foreign_key="workspaces.id", nullable=False, index=True)
    name: str = Field(nullable=False)
    description: Optional[str] = Field(default=None, sa_type=sa.Text)
    created_by_id: uuid.UUID = Field(foreign_key="users.id", nullable=False)
