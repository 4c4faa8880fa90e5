"""Task model."""

from datetime import datetime
from typing import Optional
import uuid

import sqlalchemy as sa
from sqlmodel import Field, SQLModel

from .base import TimestampMixin, UUIDMixin


class Task(UUIDMixin, TimestampMixin, SQLModel, table=True):
    __tablename__ = "tasks"

    project_id: uuid.UUID = Field(foreign_key="projects.id", nullable=False, index=True)
    title: str = Field(nullable=False)
    description: Optional[str] = Field(default=None, sa_type=sa.Text)
    status: str = Field(nullable=False, default="TODO")  # TODO | IN_PROGRESS | DONE
    priority: str = Field(nullable=False, default="MEDIUM")  # LOW | MEDIUM | HIGH | URGENT
    due_date: Optional[datetime] = Field(default=None, sa_type=sa.DateTime(timezone=True))
    created_by_id: uuid.UUID = Field(foreign_key="users.id", nullable=False)
    assignee_id: Optional[uuid.UUID] = Field(default=None, foreign_key="users.id", index=True)
