"""Comment model. Attached to exactly one task or one note."""

from typing import Optional
import uuid

import sqlalchemy as sa
from sqlmodel import Field, SQLModel

from .base import CreatedAtMixin, UUIDMixin


class Comment(UUIDMixin, CreatedAtMixin, SQLModel, table=True):
    __tablename__ = "comments"
    __table_args__ = (
        sa.CheckConstraint(
            "(task_id IS NULL) <> (note_id IS NULL)",
            name="ck_comments_single_target",
        ),
    )

    body: str = Field(sa_type=sa.Text, nullable=False)
    author_id: uuid.UUID = Field(foreign_key="users.id", nullable=False)
    task_id: Optional[uuid.UUID] = Field(default=None, foreign_key="tasks.id", index=True)
    note_id: Optional[uuid.UUID] = Field(default=None, foreign_key="notes.id", index=True)
