"""Activity log model (append-only)."""

import uuid

import sqlalchemy as sa
from sqlmodel import Field, SQLModel

from .base import CreatedAtMixin, UUIDMixin


class ActivityLog(UUIDMixin, CreatedAtMixin, SQLModel, table=True):
    __tablename__ = "activity_logs"

    workspace_id: uuid.UUID = Field(foreign_key="workspaces.id", nullable=False, index=True)
    user_id: uuid.UUID = Field(foreign_key="users.id", nullable=False)  # actor
    action: str = Field(nullable=False)  # created | updated | deleted | commented
    entity_type: str = Field(nullable=False)  # workspace | project | task | note | comment
    entity_id: uuid.UUID = Field(nullable=False)
    # "metadata" is reserved on declarative classes, so the attribute is renamed
    details: dict = Field(
        default_factory=dict,
        sa_column=sa.Column("metadata", sa.JSON, nullable=False),
    )
