"""User-Workspace membership (join table). Every access check reads this."""

from datetime import datetime
import uuid

import sqlalchemy as sa
from sqlmodel import Field, SQLModel

from .base import _utcnow


class WorkspaceMember(SQLModel, table=True):
    __tablename__ = "workspace_members"

    user_id: uuid.UUID = Field(foreign_key="users.id", primary_key=True)
    workspace_id: uuid.UUID = Field(foreign_key="workspaces.id", primary_key=True, index=True)
    role: str = Field(nullable=False, default="MEMBER")  # OWNER | ADMIN | MEMBER
    joined_at: datetime = Field(
        default_factory=_utcnow,
        nullable=False,
        sa_column_kwargs={"server_default": sa.func.now()},
        sa_type=sa.DateTime(timezone=True),
    )
