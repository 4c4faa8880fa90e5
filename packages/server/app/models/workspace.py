"""Workspace model: the tenant boundary."""

from sqlmodel import Field, SQLModel

from .base import TimestampMixin, UUIDMixin


class Workspace(UUIDMixin, TimestampMixin, SQLModel, table=True):
    __tablename__ = "workspaces"

    name: str = Field(nullable=False, index=True)
    slug: str = Field(unique=True, nullable=False, index=True)
