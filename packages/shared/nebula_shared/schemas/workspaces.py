"""
Workspace schemas: workspace CRUD and membership.

A workspace is the tenant boundary; every project, task, note and comment is
reachable from exactly one workspace.
"""

from __future__ import annotations

import re
import uuid
from datetime import datetime
from typing import Optional

from pydantic import EmailStr, Field, field_validator

from .common import APIModel, Role, UserSummary


def slugify_workspace_name(name: str, suffix: int) -> str:
    """Lower-case the name, collapse whitespace runs to '-', append suffix."""
    base = re.sub(r"\s+", "-", name.lower())
    return f"{base}-{suffix}"


# ---------------------------------------------------------------------------
# Request schemas
# ---------------------------------------------------------------------------

class WorkspaceCreateRequest(APIModel):
    name: str = Field(..., min_length=2, max_length=100, description="Workspace display name")


class MemberAddRequest(APIModel):
    email: EmailStr
    role: Role = Role.MEMBER

    @field_validator("role")
    @classmethod
    def _not_owner(cls, value: Role) -> Role:
        if value == Role.OWNER:
            raise ValueError("Members can only be added as ADMIN or MEMBER")
        return value


# ---------------------------------------------------------------------------
# Response schemas
# ---------------------------------------------------------------------------

class WorkspaceRead(APIModel):
    id: uuid.UUID
    name: str
    slug: str


class WorkspaceListItem(WorkspaceRead):
    role: Role  # the requesting user's role in this workspace


class WorkspaceListResponse(APIModel):
    workspaces: list[WorkspaceListItem]


class WorkspaceResponse(APIModel):
    workspace: WorkspaceRead


class MemberUser(UserSummary):
    email: Optional[str] = None


class MemberRead(APIModel):
    user: MemberUser
    role: Role
    joined_at: datetime


class MemberListResponse(APIModel):
    members: list[MemberRead]


class MemberResponse(APIModel):
    member: MemberRead
