"""
Workspace service: workspace creation, default provisioning and membership.
"""

from __future__ import annotations

import time
import uuid

import structlog
from fastapi import HTTPException
from sqlalchemy import func
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select

from app.core.auth import check_access, check_role
from app.models.user import User
from app.models.workspace import Workspace
from app.models.workspace_member import WorkspaceMember
from app.services.activity import record_activity
from app.services.users import get_user_by_email
from nebula_shared.schemas.activity import ActivityAction
from nebula_shared.schemas.common import MANAGER_ROLES, Role
from nebula_shared.schemas.workspaces import (
    MemberAddRequest,
    MemberRead,
    MemberUser,
    WorkspaceCreateRequest,
    WorkspaceListItem,
    slugify_workspace_name,
)

log = structlog.get_logger()


def _member_read(user: User, membership: WorkspaceMember) -> MemberRead:
    return MemberRead(
        user=MemberUser(id=user.id, name=user.name, image=user.image, email=user.email),
        role=membership.role,
        joined_at=membership.joined_at,
    )


async def list_user_workspaces(
    session: AsyncSession, user_id: uuid.UUID
) -> list[WorkspaceListItem]:
    """All workspaces the user belongs to, with the user's role in each."""
    result = await session.execute(
        select(Workspace, WorkspaceMember.role)
        .join(WorkspaceMember, WorkspaceMember.workspace_id == Workspace.id)
        .where(WorkspaceMember.user_id == user_id)
        .order_by(Workspace.created_at)
    )
    return [
        WorkspaceListItem(id=ws.id, name=ws.name, slug=ws.slug, role=role)
        for ws, role in result.all()
    ]


async def count_user_workspaces(session: AsyncSession, user_id: uuid.UUID) -> int:
    result = await session.execute(
        select(func.count()).select_from(WorkspaceMember).where(WorkspaceMember.user_id == user_id)
    )
    return result.scalar_one()


async def add_owned_workspace(
    session: AsyncSession, owner_id: uuid.UUID, name: str, slug: str
) -> Workspace:
    """Stage a workspace and its OWNER membership. The caller commits."""
    workspace = Workspace(name=name, slug=slug)
    session.add(workspace)
    await session.flush()

    session.add(
        WorkspaceMember(user_id=owner_id, workspace_id=workspace.id, role=Role.OWNER.value)
    )
    await session.flush()
    return workspace


async def provision_default_workspace(session: AsyncSession, user: User) -> Workspace:
    """The personal workspace every new account starts with."""
    workspace = await add_owned_workspace(
        session,
        user.id,
        name=f"{user.name or user.email.split('@')[0]}'s Workspace",
        slug=f"{user.id}-workspace",
    )
    log.info("workspace.provisioned", workspace_id=str(workspace.id), user_id=str(user.id))
    return workspace


async def create_workspace(
    session: AsyncSession, creator_id: uuid.UUID, req: WorkspaceCreateRequest
) -> Workspace:
    """Create a workspace with the creator as OWNER, in one transaction."""
    slug = slugify_workspace_name(req.name, int(time.time() * 1000))
    workspace = await add_owned_workspace(session, creator_id, req.name, slug)
    await session.commit()

    log.info("workspace.created", workspace_id=str(workspace.id), slug=slug, creator=str(creator_id))
    await record_activity(
        session,
        workspace.id,
        creator_id,
        ActivityAction.CREATED,
        "workspace",
        workspace.id,
        {"name": workspace.name},
    )
    return workspace


async def list_members(
    session: AsyncSession, actor_id: uuid.UUID, workspace_id: uuid.UUID
) -> list[MemberRead]:
    await check_access(session, actor_id, workspace_id)
    result = await session.execute(
        select(User, WorkspaceMember)
        .join(WorkspaceMember, WorkspaceMember.user_id == User.id)
        .where(WorkspaceMember.workspace_id == workspace_id)
        .order_by(WorkspaceMember.joined_at)
    )
    return [_member_read(user, membership) for user, membership in result.all()]


async def add_member(
    session: AsyncSession,
    actor_id: uuid.UUID,
    workspace_id: uuid.UUID,
    req: MemberAddRequest,
) -> MemberRead:
    """Add an existing user to the workspace as ADMIN or MEMBER."""
    await check_role(
        session,
        actor_id,
        workspace_id,
        MANAGER_ROLES,
        detail="Only workspace owners/admins can add members",
    )

    user = await get_user_by_email(session, req.email)
    if not user:
        raise HTTPException(status_code=404, detail="User not found")

    existing = await session.execute(
        select(WorkspaceMember).where(
            WorkspaceMember.user_id == user.id,
            WorkspaceMember.workspace_id == workspace_id,
        )
    )
    if existing.scalar_one_or_none():
        raise HTTPException(status_code=409, detail="User is already a member of this workspace")

    membership = WorkspaceMember(user_id=user.id, workspace_id=workspace_id, role=req.role.value)
    session.add(membership)
    await session.commit()

    log.info(
        "workspace.member_added",
        workspace_id=str(workspace_id),
        user_id=str(user.id),
        role=membership.role,
        added_by=str(actor_id),
    )
    return _member_read(user, membership)
