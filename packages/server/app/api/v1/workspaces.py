"""
Workspace endpoints.

GET  /api/v1/workspaces                          - List the caller's workspaces
POST /api/v1/workspaces                          - Create a workspace (caller becomes OWNER)
GET  /api/v1/workspaces/{workspaceId}/members    - List members
POST /api/v1/workspaces/{workspaceId}/members    - Add a member (OWNER/ADMIN)
"""

from __future__ import annotations

import uuid

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.auth import get_current_user
from app.core.database import get_session
from app.models.user import User
from app.services import workspaces as workspace_service
from nebula_shared.schemas.workspaces import (
    MemberAddRequest,
    MemberListResponse,
    MemberResponse,
    WorkspaceCreateRequest,
    WorkspaceListResponse,
    WorkspaceRead,
    WorkspaceResponse,
)

router = APIRouter()


@router.get("", response_model=WorkspaceListResponse)
async def list_workspaces(
    user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_session),
):
    items = await workspace_service.list_user_workspaces(session, user.id)
    return WorkspaceListResponse(workspaces=items)


@router.post("", response_model=WorkspaceResponse, status_code=201)
async def create_workspace(
    body: WorkspaceCreateRequest,
    user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_session),
):
    workspace = await workspace_service.create_workspace(session, user.id, body)
    return WorkspaceResponse(workspace=WorkspaceRead.model_validate(workspace))


@router.get("/{workspaceId}/members", response_model=MemberListResponse)
async def list_members(
    workspaceId: uuid.UUID,
    user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_session),
):
    members = await workspace_service.list_members(session, user.id, workspaceId)
    return MemberListResponse(members=members)


@router.post("/{workspaceId}/members", response_model=MemberResponse, status_code=201)
async def add_member(
    workspaceId: uuid.UUID,
    body: MemberAddRequest,
    user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_session),
):
    """Add an existing user by email. Owners and admins only."""
    member = await workspace_service.add_member(session, user.id, workspaceId, body)
    return MemberResponse(member=member)
