"""
Project endpoints.

GET    /api/v1/projects?workspaceId=   - List a workspace's projects
POST   /api/v1/projects                - Create a project
GET    /api/v1/projects/{projectId}    - Project with workspace, tasks and notes
PATCH  /api/v1/projects/{projectId}    - Update name/description
DELETE /api/v1/projects/{projectId}    - Delete (OWNER/ADMIN only)
"""

from __future__ import annotations

import uuid
from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.auth import get_current_user
from app.core.database import get_session
from app.models.user import User
from app.services import projects as project_service
from nebula_shared.schemas.common import MessageResponse
from nebula_shared.schemas.projects import (
    ProjectCreate,
    ProjectDetailResponse,
    ProjectListResponse,
    ProjectResponse,
    ProjectUpdate,
)

router = APIRouter()


@router.get("", response_model=ProjectListResponse)
async def list_projects(
    workspace_id: Optional[uuid.UUID] = Query(None, alias="workspaceId"),
    user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_session),
):
    projects = await project_service.list_projects(session, user.id, workspace_id)
    return ProjectListResponse(projects=projects)


@router.post("", response_model=ProjectResponse, status_code=201)
async def create_project(
    body: ProjectCreate,
    user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_session),
):
    project = await project_service.create_project(session, user.id, body)
    return ProjectResponse(project=project)


@router.get("/{projectId}", response_model=ProjectDetailResponse)
async def get_project(
    projectId: uuid.UUID,
    user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_session),
):
    project = await project_service.get_project_detail(session, user.id, projectId)
    return ProjectDetailResponse(project=project)


@router.patch("/{projectId}", response_model=ProjectResponse)
async def update_project(
    projectId: uuid.UUID,
    body: ProjectUpdate,
    user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_session),
):
    project = await project_service.update_project(session, user.id, projectId, body)
    return ProjectResponse(project=project)


@router.delete("/{projectId}", response_model=MessageResponse)
async def delete_project(
    projectId: uuid.UUID,
    user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_session),
):
    """Delete a project with its tasks, notes and comments."""
    await project_service.delete_project(session, user.id, projectId)
    return MessageResponse(message="Project deleted")
