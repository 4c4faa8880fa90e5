"""
Task endpoints.

GET    /api/v1/tasks                - List tasks (projectId, workspaceId, status, assigneeId)
POST   /api/v1/tasks                - Create a task
GET    /api/v1/tasks/{taskId}       - Task with project and comments
PATCH  /api/v1/tasks/{taskId}       - Update a task
DELETE /api/v1/tasks/{taskId}       - Delete a task
"""

from __future__ import annotations

import uuid
from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.auth import get_current_user
from app.core.database import get_session
from app.models.user import User
from app.services import tasks as task_service
from nebula_shared.schemas.common import MessageResponse, TaskStatus
from nebula_shared.schemas.tasks import (
    TaskCreate,
    TaskDetailResponse,
    TaskListResponse,
    TaskResponse,
    TaskUpdate,
)

router = APIRouter()


@router.get("", response_model=TaskListResponse)
async def list_tasks(
    project_id: Optional[uuid.UUID] = Query(None, alias="projectId"),
    workspace_id: Optional[uuid.UUID] = Query(None, alias="workspaceId"),
    status: Optional[TaskStatus] = Query(None),
    assignee_id: Optional[uuid.UUID] = Query(None, alias="assigneeId"),
    user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_session),
):
    tasks = await task_service.list_tasks(
        session,
        user.id,
        project_id=project_id,
        workspace_id=workspace_id,
        status=status,
        assignee_id=assignee_id,
    )
    return TaskListResponse(tasks=tasks)


@router.post("", response_model=TaskResponse, status_code=201)
async def create_task(
    body: TaskCreate,
    user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_session),
):
    task = await task_service.create_task(session, user.id, body)
    return TaskResponse(task=task)


@router.get("/{taskId}", response_model=TaskDetailResponse)
async def get_task(
    taskId: uuid.UUID,
    user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_session),
):
    task = await task_service.get_task_detail(session, user.id, taskId)
    return TaskDetailResponse(task=task)


@router.patch("/{taskId}", response_model=TaskResponse)
async def update_task(
    taskId: uuid.UUID,
    body: TaskUpdate,
    user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_session),
):
    task = await task_service.update_task(session, user.id, taskId, body)
    return TaskResponse(task=task)


@router.delete("/{taskId}", response_model=MessageResponse)
async def delete_task(
    taskId: uuid.UUID,
    user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_session),
):
    await task_service.delete_task(session, user.id, taskId)
    return MessageResponse(message="Task deleted")
