"""
Task service layer: business logic for tasks.

Handles:
- Task CRUD under a project, with optional assignee
- Filtered listings (project, workspace, status, assignee)
- Enrichment of task rows with user summaries for API responses
"""

from __future__ import annotations

import uuid
from typing import Optional, Sequence

import structlog
from fastapi import HTTPException
from sqlalchemy import delete
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select

from app.core.auth import check_access, member_workspace_ids, strict_scoping_enabled
from app.models.comment import Comment
from app.models.project import Project
from app.models.task import Task
from app.services.access import get_project_or_404, guard_project_child
from app.services.activity import record_activity
from app.services.comments import enrich_comments
from app.services.users import load_summaries
from nebula_shared.schemas.activity import ActivityAction
from nebula_shared.schemas.common import ProjectSummary, TaskStatus
from nebula_shared.schemas.tasks import TaskCreate, TaskDetail, TaskRead, TaskUpdate

log = structlog.get_logger()

# Fields a PATCH may explicitly null out
CLEARABLE_FIELDS = {"description", "due_date", "assignee_id"}


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


async def get_task_or_404(session: AsyncSession, task_id: uuid.UUID) -> Task:
    task = await session.get(Task, task_id)
    if not task:
        raise HTTPException(status_code=404, detail="Task not found")
    return task


def _to_read(task: Task, users: dict) -> TaskRead:
    return TaskRead(
        id=task.id,
        title=task.title,
        description=task.description,
        status=task.status,
        priority=task.priority,
        due_date=task.due_date,
        project_id=task.project_id,
        created_by_id=task.created_by_id,
        assignee_id=task.assignee_id,
        assignee=users.get(task.assignee_id),
        created_by=users.get(task.created_by_id),
        created_at=task.created_at,
        updated_at=task.updated_at,
    )


async def enrich_tasks(session: AsyncSession, tasks: Sequence[Task]) -> list[TaskRead]:
    """Attach assignee and creator summaries, one user query for the batch."""
    users = await load_summaries(
        session, [t.assignee_id for t in tasks] + [t.created_by_id for t in tasks]
    )
    return [_to_read(t, users) for t in tasks]


async def enrich_task(session: AsyncSession, task: Task) -> TaskRead:
    return (await enrich_tasks(session, [task]))[0]


# ---------------------------------------------------------------------------
# Queries
# ---------------------------------------------------------------------------


async def list_tasks(
    session: AsyncSession,
    actor_id: uuid.UUID,
    *,
    project_id: Optional[uuid.UUID] = None,
    workspace_id: Optional[uuid.UUID] = None,
    status: Optional[TaskStatus] = None,
    assignee_id: Optional[uuid.UUID] = None,
) -> list[TaskRead]:
    stmt = select(Task)

    if workspace_id is not None:
        await check_access(session, actor_id, workspace_id)
        stmt = stmt.join(Project, Project.id == Task.project_id).where(
            Project.workspace_id == workspace_id
        )
    elif strict_scoping_enabled():
        if project_id is not None:
            project = await get_project_or_404(session, project_id)
            await check_access(session, actor_id, project.workspace_id)
        else:
            visible = await member_workspace_ids(session, actor_id)
            stmt = stmt.join(Project, Project.id == Task.project_id).where(
                Project.workspace_id.in_(visible)
            )

    if project_id is not None:
        stmt = stmt.where(Task.project_id == project_id)
    if status is not None:
        stmt = stmt.where(Task.status == status.value)
    if assignee_id is not None:
        stmt = stmt.where(Task.assignee_id == assignee_id)

    result = await session.execute(stmt.order_by(Task.created_at.desc()))
    return await enrich_tasks(session, result.scalars().all())


async def get_task_detail(
    session: AsyncSession, actor_id: uuid.UUID, task_id: uuid.UUID
) -> TaskDetail:
    task = await get_task_or_404(session, task_id)
    project = await guard_project_child(session, actor_id, task.project_id)

    result = await session.execute(
        select(Comment).where(Comment.task_id == task.id).order_by(Comment.created_at.desc())
    )
    comments = await enrich_comments(session, result.scalars().all())
    base = await enrich_task(session, task)
    return TaskDetail(
        **base.model_dump(),
        project=ProjectSummary(id=project.id, name=project.name, workspace_id=project.workspace_id),
        comments=comments,
    )


# ---------------------------------------------------------------------------
# CRUD
# ---------------------------------------------------------------------------


async def create_task(
    session: AsyncSession,
    actor_id: uuid.UUID,
    task_in: TaskCreate,
) -> TaskRead:
    project = await get_project_or_404(session, task_in.project_id)
    await check_access(session, actor_id, project.workspace_id)

    task = Task(
        project_id=project.id,
        title=task_in.title,
        description=task_in.description,
        status=task_in.status.value,
        priority=task_in.priority.value,
        due_date=task_in.due_date,
        created_by_id=actor_id,
        assignee_id=task_in.assignee_id,
    )
    session.add(task)
    await session.commit()

    log.info("task.created", task_id=str(task.id), project_id=str(project.id))
    await record_activity(
        session,
        project.workspace_id,
        actor_id,
        ActivityAction.CREATED,
        "task",
        task.id,
        {"title": task.title, "projectId": str(project.id)},
    )
    return await enrich_task(session, task)


async def update_task(
    session: AsyncSession,
    actor_id: uuid.UUID,
    task_id: uuid.UUID,
    task_in: TaskUpdate,
) -> TaskRead:
    task = await get_task_or_404(session, task_id)
    project = await guard_project_child(session, actor_id, task.project_id)

    data = task_in.model_dump(exclude_unset=True)
    for key, value in data.items():
        if value is None and key not in CLEARABLE_FIELDS:
            continue
        setattr(task, key, getattr(value, "value", value))

    session.add(task)
    await session.commit()

    log.info("task.updated", task_id=str(task.id), fields=sorted(data))
    await record_activity(
        session,
        project.workspace_id,
        actor_id,
        ActivityAction.UPDATED,
        "task",
        task.id,
        {"title": task.title, "fields": sorted(data)},
    )
    return await enrich_task(session, task)


async def delete_task(
    session: AsyncSession, actor_id: uuid.UUID, task_id: uuid.UUID
) -> None:
    task = await get_task_or_404(session, task_id)
    project = await guard_project_child(session, actor_id, task.project_id)
    title = task.title

    await session.execute(delete(Comment).where(Comment.task_id == task.id))
    await session.delete(task)
    await session.commit()

    log.info("task.deleted", task_id=str(task_id), project_id=str(project.id))
    await record_activity(
        session,
        project.workspace_id,
        actor_id,
        ActivityAction.DELETED,
        "task",
        task_id,
        {"title": title},
    )
