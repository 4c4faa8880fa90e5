"""
Project service: workspace-scoped project CRUD.

Deleting a project removes its tasks and notes along with every comment
attached to them.
"""

from __future__ import annotations

import uuid
from typing import Optional

import structlog
from fastapi import HTTPException
from sqlalchemy import delete, func, or_
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select

from app.core.auth import check_access, check_role
from app.models.comment import Comment
from app.models.note import Note
from app.models.project import Project
from app.models.task import Task
from app.models.workspace import Workspace
from app.services.access import get_project_or_404
from app.services.activity import record_activity
from app.services.notes import enrich_notes
from app.services.tasks import enrich_tasks
from app.services.users import load_summaries
from nebula_shared.schemas.activity import ActivityAction
from nebula_shared.schemas.common import MANAGER_ROLES
from nebula_shared.schemas.projects import ProjectCreate, ProjectDetail, ProjectRead, ProjectUpdate
from nebula_shared.schemas.workspaces import WorkspaceRead

log = structlog.get_logger()


def _to_read(project: Project, creators: dict, task_count: int = 0) -> ProjectRead:
    return ProjectRead(
        id=project.id,
        name=project.name,
        description=project.description,
        workspace_id=project.workspace_id,
        created_by_id=project.created_by_id,
        created_by=creators.get(project.created_by_id),
        task_count=task_count,
        created_at=project.created_at,
        updated_at=project.updated_at,
    )


async def _task_count(session: AsyncSession, project_id: uuid.UUID) -> int:
    result = await session.execute(
        select(func.count()).select_from(Task).where(Task.project_id == project_id)
    )
    return result.scalar_one()


async def list_projects(
    session: AsyncSession, actor_id: uuid.UUID, workspace_id: Optional[uuid.UUID]
) -> list[ProjectRead]:
    """Projects in one workspace, newest first, with creator and task count."""
    if workspace_id is None:
        raise HTTPException(status_code=400, detail="Workspace ID required")
    await check_access(session, actor_id, workspace_id)

    task_counts = (
        select(Task.project_id, func.count(Task.id).label("task_count"))
        .group_by(Task.project_id)
        .subquery()
    )
    result = await session.execute(
        select(Project, func.coalesce(task_counts.c.task_count, 0))
        .outerjoin(task_counts, task_counts.c.project_id == Project.id)
        .where(Project.workspace_id == workspace_id)
        .order_by(Project.created_at.desc())
    )
    rows = result.all()
    creators = await load_summaries(session, (p.created_by_id for p, _ in rows))
    return [_to_read(project, creators, count) for project, count in rows]


async def create_project(
    session: AsyncSession, actor_id: uuid.UUID, req: ProjectCreate
) -> ProjectRead:
    await check_access(session, actor_id, req.workspace_id)

    project = Project(
        name=req.name,
        description=req.description,
        workspace_id=req.workspace_id,
        created_by_id=actor_id,
    )
    session.add(project)
    await session.commit()

    log.info("project.created", project_id=str(project.id), workspace_id=str(req.workspace_id))
    await record_activity(
        session,
        project.workspace_id,
        actor_id,
        ActivityAction.CREATED,
        "project",
        project.id,
        {"name": project.name},
    )
    creators = await load_summaries(session, [actor_id])
    return _to_read(project, creators)


async def get_project_detail(
    session: AsyncSession, actor_id: uuid.UUID, project_id: uuid.UUID
) -> ProjectDetail:
    """The project with its workspace, tasks and notes. Fetched before the access check."""
    project = await get_project_or_404(session, project_id)
    await check_access(session, actor_id, project.workspace_id)

    workspace = await session.get(Workspace, project.workspace_id)
    tasks_result = await session.execute(
        select(Task).where(Task.project_id == project.id).order_by(Task.created_at.desc())
    )
    tasks = await enrich_tasks(session, tasks_result.scalars().all())
    notes_result = await session.execute(
        select(Note).where(Note.project_id == project.id).order_by(Note.created_at.desc())
    )
    notes = await enrich_notes(session, notes_result.scalars().all(), {project.id: project})

    creators = await load_summaries(session, [project.created_by_id])
    base = _to_read(project, creators, len(tasks))
    return ProjectDetail(
        **base.model_dump(),
        workspace=WorkspaceRead(id=workspace.id, name=workspace.name, slug=workspace.slug),
        tasks=tasks,
        notes=notes,
    )


async def update_project(
    session: AsyncSession, actor_id: uuid.UUID, project_id: uuid.UUID, req: ProjectUpdate
) -> ProjectRead:
    project = await get_project_or_404(session, project_id)
    await check_access(session, actor_id, project.workspace_id)

    data = req.model_dump(exclude_unset=True)
    if data.get("name") is None:
        data.pop("name", None)
    for key, value in data.items():
        setattr(project, key, value)
    session.add(project)
    await session.commit()

    log.info("project.updated", project_id=str(project.id), fields=sorted(data))
    await record_activity(
        session,
        project.workspace_id,
        actor_id,
        ActivityAction.UPDATED,
        "project",
        project.id,
        {"name": project.name, "fields": sorted(data)},
    )
    creators = await load_summaries(session, [project.created_by_id])
    return _to_read(project, creators, await _task_count(session, project.id))


async def delete_project(
    session: AsyncSession, actor_id: uuid.UUID, project_id: uuid.UUID
) -> None:
    """Delete a project and everything under it. OWNER or ADMIN only."""
    project = await get_project_or_404(session, project_id)
    await check_role(
        session,
        actor_id,
        project.workspace_id,
        MANAGER_ROLES,
        detail="Only workspace owners/admins can delete projects",
    )
    workspace_id, name = project.workspace_id, project.name

    task_ids = select(Task.id).where(Task.project_id == project.id)
    note_ids = select(Note.id).where(Note.project_id == project.id)
    await session.execute(
        delete(Comment).where(or_(Comment.task_id.in_(task_ids), Comment.note_id.in_(note_ids)))
    )
    await session.execute(delete(Task).where(Task.project_id == project.id))
    await session.execute(delete(Note).where(Note.project_id == project.id))
    await session.delete(project)
    await session.commit()

    log.info("project.deleted", project_id=str(project_id), workspace_id=str(workspace_id))
    await record_activity(
        session,
        workspace_id,
        actor_id,
        ActivityAction.DELETED,
        "project",
        project_id,
        {"name": name},
    )
