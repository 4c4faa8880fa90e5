"""
Ownership lookups shared by the project, task, note and comment services.

Tasks and notes reach their workspace through their project. The helpers
here resolve that chain and apply the membership guard where the current
scoping mode asks for it.
"""

from __future__ import annotations

import uuid

from fastapi import HTTPException
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.auth import check_access, strict_scoping_enabled
from app.models.project import Project


async def get_project_or_404(session: AsyncSession, project_id: uuid.UUID) -> Project:
    project = await session.get(Project, project_id)
    if not project:
        raise HTTPException(status_code=404, detail="Project not found")
    return project


async def guard_project_child(
    session: AsyncSession, actor_id: uuid.UUID, project_id: uuid.UUID
) -> Project:
    """Resolve the owning project of a task or note.

    Membership in the project's workspace is only required under strict
    scoping; the relaxed mode lets any signed-in user through.
    """
    project = await get_project_or_404(session, project_id)
    if strict_scoping_enabled():
        await check_access(session, actor_id, project.workspace_id)
    return project
