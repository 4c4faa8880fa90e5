"""
Note service: rich-text notes attached to a project.
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
from app.models.note import Note
from app.models.project import Project
from app.services.access import get_project_or_404, guard_project_child
from app.services.activity import record_activity
from app.services.users import load_summaries
from nebula_shared.schemas.activity import ActivityAction
from nebula_shared.schemas.common import ProjectSummary
from nebula_shared.schemas.notes import NoteCreate, NoteRead, NoteUpdate

log = structlog.get_logger()


async def get_note_or_404(session: AsyncSession, note_id: uuid.UUID) -> Note:
    note = await session.get(Note, note_id)
    if not note:
        raise HTTPException(status_code=404, detail="Note not found")
    return note


async def enrich_notes(
    session: AsyncSession,
    notes: Sequence[Note],
    projects: Optional[dict[uuid.UUID, Project]] = None,
) -> list[NoteRead]:
    authors = await load_summaries(session, (n.created_by_id for n in notes))
    projects = projects or {}
    reads = []
    for n in notes:
        project = projects.get(n.project_id)
        reads.append(
            NoteRead(
                id=n.id,
                title=n.title,
                content=n.content,
                project_id=n.project_id,
                created_by_id=n.created_by_id,
                created_by=authors.get(n.created_by_id),
                project=(
                    ProjectSummary(id=project.id, name=project.name, workspace_id=project.workspace_id)
                    if project
                    else None
                ),
                created_at=n.created_at,
                updated_at=n.updated_at,
            )
        )
    return reads


async def list_notes(
    session: AsyncSession,
    actor_id: uuid.UUID,
    *,
    project_id: Optional[uuid.UUID] = None,
    workspace_id: Optional[uuid.UUID] = None,
) -> list[NoteRead]:
    """Notes newest first, each with its project summary."""
    stmt = select(Note, Project).join(Project, Project.id == Note.project_id)

    if workspace_id is not None:
        await check_access(session, actor_id, workspace_id)
        stmt = stmt.where(Project.workspace_id == workspace_id)
    elif strict_scoping_enabled():
        if project_id is not None:
            project = await get_project_or_404(session, project_id)
            await check_access(session, actor_id, project.workspace_id)
        else:
            visible = await member_workspace_ids(session, actor_id)
            stmt = stmt.where(Project.workspace_id.in_(visible))

    if project_id is not None:
        stmt = stmt.where(Note.project_id == project_id)

    result = await session.execute(stmt.order_by(Note.created_at.desc()))
    rows = result.all()
    return await enrich_notes(
        session,
        [note for note, _ in rows],
        {project.id: project for _, project in rows},
    )


async def get_note(session: AsyncSession, actor_id: uuid.UUID, note_id: uuid.UUID) -> NoteRead:
    note = await get_note_or_404(session, note_id)
    project = await guard_project_child(session, actor_id, note.project_id)
    return (await enrich_notes(session, [note], {project.id: project}))[0]


async def create_note(session: AsyncSession, actor_id: uuid.UUID, req: NoteCreate) -> NoteRead:
    project = await get_project_or_404(session, req.project_id)
    await check_access(session, actor_id, project.workspace_id)

    note = Note(
        project_id=project.id,
        title=req.title,
        content=req.content,
        created_by_id=actor_id,
    )
    session.add(note)
    await session.commit()

    log.info("note.created", note_id=str(note.id), project_id=str(project.id))
    await record_activity(
        session,
        project.workspace_id,
        actor_id,
        ActivityAction.CREATED,
        "note",
        note.id,
        {"title": note.title, "projectId": str(project.id)},
    )
    return (await enrich_notes(session, [note], {project.id: project}))[0]


async def update_note(
    session: AsyncSession, actor_id: uuid.UUID, note_id: uuid.UUID, req: NoteUpdate
) -> NoteRead:
    note = await get_note_or_404(session, note_id)
    project = await guard_project_child(session, actor_id, note.project_id)

    data = req.model_dump(exclude_unset=True, exclude_none=True)
    for key, value in data.items():
        setattr(note, key, value)
    session.add(note)
    await session.commit()

    log.info("note.updated", note_id=str(note.id), fields=sorted(data))
    await record_activity(
        session,
        project.workspace_id,
        actor_id,
        ActivityAction.UPDATED,
        "note",
        note.id,
        {"title": note.title, "fields": sorted(data)},
    )
    return (await enrich_notes(session, [note], {project.id: project}))[0]


async def delete_note(session: AsyncSession, actor_id: uuid.UUID, note_id: uuid.UUID) -> None:
    note = await get_note_or_404(session, note_id)
    project = await guard_project_child(session, actor_id, note.project_id)
    title = note.title

    await session.execute(delete(Comment).where(Comment.note_id == note.id))
    await session.delete(note)
    await session.commit()

    log.info("note.deleted", note_id=str(note_id), project_id=str(project.id))
    await record_activity(
        session,
        project.workspace_id,
        actor_id,
        ActivityAction.DELETED,
        "note",
        note_id,
        {"title": title},
    )
