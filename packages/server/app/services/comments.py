"""
Comment service. A comment targets exactly one task or one note.
"""

from __future__ import annotations

import uuid
from typing import Optional, Sequence

import structlog
from fastapi import HTTPException
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select

from app.core.auth import strict_scoping_enabled
from app.models.comment import Comment
from app.models.note import Note
from app.models.task import Task
from app.services.access import guard_project_child
from app.services.activity import record_activity
from app.services.users import load_summaries
from nebula_shared.schemas.activity import ActivityAction
from nebula_shared.schemas.comments import CommentCreate, CommentRead, TaskTarget

log = structlog.get_logger()


async def enrich_comments(session: AsyncSession, comments: Sequence[Comment]) -> list[CommentRead]:
    authors = await load_summaries(session, (c.author_id for c in comments))
    return [
        CommentRead(
            id=c.id,
            body=c.body,
            author_id=c.author_id,
            task_id=c.task_id,
            note_id=c.note_id,
            author=authors.get(c.author_id),
            created_at=c.created_at,
        )
        for c in comments
    ]


async def _resolve_target(session: AsyncSession, kind: str, target_id: uuid.UUID) -> Task | Note:
    model = Task if kind == "task" else Note
    entity = await session.get(model, target_id)
    if not entity:
        raise HTTPException(status_code=404, detail=f"{kind.capitalize()} not found")
    return entity


async def create_comment(
    session: AsyncSession, actor_id: uuid.UUID, req: CommentCreate
) -> CommentRead:
    """Post a comment on a task or note.

    Only a signed-in session is required; membership of the target's
    workspace is checked under strict scoping alone.
    """
    target = req.target
    entity = await _resolve_target(session, target.kind, target.id)
    project = await guard_project_child(session, actor_id, entity.project_id)

    comment = Comment(
        body=req.body,
        author_id=actor_id,
        task_id=target.id if isinstance(target, TaskTarget) else None,
        note_id=None if isinstance(target, TaskTarget) else target.id,
    )
    session.add(comment)
    await session.commit()

    log.info("comment.created", comment_id=str(comment.id), target=target.kind, target_id=str(target.id))
    await record_activity(
        session,
        project.workspace_id,
        actor_id,
        ActivityAction.COMMENTED,
        target.kind,
        target.id,
        {"commentId": str(comment.id)},
    )
    return (await enrich_comments(session, [comment]))[0]


async def list_comments(
    session: AsyncSession,
    actor_id: uuid.UUID,
    task_id: Optional[uuid.UUID] = None,
    note_id: Optional[uuid.UUID] = None,
) -> list[CommentRead]:
    stmt = select(Comment)
    if strict_scoping_enabled():
        if task_id is None and note_id is None:
            raise HTTPException(status_code=400, detail="Either taskId or noteId is required")
        for kind, target_id in (("task", task_id), ("note", note_id)):
            if target_id is not None:
                entity = await _resolve_target(session, kind, target_id)
                await guard_project_child(session, actor_id, entity.project_id)

    if task_id is not None:
        stmt = stmt.where(Comment.task_id == task_id)
    if note_id is not None:
        stmt = stmt.where(Comment.note_id == note_id)

    result = await session.execute(stmt.order_by(Comment.created_at.desc()))
    return await enrich_comments(session, result.scalars().all())
