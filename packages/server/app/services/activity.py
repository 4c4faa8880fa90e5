"""
Activity service: the append-only audit trail of workspace changes.

Entries are written after the change they describe has committed, on a
session of their own. A failed write is logged and dropped; it never fails
the request that triggered it.
"""

from __future__ import annotations

import uuid
from typing import Any, Optional

import structlog
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select

from app.core.auth import check_access, member_workspace_ids
from app.models.activity_log import ActivityLog
from app.services.users import load_summaries
from nebula_shared.schemas.activity import ActivityAction, ActivityRead

log = structlog.get_logger()

FEED_LIMIT = 20


async def record_activity(
    session: AsyncSession,
    workspace_id: uuid.UUID,
    actor_id: uuid.UUID,
    action: ActivityAction | str,
    entity_type: str,
    entity_id: uuid.UUID,
    metadata: Optional[dict[str, Any]] = None,
) -> None:
    """Append one activity entry. Fire-and-forget."""
    action_value = getattr(action, "value", action)
    try:
        async with AsyncSession(session.bind, expire_on_commit=False) as activity_session:
            activity_session.add(
                ActivityLog(
                    workspace_id=workspace_id,
                    user_id=actor_id,
                    action=action_value,
                    entity_type=entity_type,
                    entity_id=entity_id,
                    details=metadata or {},
                )
            )
            await activity_session.commit()
    except Exception:
        log.exception(
            "activity.record_failed",
            workspace_id=str(workspace_id),
            actor_id=str(actor_id),
            action=action_value,
            entity_type=entity_type,
            entity_id=str(entity_id),
        )


async def list_activity(
    session: AsyncSession,
    actor_id: uuid.UUID,
    workspace_id: Optional[uuid.UUID] = None,
) -> list[ActivityRead]:
    """The newest entries visible to the actor, optionally for one workspace."""
    if workspace_id is not None:
        await check_access(session, actor_id, workspace_id)
        workspace_ids = [workspace_id]
    else:
        workspace_ids = await member_workspace_ids(session, actor_id)
        if not workspace_ids:
            return []

    result = await session.execute(
        select(ActivityLog)
        .where(ActivityLog.workspace_id.in_(workspace_ids))
        .order_by(ActivityLog.created_at.desc())
        .limit(FEED_LIMIT)
    )
    entries = result.scalars().all()
    actors = await load_summaries(session, (e.user_id for e in entries))
    return [
        ActivityRead(
            id=e.id,
            workspace_id=e.workspace_id,
            action=e.action,
            entity_type=e.entity_type,
            entity_id=e.entity_id,
            metadata=e.details or {},
            actor=actors.get(e.user_id),
            created_at=e.created_at,
        )
        for e in entries
    ]
