"""
Notification service: the per-user inbox.

Notifications are written by other parts of the system; users can only
read theirs and mark them read.
"""

from __future__ import annotations

import uuid
from typing import Optional

import structlog
from sqlalchemy import func, update
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select

from app.models.notification import Notification

log = structlog.get_logger()

INBOX_LIMIT = 20


async def list_notifications(
    session: AsyncSession, user_id: uuid.UUID
) -> tuple[list[Notification], int]:
    """The 20 newest notifications and the exact unread count."""
    result = await session.execute(
        select(Notification)
        .where(Notification.user_id == user_id)
        .order_by(Notification.created_at.desc())
        .limit(INBOX_LIMIT)
    )
    items = list(result.scalars().all())

    unread = await session.execute(
        select(func.count())
        .select_from(Notification)
        .where(Notification.user_id == user_id, Notification.read.is_(False))
    )
    return items, unread.scalar_one()


async def mark_read(
    session: AsyncSession, user_id: uuid.UUID, notification_id: Optional[uuid.UUID] = None
) -> int:
    """Mark one notification, or all unread ones, as read. Returns rows changed.

    The single-id form is scoped to the caller; another user's id matches
    nothing and is not an error.
    """
    stmt = update(Notification).where(Notification.user_id == user_id)
    if notification_id is not None:
        stmt = stmt.where(Notification.id == notification_id)
    else:
        stmt = stmt.where(Notification.read.is_(False))

    result = await session.execute(
        stmt.values(read=True).execution_options(synchronize_session=False)
    )
    log.info(
        "notification.marked_read",
        user_id=str(user_id),
        notification_id=str(notification_id) if notification_id else None,
        count=result.rowcount,
    )
    return result.rowcount
