"""
Notification endpoints.

GET   /api/v1/notifications   - Newest 20 notifications + unread count
PATCH /api/v1/notifications   - Mark one (notificationId) or all as read
"""

from __future__ import annotations

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.auth import get_current_user
from app.core.database import get_session
from app.models.user import User
from app.services import notifications as notification_service
from nebula_shared.schemas.notifications import (
    MarkReadRequest,
    NotificationListResponse,
    NotificationRead,
    SuccessResponse,
)

router = APIRouter()


@router.get("", response_model=NotificationListResponse)
async def list_notifications(
    user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_session),
):
    items, unread = await notification_service.list_notifications(session, user.id)
    return NotificationListResponse(
        notifications=[NotificationRead.model_validate(n) for n in items],
        unread_count=unread,
    )


@router.patch("", response_model=SuccessResponse)
async def mark_read(
    body: MarkReadRequest,
    user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_session),
):
    await notification_service.mark_read(session, user.id, body.notification_id)
    return SuccessResponse(success=True)
