from datetime import datetime
from typing import List, Optional
from uuid import UUID

from .common import APIModel


class NotificationRead(APIModel):
    id: UUID
    title: str
    message: Optional[str] = None
    type: str
    read: bool
    created_at: datetime


class NotificationListResponse(APIModel):
    notifications: List[NotificationRead]
    unread_count: int


class MarkReadRequest(APIModel):
    """Omit ``notificationId`` to mark every unread notification read."""
    notification_id: Optional[UUID] = None


class SuccessResponse(APIModel):
    success: bool = True
