"""
Activity feed endpoint.

GET /api/v1/activity[?workspaceId=]   - Newest 20 entries across the caller's workspaces
"""

from __future__ import annotations

import uuid
from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.auth import get_current_user
from app.core.database import get_session
from app.models.user import User
from app.services import activity as activity_service
from nebula_shared.schemas.activity import ActivityListResponse

router = APIRouter()


@router.get("", response_model=ActivityListResponse)
async def list_activity(
    workspace_id: Optional[uuid.UUID] = Query(None, alias="workspaceId"),
    user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_session),
):
    activities = await activity_service.list_activity(session, user.id, workspace_id)
    return ActivityListResponse(activities=activities)
