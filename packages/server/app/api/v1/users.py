"""
User endpoints.

PUT /api/v1/users/profile   - Update the caller's name and avatar
"""

from __future__ import annotations

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.auth import get_current_user
from app.core.database import get_session
from app.models.user import User
from app.services import users as user_service
from nebula_shared.schemas.users import ProfileUpdateRequest, SessionResponse, UserProfile

router = APIRouter()


@router.put("/profile", response_model=SessionResponse)
async def update_profile(
    body: ProfileUpdateRequest,
    user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_session),
):
    user = await user_service.update_profile(session, user, body)
    return SessionResponse(
        user=UserProfile(id=user.id, name=user.name, email=user.email, image=user.image)
    )
