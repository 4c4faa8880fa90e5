"""
User service: profile updates and batched user-summary lookups for responses.
"""

from __future__ import annotations

import uuid
from typing import Iterable, Optional

import structlog
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select

from app.models.user import User
from nebula_shared.schemas.common import UserSummary
from nebula_shared.schemas.users import ProfileUpdateRequest

log = structlog.get_logger()


def summarize(user: Optional[User]) -> Optional[UserSummary]:
    if user is None:
        return None
    return UserSummary(id=user.id, name=user.name, image=user.image)


async def get_user_by_email(session: AsyncSession, email: str) -> Optional[User]:
    result = await session.execute(select(User).where(User.email == email.lower()))
    return result.scalar_one_or_none()


async def load_users(
    session: AsyncSession, user_ids: Iterable[Optional[uuid.UUID]]
) -> dict[uuid.UUID, User]:
    """Fetch every referenced user in one query, keyed by id."""
    ids = {uid for uid in user_ids if uid is not None}
    if not ids:
        return {}
    result = await session.execute(select(User).where(User.id.in_(ids)))
    return {user.id: user for user in result.scalars().all()}


async def load_summaries(
    session: AsyncSession, user_ids: Iterable[Optional[uuid.UUID]]
) -> dict[uuid.UUID, UserSummary]:
    users = await load_users(session, user_ids)
    return {uid: summarize(user) for uid, user in users.items()}


async def update_profile(
    session: AsyncSession, user: User, req: ProfileUpdateRequest
) -> User:
    """Update the caller's display name and avatar."""
    user.name = req.name
    if req.image is not None:
        user.image = req.image
    session.add(user)
    await session.commit()
    log.info("user.profile_updated", user_id=str(user.id))
    return user
