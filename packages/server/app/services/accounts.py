"""
Account service: credential registration, login and OAuth sign-in.

Every path that creates a user also provisions the default workspace, and
does so inside the same transaction as the user row.
"""

from __future__ import annotations

import structlog
from fastapi import HTTPException
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select

from app.core.auth import hash_password, verify_password
from app.core.oauth import OAuthProfile
from app.models.user import User
from app.services.users import get_user_by_email
from app.services.workspaces import count_user_workspaces, provision_default_workspace
from nebula_shared.schemas.users import LoginRequest, RegisterRequest

log = structlog.get_logger()


async def register_user(session: AsyncSession, req: RegisterRequest) -> User:
    """Create a credential user with their default workspace, atomically."""
    if await get_user_by_email(session, req.email):
        raise HTTPException(status_code=400, detail="Email already registered")

    try:
        user = User(
            name=req.name,
            email=req.email.lower(),
            password_hash=hash_password(req.password),
        )
        session.add(user)
        await session.flush()

        await provision_default_workspace(session, user)
        await session.commit()
    except IntegrityError:
        await session.rollback()
        log.warning("user.registration_conflict", email=req.email)
        raise HTTPException(status_code=400, detail="Email already registered")
    except Exception:
        await session.rollback()
        log.warning("user.registration_failed", email=req.email)
        raise

    log.info("user.registered", user_id=str(user.id), email=user.email)
    return user


async def authenticate(session: AsyncSession, req: LoginRequest) -> User:
    user = await get_user_by_email(session, req.email)
    if not user or not user.password_hash:
        log.warning("auth.login_failure", email=req.email, reason="unknown_user")
        raise HTTPException(status_code=401, detail="Invalid email or password")

    if not verify_password(req.password, user.password_hash):
        log.warning("auth.login_failure", email=req.email, reason="bad_password")
        raise HTTPException(status_code=401, detail="Invalid email or password")

    log.info("auth.login_success", user_id=str(user.id))
    return user


async def oauth_sign_in(session: AsyncSession, profile: OAuthProfile) -> User:
    """Find, link or create the user for an OAuth identity.

    A default workspace is provisioned only while the user belongs to no
    workspace at all, so repeated sign-ins never create a second one.
    An existing account is linked by email only when the provider has
    verified that address.
    """
    result = await session.execute(
        select(User).where(
            User.oauth_provider == profile.provider,
            User.oauth_subject == profile.subject,
        )
    )
    user = result.scalar_one_or_none()

    try:
        if user is None:
            user = await get_user_by_email(session, profile.email)
            if user is not None and not profile.email_verified:
                log.warning(
                    "auth.oauth_link_refused", user_id=str(user.id), provider=profile.provider
                )
                raise HTTPException(
                    status_code=400, detail="Account exists; sign in with your password"
                )
            if user is not None:
                user.oauth_provider = profile.provider
                user.oauth_subject = profile.subject
                log.info("auth.oauth_linked", user_id=str(user.id), provider=profile.provider)
            else:
                user = User(
                    name=profile.name,
                    email=profile.email.lower(),
                    image=profile.image,
                    oauth_provider=profile.provider,
                    oauth_subject=profile.subject,
                )
                log.info("auth.oauth_user_created", email=user.email, provider=profile.provider)
            if user.image is None and profile.image:
                user.image = profile.image
            session.add(user)
            await session.flush()

        if await count_user_workspaces(session, user.id) == 0:
            await provision_default_workspace(session, user)
        await session.commit()
    except Exception:
        await session.rollback()
        raise

    log.info("auth.oauth_sign_in", user_id=str(user.id), provider=profile.provider)
    return user
