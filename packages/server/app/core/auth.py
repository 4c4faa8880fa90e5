"""
Authentication and workspace authorization for Nebula.

Supports:
- Email/Password credentials (bcrypt) and Google OAuth identities
- JWT sessions (cookie for browsers, Bearer header for API clients)
- Redis revocation list checked on every authenticated request
- Membership and role guards keyed by (user, workspace)
"""

from __future__ import annotations

import secrets
import uuid
from datetime import datetime, timedelta, timezone
from typing import Iterable, Optional

import bcrypt
import jwt
import structlog
from fastapi import Depends, HTTPException, Request
from fastapi.security import APIKeyHeader
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select

from app.core.config import get_settings
from app.core.database import get_session
from app.core.redis import is_jwt_revoked
from app.models.user import User
from app.models.workspace_member import WorkspaceMember

log = structlog.get_logger()
settings = get_settings()

SESSION_COOKIE = "nebula_session"
CSRF_COOKIE = "nebula_csrf"

authorization_header = APIKeyHeader(name="Authorization", auto_error=False)

# ---------------------------------------------------------------------------
# Password hashing
# ---------------------------------------------------------------------------

def hash_password(password: str) -> str:
    """Hash a password using bcrypt with the configured cost factor."""
    return bcrypt.hashpw(password.encode(), bcrypt.gensalt(rounds=settings.bcrypt_rounds)).decode()


def verify_password(password: str, hashed: str) -> bool:
    """Verify a password against a bcrypt hash."""
    return bcrypt.checkpw(password.encode(), hashed.encode())


# ---------------------------------------------------------------------------
# JWT
# ---------------------------------------------------------------------------

def create_jwt(
    user_id: uuid.UUID,
    *,
    email: Optional[str] = None,
    name: Optional[str] = None,
    expires_delta: timedelta | None = None,
) -> tuple[str, str]:
    """Create a signed session JWT. Returns (token, jti)."""
    jti = str(uuid.uuid4())
    now = datetime.now(timezone.utc)
    exp = now + (expires_delta or timedelta(minutes=settings.jwt_expire_minutes))
    payload = {
        "sub": str(user_id),
        "email": email,
        "name": name,
        "iat": now,
        "exp": exp,
        "jti": jti,
    }
    token = jwt.encode(payload, settings.secret_key, algorithm=settings.jwt_algorithm)
    return token, jti


def decode_jwt(token: str) -> dict:
    """Decode and verify a JWT. Raises jwt.PyJWTError on failure."""
    return jwt.decode(token, settings.secret_key, algorithms=[settings.jwt_algorithm])


def seconds_until_expiry(payload: dict) -> int:
    exp = payload.get("exp")
    if not exp:
        return settings.jwt_expire_minutes * 60
    return int(exp - datetime.now(timezone.utc).timestamp())


def generate_csrf_token() -> str:
    """Generate a random CSRF token."""
    return secrets.token_urlsafe(32)


def extract_token(request: Request, authorization: Optional[str] = None) -> Optional[str]:
    """Return the session token from the Bearer header, falling back to the cookie."""
    if authorization and authorization.startswith("Bearer "):
        return authorization[7:].strip() or None
    return request.cookies.get(SESSION_COOKIE)


# ---------------------------------------------------------------------------
# Authentication dependencies
# ---------------------------------------------------------------------------

async def get_session_payload(
    request: Request,
    authorization: Optional[str] = Depends(authorization_header),
) -> dict:
    """Resolve and verify the session JWT, rejecting revoked tokens."""
    token = extract_token(request, authorization)
    if not token:
        raise HTTPException(status_code=401, detail="Unauthorized")

    try:
        payload = decode_jwt(token)
    except jwt.PyJWTError:
        raise HTTPException(status_code=401, detail="Unauthorized")

    jti = payload.get("jti")
    if jti and await is_jwt_revoked(jti):
        raise HTTPException(status_code=401, detail="Unauthorized")
    return payload


async def get_current_user(
    payload: dict = Depends(get_session_payload),
    session: AsyncSession = Depends(get_session),
) -> User:
    """Main authentication dependency: the user behind the session."""
    try:
        user_id = uuid.UUID(payload["sub"])
    except (KeyError, ValueError):
        raise HTTPException(status_code=401, detail="Unauthorized")

    user = await session.get(User, user_id)
    if not user:
        raise HTTPException(status_code=401, detail="Unauthorized")
    return user


# ---------------------------------------------------------------------------
# Workspace authorization
# ---------------------------------------------------------------------------

async def check_access(
    session: AsyncSession,
    actor_id: uuid.UUID,
    workspace_id: uuid.UUID,
) -> WorkspaceMember:
    """Return the actor's membership in exactly this workspace, else 403."""
    result = await session.execute(
        select(WorkspaceMember).where(
            WorkspaceMember.user_id == actor_id,
            WorkspaceMember.workspace_id == workspace_id,
        )
    )
    membership = result.scalar_one_or_none()
    if not membership:
        log.info("access.denied", user_id=str(actor_id), workspace_id=str(workspace_id))
        raise HTTPException(status_code=403, detail="Access denied")
    return membership


async def check_role(
    session: AsyncSession,
    actor_id: uuid.UUID,
    workspace_id: uuid.UUID,
    allowed_roles: Iterable[str],
    detail: str = "Access denied",
) -> WorkspaceMember:
    """Membership check that also requires one of ``allowed_roles``."""
    membership = await check_access(session, actor_id, workspace_id)
    allowed = {getattr(r, "value", r) for r in allowed_roles}
    if membership.role not in allowed:
        log.info(
            "access.role_denied",
            user_id=str(actor_id),
            workspace_id=str(workspace_id),
            role=membership.role,
        )
        raise HTTPException(status_code=403, detail=detail)
    return membership


def strict_scoping_enabled() -> bool:
    """Whether by-id task/note access, listings and comments require membership."""
    return get_settings().strict_scoping


async def member_workspace_ids(session: AsyncSession, user_id: uuid.UUID) -> list[uuid.UUID]:
    result = await session.execute(
        select(WorkspaceMember.workspace_id).where(WorkspaceMember.user_id == user_id)
    )
    return list(result.scalars().all())
