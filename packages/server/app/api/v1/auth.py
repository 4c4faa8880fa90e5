"""
Authentication endpoints.

POST /api/v1/auth/register              - Email/password registration
POST /api/v1/auth/login                 - Email/password login
GET  /api/v1/auth/login/oauth           - Start an OAuth login (Google)
GET  /api/v1/auth/callback/{provider}   - OAuth callback, issues the session
GET  /api/v1/auth/session               - Current session user
POST /api/v1/auth/logout                - Revoke the session
"""

from __future__ import annotations

import secrets

import jwt
import structlog
from fastapi import APIRouter, Depends, HTTPException, Query, Request, Response
from fastapi.responses import RedirectResponse
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.auth import (
    CSRF_COOKIE,
    SESSION_COOKIE,
    authorization_header,
    create_jwt,
    decode_jwt,
    extract_token,
    generate_csrf_token,
    get_current_user,
    seconds_until_expiry,
)
from app.core.config import get_settings
from app.core.database import get_session
from app.core.oauth import build_authorization_url, exchange_code
from app.core.redis import revoke_jwt
from app.models.user import User
from app.services import accounts as account_service
from nebula_shared.schemas.common import MessageResponse
from nebula_shared.schemas.users import (
    LoginRequest,
    OAuthLoginResponse,
    RegisterRequest,
    RegisterResponse,
    SessionResponse,
    UserProfile,
)

log = structlog.get_logger()
settings = get_settings()
router = APIRouter()

OAUTH_STATE_COOKIE = "nebula_oauth_state"

# Cookie config
COOKIE_KWARGS = {
    "httponly": True,
    "secure": not settings.debug,
    "samesite": "lax",
    "path": "/",
    "max_age": settings.jwt_expire_minutes * 60,
}


def _issue_session(response: Response, user: User) -> str:
    """Sign a session JWT for the user and set the session + CSRF cookies."""
    token, _jti = create_jwt(user.id, email=user.email, name=user.name)
    response.set_cookie(key=SESSION_COOKIE, value=token, **COOKIE_KWARGS)
    response.set_cookie(
        key=CSRF_COOKIE,
        value=generate_csrf_token(),
        httponly=False,  # JS must read this
        secure=not settings.debug,
        samesite="lax",
        path="/",
        max_age=settings.jwt_expire_minutes * 60,
    )
    return token


def _profile(user: User) -> UserProfile:
    return UserProfile(id=user.id, name=user.name, email=user.email, image=user.image)


# ---------------------------------------------------------------------------
# Email/Password
# ---------------------------------------------------------------------------

@router.post("/register", response_model=RegisterResponse, status_code=201)
async def register(body: RegisterRequest, session: AsyncSession = Depends(get_session)):
    """Register with email/password. Provisions the user's default workspace."""
    user = await account_service.register_user(session, body)
    return RegisterResponse(message="User created successfully", user_id=user.id)


@router.post("/login", response_model=SessionResponse)
async def login(
    body: LoginRequest,
    response: Response,
    session: AsyncSession = Depends(get_session),
):
    """Authenticate with email/password and receive a JWT session cookie."""
    user = await account_service.authenticate(session, body)
    token = _issue_session(response, user)
    # Bearer clients read the token from this header instead of the cookie
    response.headers["X-Session-Token"] = token
    return SessionResponse(user=_profile(user))


# ---------------------------------------------------------------------------
# OAuth
# ---------------------------------------------------------------------------

@router.get("/login/oauth", response_model=OAuthLoginResponse)
async def oauth_login(provider: str, response: Response):
    """Return the provider's authorization URL and pin the state in a cookie."""
    state = secrets.token_urlsafe(24)
    url = build_authorization_url(provider, state)
    response.set_cookie(
        key=OAUTH_STATE_COOKIE,
        value=state,
        httponly=True,
        secure=not settings.debug,
        samesite="lax",
        path="/",
        max_age=600,
    )
    return OAuthLoginResponse(provider=provider, authorization_url=url)


@router.get("/callback/{provider}")
async def oauth_callback(
    provider: str,
    request: Request,
    code: str = Query(...),
    state: str | None = Query(None),
    session: AsyncSession = Depends(get_session),
):
    """Exchange the code, sign the user in and send them to the dashboard."""
    if provider != "google":
        raise HTTPException(status_code=400, detail="Unsupported OAuth provider")
    expected_state = request.cookies.get(OAUTH_STATE_COOKIE)
    if not expected_state or not state or not secrets.compare_digest(
        state.encode(), expected_state.encode()
    ):
        log.warning("oauth.state_mismatch", provider=provider, has_cookie=bool(expected_state))
        raise HTTPException(status_code=400, detail="OAuth state mismatch")

    profile = await exchange_code(code)
    user = await account_service.oauth_sign_in(session, profile)

    response = RedirectResponse(url=f"{settings.app_url}/dashboard", status_code=303)
    _issue_session(response, user)
    response.delete_cookie(OAUTH_STATE_COOKIE, path="/")
    return response


# ---------------------------------------------------------------------------
# Session Management
# ---------------------------------------------------------------------------

@router.get("/session", response_model=SessionResponse)
async def current_session(user: User = Depends(get_current_user)):
    return SessionResponse(user=_profile(user))


@router.post("/logout", response_model=MessageResponse)
async def logout(
    request: Request,
    response: Response,
    authorization: str | None = Depends(authorization_header),
):
    """Invalidate the current session."""
    token = extract_token(request, authorization)
    if token:
        try:
            payload = decode_jwt(token)
        except jwt.PyJWTError:
            payload = None  # already invalid, just clear cookies
        if payload and payload.get("jti"):
            await revoke_jwt(payload["jti"], seconds_until_expiry(payload))
            log.info("auth.logout", user_id=payload.get("sub"))

    response.delete_cookie(SESSION_COOKIE, path="/")
    response.delete_cookie(CSRF_COOKIE, path="/")
    return MessageResponse(message="Logged out")
