"""
Google OAuth 2.0 authorization-code flow.

Only the provider leg lives here: building the consent URL, exchanging the
code and reading the userinfo profile. Account linking and workspace
provisioning happen in ``app.services.accounts``.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional
from urllib.parse import urlencode

import httpx
import structlog
from fastapi import HTTPException

from app.core.config import get_settings

log = structlog.get_logger()
settings = get_settings()

SUPPORTED_PROVIDERS = ("google",)

GOOGLE_AUTHORIZE_URL = "https://accounts.google.com/o/oauth2/v2/auth"
GOOGLE_TOKEN_URL = "https://oauth2.googleapis.com/token"
GOOGLE_USERINFO_URL = "https://openidconnect.googleapis.com/v1/userinfo"


@dataclass
class OAuthProfile:
    provider: str
    subject: str
    email: str
    name: Optional[str] = None
    image: Optional[str] = None
    email_verified: bool = False


def redirect_uri(provider: str) -> str:
    return f"{settings.api_url}/api/v1/auth/callback/{provider}"


def build_authorization_url(provider: str, state: str) -> str:
    if provider not in SUPPORTED_PROVIDERS:
        raise HTTPException(status_code=400, detail="Unsupported OAuth provider")
    query = urlencode(
        {
            "client_id": settings.google_client_id,
            "redirect_uri": redirect_uri(provider),
            "response_type": "code",
            "scope": "openid email profile",
            "state": state,
            "prompt": "select_account",
        }
    )
    return f"{GOOGLE_AUTHORIZE_URL}?{query}"


async def exchange_code(code: str, client: Optional[httpx.AsyncClient] = None) -> OAuthProfile:
    """Trade an authorization code for the signed-in Google profile."""
    owns_client = client is None
    client = client or httpx.AsyncClient(timeout=10.0)
    try:
        token_resp = await client.post(
            GOOGLE_TOKEN_URL,
            data={
                "code": code,
                "client_id": settings.google_client_id,
                "client_secret": settings.google_client_secret,
                "redirect_uri": redirect_uri("google"),
                "grant_type": "authorization_code",
            },
        )
        if token_resp.status_code != 200:
            log.warning("oauth.token_exchange_failed", status=token_resp.status_code)
            raise HTTPException(status_code=400, detail="OAuth code exchange failed")
        access_token = token_resp.json().get("access_token")
        if not access_token:
            raise HTTPException(status_code=400, detail="OAuth code exchange failed")

        info_resp = await client.get(
            GOOGLE_USERINFO_URL,
            headers={"Authorization": f"Bearer {access_token}"},
        )
        if info_resp.status_code != 200:
            log.warning("oauth.userinfo_failed", status=info_resp.status_code)
            raise HTTPException(status_code=400, detail="Could not fetch OAuth profile")
        info = info_resp.json()
    except httpx.HTTPError as exc:
        log.warning("oauth.provider_unreachable", error=str(exc))
        raise HTTPException(status_code=400, detail="OAuth provider unavailable")
    finally:
        if owns_client:
            await client.aclose()

    if not info.get("sub") or not info.get("email"):
        raise HTTPException(status_code=400, detail="OAuth profile is missing an email")

    # Google sends a bool, some proxies forward it as a string.
    if str(info.get("email_verified", "")).lower() != "true":
        log.warning("oauth.email_unverified", subject=str(info["sub"]))
        raise HTTPException(status_code=400, detail="OAuth email is not verified")

    return OAuthProfile(
        provider="google",
        subject=str(info["sub"]),
        email=info["email"].lower(),
        name=info.get("name"),
        image=info.get("picture"),
        email_verified=True,
    )
