"""
HTTP middleware: security headers, CSRF protection, the page navigation gate
and the last-resort 500 handler.
"""

from __future__ import annotations

from typing import Optional

import jwt
import structlog
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import JSONResponse, RedirectResponse, Response

from app.core.auth import CSRF_COOKIE, SESSION_COOKIE, decode_jwt

log = structlog.get_logger()

SAFE_METHODS = {"GET", "HEAD", "OPTIONS"}

# ---------------------------------------------------------------------------
# Security Headers
# ---------------------------------------------------------------------------

SECURITY_HEADERS = {
    "X-Content-Type-Options": "nosniff",
    "X-Frame-Options": "DENY",
    "X-XSS-Protection": "0",
    "Referrer-Policy": "strict-origin-when-cross-origin",
    "Permissions-Policy": "camera=(), microphone=(), geolocation=()",
    "Content-Security-Policy": (
        "default-src 'self'; "
        "script-src 'self' 'unsafe-inline' https://cdn.jsdelivr.net https://js.stripe.com; "
        "style-src 'self' 'unsafe-inline' https://cdn.jsdelivr.net; "
        "img-src 'self' data: https://lh3.googleusercontent.com https://fastapi.tiangolo.com; "
        "connect-src 'self' https://api.stripe.com; "
        "frame-src https://checkout.stripe.com; "
        "frame-ancestors 'none';"
    ),
    "Strict-Transport-Security": "max-age=63072000; includeSubDomains; preload",
}


class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    """Attach security headers to every response."""

    async def dispatch(self, request: Request, call_next) -> Response:
        response = await call_next(request)
        for header, value in SECURITY_HEADERS.items():
            response.headers[header] = value
        return response


# ---------------------------------------------------------------------------
# CSRF Protection (Double-Submit Cookie)
# ---------------------------------------------------------------------------

# Stripe posts webhooks without cookies; the signature check authenticates them
CSRF_EXEMPT_PATHS = {"/api/v1/stripe/webhook"}


class CSRFMiddleware(BaseHTTPMiddleware):
    """
    Double-submit cookie CSRF protection.

    Skipped for:
    - Safe HTTP methods (GET, HEAD, OPTIONS)
    - Requests with an Authorization header (Bearer clients don't use cookies)
    - Requests without a session cookie
    """

    async def dispatch(self, request: Request, call_next) -> Response:
        if request.method in SAFE_METHODS or request.url.path in CSRF_EXEMPT_PATHS:
            return await call_next(request)

        if request.headers.get("Authorization"):
            return await call_next(request)

        if SESSION_COOKIE not in request.cookies:
            return await call_next(request)

        cookie_token = request.cookies.get(CSRF_COOKIE)
        header_token = request.headers.get("X-CSRF-Token")

        if not cookie_token or not header_token or cookie_token != header_token:
            return JSONResponse(
                status_code=403,
                content={
                    "error": {
                        "code": "CSRF_VALIDATION_FAILED",
                        "message": "Invalid or missing CSRF token.",
                        "status": 403,
                    }
                },
            )

        return await call_next(request)


# ---------------------------------------------------------------------------
# Navigation Gate
# ---------------------------------------------------------------------------

GATE_BYPASS_PREFIXES = (
    "/api",
    "/health",
    "/ready",
    "/docs",
    "/redoc",
    "/openapi.json",
    "/static",
    "/_next",
    "/favicon.ico",
)
AUTH_PAGES = ("/login", "/register")
PUBLIC_PAGES = ("/", "/pricing") + AUTH_PAGES


def _matches(path: str, page: str) -> bool:
    if page == "/":
        return path == "/"
    return path == page or path.startswith(page + "/")


def navigation_redirect(path: str, logged_in: bool) -> Optional[str]:
    """Return the redirect target for a page request, or None to let it through."""
    if path.startswith(GATE_BYPASS_PREFIXES):
        return None
    if logged_in:
        if any(_matches(path, page) for page in AUTH_PAGES):
            return "/dashboard"
        return None
    if any(_matches(path, page) for page in PUBLIC_PAGES):
        return None
    return "/login"


def _has_valid_session(request: Request) -> bool:
    token = request.cookies.get(SESSION_COOKIE)
    if not token:
        return False
    try:
        decode_jwt(token)
    except jwt.PyJWTError:
        return False
    return True


class NavigationGateMiddleware(BaseHTTPMiddleware):
    """Redirect page requests according to whether the visitor is signed in."""

    async def dispatch(self, request: Request, call_next) -> Response:
        target = navigation_redirect(request.url.path, _has_valid_session(request))
        if target is not None:
            return RedirectResponse(url=target, status_code=307)
        return await call_next(request)


# ---------------------------------------------------------------------------
# Unhandled errors
# ---------------------------------------------------------------------------

class UnhandledErrorMiddleware(BaseHTTPMiddleware):
    """Turn any exception that escapes a handler into a generic 500."""

    async def dispatch(self, request: Request, call_next) -> Response:
        try:
            return await call_next(request)
        except Exception:
            log.exception(
                "request.unhandled_error",
                path=request.url.path,
                method=request.method,
            )
            return JSONResponse(
                status_code=500,
                content={"detail": "Internal server error"},
            )
