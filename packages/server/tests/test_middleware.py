"""
Tests for the navigation gate and the catch-all error middleware.
"""

from __future__ import annotations

import uuid
from datetime import timedelta

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from app.core.auth import create_jwt
from app.core.middleware import (
    NavigationGateMiddleware,
    UnhandledErrorMiddleware,
    navigation_redirect,
)


class TestNavigationRules:
    @pytest.mark.parametrize(
        "path",
        ["/api/v1/tasks", "/health", "/docs", "/openapi.json", "/_next/static/app.js", "/favicon.ico"],
    )
    def test_bypassed_paths(self, path):
        assert navigation_redirect(path, logged_in=False) is None
        assert navigation_redirect(path, logged_in=True) is None

    @pytest.mark.parametrize("path", ["/", "/pricing", "/login", "/register"])
    def test_public_pages_open_to_visitors(self, path):
        assert navigation_redirect(path, logged_in=False) is None

    @pytest.mark.parametrize("path", ["/dashboard", "/projects/123", "/settings/billing"])
    def test_private_pages_send_visitors_to_login(self, path):
        assert navigation_redirect(path, logged_in=False) == "/login"

    @pytest.mark.parametrize("path", ["/login", "/register"])
    def test_signed_in_users_skip_auth_pages(self, path):
        assert navigation_redirect(path, logged_in=True) == "/dashboard"

    @pytest.mark.parametrize("path", ["/", "/pricing", "/dashboard"])
    def test_signed_in_users_pass(self, path):
        assert navigation_redirect(path, logged_in=True) is None

    def test_page_match_is_segment_based(self):
        assert navigation_redirect("/loginx", logged_in=False) == "/login"


class TestNavigationGateMiddleware:
    def _make_app(self) -> FastAPI:
        app = FastAPI()
        app.add_middleware(NavigationGateMiddleware)

        @app.get("/dashboard")
        async def dashboard():
            return {"page": "dashboard"}

        @app.get("/login")
        async def login():
            return {"page": "login"}

        return app

    def test_visitor_is_redirected_to_login(self):
        resp = TestClient(self._make_app()).get("/dashboard", follow_redirects=False)
        assert resp.status_code == 307
        assert resp.headers["location"] == "/login"

    def test_signed_in_user_reaches_dashboard(self):
        token, _ = create_jwt(uuid.uuid4(), email="ada@x.com")
        client = TestClient(self._make_app(), cookies={"nebula_session": token})
        resp = client.get("/dashboard", follow_redirects=False)
        assert resp.status_code == 200

    def test_signed_in_user_is_sent_away_from_login(self):
        token, _ = create_jwt(uuid.uuid4())
        client = TestClient(self._make_app(), cookies={"nebula_session": token})
        resp = client.get("/login", follow_redirects=False)
        assert resp.status_code == 307
        assert resp.headers["location"] == "/dashboard"

    def test_expired_cookie_counts_as_visitor(self):
        token, _ = create_jwt(uuid.uuid4(), expires_delta=timedelta(seconds=-1))
        client = TestClient(self._make_app(), cookies={"nebula_session": token})
        resp = client.get("/dashboard", follow_redirects=False)
        assert resp.headers["location"] == "/login"


class TestUnhandledErrorMiddleware:
    def test_exception_becomes_generic_500(self):
        app = FastAPI()
        app.add_middleware(UnhandledErrorMiddleware)

        @app.get("/boom")
        async def boom():
            raise RuntimeError("database exploded")

        resp = TestClient(app).get("/boom")
        assert resp.status_code == 500
        assert resp.json() == {"detail": "Internal server error"}
        assert "exploded" not in resp.text

    def test_http_errors_pass_through(self):
        app = FastAPI()
        app.add_middleware(UnhandledErrorMiddleware)

        resp = TestClient(app).get("/missing")
        assert resp.status_code == 404
