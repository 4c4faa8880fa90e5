"""
Shared fixtures: a throwaway SQLite database per test, an in-memory stand-in
for Redis, and helpers that register users through the real API.
"""

from __future__ import annotations

import os

os.environ.setdefault("NEBULA_DATABASE_URL", "sqlite+aiosqlite://")
os.environ.setdefault("NEBULA_CREATE_TABLES", "false")
os.environ.setdefault("NEBULA_BCRYPT_ROUNDS", "4")
os.environ.setdefault("NEBULA_STRIPE_WEBHOOK_SECRET", "whsec_test_secret")

import uuid
from types import SimpleNamespace
from unittest.mock import patch

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine
from sqlalchemy.orm import sessionmaker
from sqlmodel import SQLModel

import app.models  # noqa: F401
from app.core.config import get_settings
from app.core.database import get_session
from app.main import app


class FakeRedis:
    """Just enough of redis.asyncio.Redis for the revocation list."""

    def __init__(self):
        self.store: dict[str, str] = {}

    async def setex(self, key, ttl, value):
        self.store[key] = value

    async def exists(self, key):
        return int(key in self.store)


@pytest.fixture
def settings():
    return get_settings()


@pytest.fixture
def strict_scoping(monkeypatch, settings):
    monkeypatch.setattr(settings, "strict_scoping", True)
    return settings


@pytest.fixture
async def engine(tmp_path):
    test_engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'nebula.db'}")
    async with test_engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.create_all)
    yield test_engine
    await test_engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


@pytest.fixture
def fake_redis():
    fake = FakeRedis()
    with patch("app.core.redis.get_redis", return_value=fake):
        yield fake


@pytest.fixture
async def client(session_factory, fake_redis):
    async def _override_get_session():
        async with session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    app.dependency_overrides[get_session] = _override_get_session
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac
    app.dependency_overrides.clear()


@pytest.fixture
def make_user(client):
    """Register and log in a user. Returns id, auth headers and default workspace id."""

    async def _make(name: str, email: str, password: str = "secret1") -> SimpleNamespace:
        resp = await client.post(
            "/api/v1/auth/register",
            json={"name": name, "email": email, "password": password},
        )
        assert resp.status_code == 201, resp.text
        user_id = uuid.UUID(resp.json()["userId"])

        resp = await client.post("/api/v1/auth/login", json={"email": email, "password": password})
        assert resp.status_code == 200, resp.text
        token = resp.headers["X-Session-Token"]
        client.cookies.clear()

        headers = {"Authorization": f"Bearer {token}"}
        resp = await client.get("/api/v1/workspaces", headers=headers)
        workspace_id = uuid.UUID(resp.json()["workspaces"][0]["id"])
        return SimpleNamespace(
            id=user_id, email=email, token=token, headers=headers, workspace_id=workspace_id
        )

    return _make


@pytest.fixture
async def ada(make_user):
    return await make_user("Ada", "ada@x.com")


@pytest.fixture
async def bob(make_user):
    return await make_user("Bob", "bob@x.com")


@pytest.fixture
async def eve(make_user):
    """A user who shares no workspace with anyone else."""
    return await make_user("Eve", "eve@x.com")


@pytest.fixture
def add_member(client):
    async def _add(owner, user, role: str = "MEMBER"):
        resp = await client.post(
            f"/api/v1/workspaces/{owner.workspace_id}/members",
            json={"email": user.email, "role": role},
            headers=owner.headers,
        )
        assert resp.status_code == 201, resp.text
        return resp.json()["member"]

    return _add


@pytest.fixture
def make_project(client):
    async def _make(owner, name: str = "Apollo", workspace_id=None):
        resp = await client.post(
            "/api/v1/projects",
            json={"name": name, "workspaceId": str(workspace_id or owner.workspace_id)},
            headers=owner.headers,
        )
        assert resp.status_code == 201, resp.text
        return resp.json()["project"]

    return _make


@pytest.fixture
def make_task(client):
    async def _make(user, project_id, title: str = "Write docs", **extra):
        resp = await client.post(
            "/api/v1/tasks",
            json={"title": title, "projectId": str(project_id), **extra},
            headers=user.headers,
        )
        assert resp.status_code == 201, resp.text
        return resp.json()["task"]

    return _make


@pytest.fixture
def make_note(client):
    async def _make(user, project_id, title: str = "Kickoff", content: str = "<p>hello</p>"):
        resp = await client.post(
            "/api/v1/notes",
            json={"title": title, "content": content, "projectId": str(project_id)},
            headers=user.headers,
        )
        assert resp.status_code == 201, resp.text
        return resp.json()["note"]

    return _make
