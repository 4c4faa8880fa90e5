"""
Tests for the workspace access guard.

check_access must match a membership row for exactly the (user, workspace)
pair asked about; check_role additionally filters on role.
"""

from __future__ import annotations

import itertools

import pytest
from fastapi import HTTPException

from app.core.auth import check_access, check_role
from app.models.user import User
from app.models.workspace import Workspace
from app.models.workspace_member import WorkspaceMember
from nebula_shared.schemas.common import MANAGER_ROLES


@pytest.fixture
async def world(session_factory):
    """Three users, three workspaces, a sparse membership matrix."""
    async with session_factory() as session:
        users = [User(name=f"user{i}", email=f"user{i}@x.com") for i in range(3)]
        workspaces = [Workspace(name=f"ws{i}", slug=f"ws-{i}") for i in range(3)]
        session.add_all(users + workspaces)
        await session.flush()

        memberships = {
            (0, 0): "OWNER",
            (0, 1): "MEMBER",
            (1, 1): "ADMIN",
            (2, 2): "MEMBER",
        }
        for (u, w), role in memberships.items():
            session.add(
                WorkspaceMember(user_id=users[u].id, workspace_id=workspaces[w].id, role=role)
            )
        await session.commit()
    return users, workspaces, memberships


async def test_check_access_matches_exact_pair_only(session_factory, world):
    users, workspaces, memberships = world
    async with session_factory() as session:
        for u, w in itertools.product(range(3), range(3)):
            if (u, w) in memberships:
                membership = await check_access(session, users[u].id, workspaces[w].id)
                assert membership.user_id == users[u].id
                assert membership.workspace_id == workspaces[w].id
                assert membership.role == memberships[(u, w)]
            else:
                with pytest.raises(HTTPException) as exc_info:
                    await check_access(session, users[u].id, workspaces[w].id)
                assert exc_info.value.status_code == 403
                assert exc_info.value.detail == "Access denied"


async def test_check_role_filters_on_role(session_factory, world):
    users, workspaces, memberships = world
    async with session_factory() as session:
        for (u, w), role in memberships.items():
            if role in ("OWNER", "ADMIN"):
                await check_role(session, users[u].id, workspaces[w].id, MANAGER_ROLES)
            else:
                with pytest.raises(HTTPException) as exc_info:
                    await check_role(
                        session, users[u].id, workspaces[w].id, MANAGER_ROLES, detail="nope"
                    )
                assert exc_info.value.status_code == 403
                assert exc_info.value.detail == "nope"


async def test_check_role_rejects_non_members_as_access_denied(session_factory, world):
    users, workspaces, _ = world
    async with session_factory() as session:
        with pytest.raises(HTTPException) as exc_info:
            await check_role(session, users[2].id, workspaces[0].id, MANAGER_ROLES)
        assert exc_info.value.detail == "Access denied"
