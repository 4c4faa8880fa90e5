"""
Integration tests for Project endpoints.

Tests cover:
- Project CRUD within a workspace
- Membership checks on list/create/get/update
- OWNER/ADMIN-only deletion and the cascade to tasks, notes and comments
"""

from __future__ import annotations

import uuid

from sqlalchemy import func
from sqlmodel import select

from app.models.comment import Comment
from app.models.note import Note
from app.models.task import Task


class TestProjectCrud:
    async def test_create_and_list(self, client, ada, make_project, make_task):
        older = await make_project(ada, "Apollo")
        newer = await make_project(ada, "Gemini")
        await make_task(ada, older["id"])

        resp = await client.get(
            "/api/v1/projects", params={"workspaceId": str(ada.workspace_id)}, headers=ada.headers
        )
        assert resp.status_code == 200
        projects = resp.json()["projects"]
        assert [p["name"] for p in projects] == ["Gemini", "Apollo"]
        assert projects[0]["id"] == newer["id"]
        assert projects[1]["taskCount"] == 1
        assert projects[0]["taskCount"] == 0
        assert projects[1]["createdBy"] == {"id": str(ada.id), "name": "Ada", "image": None}

    async def test_list_requires_workspace_id(self, client, ada):
        resp = await client.get("/api/v1/projects", headers=ada.headers)
        assert resp.status_code == 400
        assert resp.json()["detail"] == "Workspace ID required"

    async def test_list_other_workspace_is_403(self, client, ada, eve):
        resp = await client.get(
            "/api/v1/projects", params={"workspaceId": str(ada.workspace_id)}, headers=eve.headers
        )
        assert resp.status_code == 403

    async def test_create_in_foreign_workspace_is_403(self, client, ada, eve):
        resp = await client.post(
            "/api/v1/projects",
            json={"name": "Sneaky", "workspaceId": str(ada.workspace_id)},
            headers=eve.headers,
        )
        assert resp.status_code == 403

    async def test_create_validates_name(self, client, ada):
        resp = await client.post(
            "/api/v1/projects",
            json={"name": "A", "workspaceId": str(ada.workspace_id)},
            headers=ada.headers,
        )
        assert resp.status_code == 400

    async def test_get_detail_includes_children(
        self, client, ada, make_project, make_task, make_note
    ):
        project = await make_project(ada)
        await make_task(ada, project["id"], "First")
        await make_note(ada, project["id"], "Minutes")

        resp = await client.get(f"/api/v1/projects/{project['id']}", headers=ada.headers)
        assert resp.status_code == 200
        detail = resp.json()["project"]
        assert detail["workspace"]["id"] == str(ada.workspace_id)
        assert [t["title"] for t in detail["tasks"]] == ["First"]
        assert [n["title"] for n in detail["notes"]] == ["Minutes"]
        assert detail["createdBy"]["name"] == "Ada"

    async def test_get_missing_is_404_before_access_check(self, client, eve):
        resp = await client.get(f"/api/v1/projects/{uuid.uuid4()}", headers=eve.headers)
        assert resp.status_code == 404
        assert resp.json()["detail"] == "Project not found"

    async def test_get_foreign_project_is_403(self, client, ada, eve, make_project):
        project = await make_project(ada)
        resp = await client.get(f"/api/v1/projects/{project['id']}", headers=eve.headers)
        assert resp.status_code == 403

    async def test_update(self, client, ada, make_project):
        project = await make_project(ada)
        resp = await client.patch(
            f"/api/v1/projects/{project['id']}",
            json={"description": "Moonshot"},
            headers=ada.headers,
        )
        assert resp.status_code == 200
        updated = resp.json()["project"]
        assert updated["description"] == "Moonshot"
        assert updated["name"] == "Apollo"

    async def test_update_by_non_member_is_403(self, client, ada, eve, make_project):
        project = await make_project(ada)
        resp = await client.patch(
            f"/api/v1/projects/{project['id']}", json={"name": "Mine"}, headers=eve.headers
        )
        assert resp.status_code == 403


class TestProjectDeletion:
    async def test_member_cannot_delete(self, client, ada, bob, add_member, make_project):
        await add_member(ada, bob, role="MEMBER")
        project = await make_project(ada)

        resp = await client.delete(f"/api/v1/projects/{project['id']}", headers=bob.headers)
        assert resp.status_code == 403
        assert resp.json()["detail"] == "Only workspace owners/admins can delete projects"

        resp = await client.get(f"/api/v1/projects/{project['id']}", headers=ada.headers)
        assert resp.status_code == 200

    async def test_admin_can_delete(self, client, ada, bob, add_member, make_project):
        await add_member(ada, bob, role="ADMIN")
        project = await make_project(ada)
        resp = await client.delete(f"/api/v1/projects/{project['id']}", headers=bob.headers)
        assert resp.status_code == 200

    async def test_non_member_cannot_delete(self, client, ada, eve, make_project):
        project = await make_project(ada)
        resp = await client.delete(f"/api/v1/projects/{project['id']}", headers=eve.headers)
        assert resp.status_code == 403

    async def test_delete_cascades(
        self, client, session_factory, ada, make_project, make_task, make_note
    ):
        project = await make_project(ada)
        task = await make_task(ada, project["id"])
        note = await make_note(ada, project["id"])
        for target in ({"taskId": task["id"]}, {"noteId": note["id"]}):
            resp = await client.post(
                "/api/v1/comments", json={"body": "hi", **target}, headers=ada.headers
            )
            assert resp.status_code == 201

        resp = await client.delete(f"/api/v1/projects/{project['id']}", headers=ada.headers)
        assert resp.status_code == 200

        async with session_factory() as session:
            for model in (Task, Note, Comment):
                result = await session.execute(select(func.count()).select_from(model))
                assert result.scalar_one() == 0

        resp = await client.get(f"/api/v1/projects/{project['id']}", headers=ada.headers)
        assert resp.status_code == 404
