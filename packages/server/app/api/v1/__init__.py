"""
API v1 Router

Every endpoint lives under /api/v1; workspace scoping comes from ids in the
path, query or body, checked against the caller's memberships.
"""

from fastapi import APIRouter
from . import activity, auth, billing, comments, notes, notifications, projects, tasks, users, workspaces

router = APIRouter()

router.include_router(auth.router, prefix="/auth", tags=["Authentication"])
router.include_router(workspaces.router, prefix="/workspaces", tags=["Workspaces"])
router.include_router(projects.router, prefix="/projects", tags=["Projects"])
router.include_router(tasks.router, prefix="/tasks", tags=["Tasks"])
router.include_router(notes.router, prefix="/notes", tags=["Notes"])
router.include_router(comments.router, prefix="/comments", tags=["Comments"])
router.include_router(notifications.router, prefix="/notifications", tags=["Notifications"])
router.include_router(activity.router, prefix="/activity", tags=["Activity"])
router.include_router(billing.router, prefix="/stripe", tags=["Billing"])
router.include_router(users.router, prefix="/users", tags=["Users"])


@router.get("/", tags=["API"])
async def api_root():
    """API root - returns version and available endpoints."""
    return {
        "api": "v1",
        "version": "0.1.0",
        "endpoints": [
            "/auth",
            "/workspaces",
            "/projects",
            "/tasks",
            "/notes",
            "/comments",
            "/notifications",
            "/activity",
            "/stripe",
            "/users",
        ],
    }
