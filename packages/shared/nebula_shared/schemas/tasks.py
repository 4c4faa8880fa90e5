"""Task-related Pydantic schemas for shared use across server and frontend codegen."""

from __future__ import annotations

from datetime import datetime
from typing import List, Optional

from pydantic import Field, UUID4

from .comments import CommentRead
from .common import APIModel, ProjectSummary, TaskPriority, TaskStatus, UserSummary


# ---------------------------------------------------------------------------
# Task CRUD
# ---------------------------------------------------------------------------

class TaskCreate(APIModel):
    title: str = Field(min_length=1, description="Title is required")
    description: Optional[str] = None
    status: TaskStatus = TaskStatus.TODO
    priority: TaskPriority = TaskPriority.MEDIUM
    due_date: Optional[datetime] = None
    project_id: UUID4
    assignee_id: Optional[UUID4] = None


class TaskUpdate(APIModel):
    title: Optional[str] = Field(default=None, min_length=1)
    description: Optional[str] = None
    status: Optional[TaskStatus] = None
    priority: Optional[TaskPriority] = None
    due_date: Optional[datetime] = None
    assignee_id: Optional[UUID4] = None  # explicit null unassigns


class TaskRead(APIModel):
    id: UUID4
    title: str
    description: Optional[str] = None
    status: TaskStatus
    priority: TaskPriority
    due_date: Optional[datetime] = None
    project_id: UUID4
    created_by_id: UUID4
    assignee_id: Optional[UUID4] = None
    assignee: Optional[UserSummary] = None
    created_by: Optional[UserSummary] = None
    created_at: datetime
    updated_at: datetime


class TaskDetail(TaskRead):
    """Single-task view: owning project and the comment thread."""
    project: ProjectSummary
    comments: List[CommentRead] = Field(default_factory=list)


# ---------------------------------------------------------------------------
# Envelopes
# ---------------------------------------------------------------------------

class TaskListResponse(APIModel):
    tasks: List[TaskRead]


class TaskResponse(APIModel):
    task: TaskRead


class TaskDetailResponse(APIModel):
    task: TaskDetail
