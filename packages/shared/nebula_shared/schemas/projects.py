from typing import List, Optional
from pydantic import Field
from uuid import UUID
from datetime import datetime

from .common import APIModel, UserSummary
from .notes import NoteRead
from .tasks import TaskRead
from .workspaces import WorkspaceRead


class ProjectCreate(APIModel):
    name: str = Field(min_length=2, description="Project name must be at least 2 characters")
    description: Optional[str] = None
    workspace_id: UUID


class ProjectUpdate(APIModel):
    name: Optional[str] = Field(default=None, min_length=2)
    description: Optional[str] = None


class ProjectRead(APIModel):
    id: UUID
    name: str
    description: Optional[str] = None
    workspace_id: UUID
    created_by_id: UUID
    created_by: Optional[UserSummary] = None
    task_count: int = 0
    created_at: datetime
    updated_at: datetime


class ProjectDetail(ProjectRead):
    workspace: WorkspaceRead
    tasks: List[TaskRead] = Field(default_factory=list)
    notes: List[NoteRead] = Field(default_factory=list)


class ProjectListResponse(APIModel):
    projects: List[ProjectRead]


class ProjectResponse(APIModel):
    project: ProjectRead


class ProjectDetailResponse(APIModel):
    project: ProjectDetail
