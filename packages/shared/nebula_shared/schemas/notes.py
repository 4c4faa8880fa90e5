"""Note schemas. Notes hold rich-text content as an opaque string."""

from __future__ import annotations

from datetime import datetime
from typing import List, Optional

from pydantic import Field, UUID4

from .common import APIModel, ProjectSummary, UserSummary


class NoteCreate(APIModel):
    title: str = Field(min_length=1, description="Title is required")
    content: str
    project_id: UUID4


class NoteUpdate(APIModel):
    title: Optional[str] = Field(default=None, min_length=1)
    content: Optional[str] = None


class NoteRead(APIModel):
    id: UUID4
    title: str
    content: str
    project_id: UUID4
    created_by_id: UUID4
    created_by: Optional[UserSummary] = None
    project: Optional[ProjectSummary] = None
    created_at: datetime
    updated_at: datetime


class NoteListResponse(APIModel):
    notes: List[NoteRead]


class NoteResponse(APIModel):
    note: NoteRead
