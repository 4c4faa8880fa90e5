"""
Note endpoints.

GET    /api/v1/notes                - List notes (projectId, workspaceId)
POST   /api/v1/notes                - Create a note
GET    /api/v1/notes/{noteId}       - Get a note
PATCH  /api/v1/notes/{noteId}       - Update title/content
DELETE /api/v1/notes/{noteId}       - Delete a note
"""

from __future__ import annotations

import uuid
from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.auth import get_current_user
from app.core.database import get_session
from app.models.user import User
from app.services import notes as note_service
from nebula_shared.schemas.common import MessageResponse
from nebula_shared.schemas.notes import NoteCreate, NoteListResponse, NoteResponse, NoteUpdate

router = APIRouter()


@router.get("", response_model=NoteListResponse)
async def list_notes(
    project_id: Optional[uuid.UUID] = Query(None, alias="projectId"),
    workspace_id: Optional[uuid.UUID] = Query(None, alias="workspaceId"),
    user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_session),
):
    notes = await note_service.list_notes(
        session, user.id, project_id=project_id, workspace_id=workspace_id
    )
    return NoteListResponse(notes=notes)


@router.post("", response_model=NoteResponse, status_code=201)
async def create_note(
    body: NoteCreate,
    user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_session),
):
    note = await note_service.create_note(session, user.id, body)
    return NoteResponse(note=note)


@router.get("/{noteId}", response_model=NoteResponse)
async def get_note(
    noteId: uuid.UUID,
    user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_session),
):
    note = await note_service.get_note(session, user.id, noteId)
    return NoteResponse(note=note)


@router.patch("/{noteId}", response_model=NoteResponse)
async def update_note(
    noteId: uuid.UUID,
    body: NoteUpdate,
    user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_session),
):
    note = await note_service.update_note(session, user.id, noteId, body)
    return NoteResponse(note=note)


@router.delete("/{noteId}", response_model=MessageResponse)
async def delete_note(
    noteId: uuid.UUID,
    user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_session),
):
    await note_service.delete_note(session, user.id, noteId)
    return MessageResponse(message="Note deleted")
