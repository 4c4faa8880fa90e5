"""
Comment endpoints.

GET  /api/v1/comments?taskId=|noteId=   - Comments on a task or note, newest first
POST /api/v1/comments                   - Comment on a task or note
"""

from __future__ import annotations

import uuid
from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.auth import get_current_user
from app.core.database import get_session
from app.models.user import User
from app.services import comments as comment_service
from nebula_shared.schemas.comments import CommentCreate, CommentListResponse, CommentResponse

router = APIRouter()


@router.get("", response_model=CommentListResponse)
async def list_comments(
    task_id: Optional[uuid.UUID] = Query(None, alias="taskId"),
    note_id: Optional[uuid.UUID] = Query(None, alias="noteId"),
    user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_session),
):
    comments = await comment_service.list_comments(session, user.id, task_id, note_id)
    return CommentListResponse(comments=comments)


@router.post("", response_model=CommentResponse, status_code=201)
async def create_comment(
    body: CommentCreate,
    user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_session),
):
    comment = await comment_service.create_comment(session, user.id, body)
    return CommentResponse(comment=comment)
