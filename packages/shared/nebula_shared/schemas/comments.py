"""
Comment schemas.

A comment hangs off exactly one task or one note. On the wire that is two
optional ids (``taskId`` / ``noteId``); in Python it is the ``CommentTarget``
tagged union, built when the request is validated.
"""

from __future__ import annotations

from datetime import datetime
from typing import Annotated, Literal, Optional, Union

from pydantic import Field, UUID4, model_validator

from .common import APIModel, UserSummary


class TaskTarget(APIModel):
    kind: Literal["task"] = "task"
    id: UUID4


class NoteTarget(APIModel):
    kind: Literal["note"] = "note"
    id: UUID4


CommentTarget = Annotated[Union[TaskTarget, NoteTarget], Field(discriminator="kind")]


class CommentCreate(APIModel):
    body: str = Field(min_length=1, description="Comment cannot be empty")
    task_id: Optional[UUID4] = None
    note_id: Optional[UUID4] = None

    @model_validator(mode="after")
    def _exactly_one_target(self) -> "CommentCreate":
        if self.task_id is None and self.note_id is None:
            raise ValueError("Either taskId or noteId is required")
        if self.task_id is not None and self.note_id is not None:
            raise ValueError("A comment attaches to a task or a note, not both")
        return self

    @property
    def target(self) -> CommentTarget:
        if self.task_id is not None:
            return TaskTarget(id=self.task_id)
        return NoteTarget(id=self.note_id)


class CommentRead(APIModel):
    id: UUID4
    body: str
    author_id: UUID4
    task_id: Optional[UUID4] = None
    note_id: Optional[UUID4] = None
    author: Optional[UserSummary] = None
    created_at: datetime


class CommentListResponse(APIModel):
    comments: list[CommentRead]


class CommentResponse(APIModel):
    comment: CommentRead
