"""Activity feed schemas."""

from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Any, Optional

from pydantic import Field, UUID4

from .common import APIModel, UserSummary


class ActivityAction(str, Enum):
    CREATED = "created"
    UPDATED = "updated"
    DELETED = "deleted"
    COMMENTED = "commented"


class ActivityRead(APIModel):
    id: UUID4
    workspace_id: UUID4
    action: str
    entity_type: str
    entity_id: UUID4
    metadata: dict[str, Any] = Field(default_factory=dict)
    actor: Optional[UserSummary] = None
    created_at: datetime


class ActivityListResponse(APIModel):
    activities: list[ActivityRead]
