from enum import Enum
from typing import Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class APIModel(BaseModel):
    """Base for API payloads: snake_case in Python, camelCase on the wire."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


class Role(str, Enum):
    OWNER = "OWNER"
    ADMIN = "ADMIN"
    MEMBER = "MEMBER"

# Roles allowed to delete projects and invite members
MANAGER_ROLES: tuple[Role, ...] = (Role.OWNER, Role.ADMIN)

class TaskStatus(str, Enum):
    TODO = "TODO"
    IN_PROGRESS = "IN_PROGRESS"
    DONE = "DONE"

class TaskPriority(str, Enum):
    LOW = "LOW"
    MEDIUM = "MEDIUM"
    HIGH = "HIGH"
    URGENT = "URGENT"

class SubscriptionPlan(str, Enum):
    FREE = "FREE"
    PRO = "PRO"

class SubscriptionStatus(str, Enum):
    ACTIVE = "ACTIVE"
    PAST_DUE = "PAST_DUE"
    CANCELED = "CANCELED"

class UserSummary(APIModel):
    id: UUID
    name: Optional[str] = None
    image: Optional[str] = None

class ProjectSummary(APIModel):
    id: UUID
    name: str
    workspace_id: UUID

class MessageResponse(APIModel):
    message: str
