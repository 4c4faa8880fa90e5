# SQLModel definitions, imported here so SQLModel.metadata knows every table.
from .base import UUIDMixin, TimestampMixin  # noqa: F401
from .user import User  # noqa: F401
from .workspace import Workspace  # noqa: F401
from .workspace_member import WorkspaceMember  # noqa: F401
from .project import Project  # noqa: F401
from .task import Task  # noqa: F401
from .note import Note  # noqa: F401
from .comment import Comment  # noqa: F401
from .activity_log import ActivityLog  # noqa: F401
from .notification import Notification  # noqa: F401
from .subscription import Subscription  # noqa: F401
