"""Activity log domain entity and action constants."""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any
from uuid import UUID, uuid4

# --- Activity Action Constants ---
# Format: {entity_type}.{action}


class Actions:
    """Activity action constants using dot-notation."""

    # Task actions
    TASK_CREATED = "task.created"
    TASK_UPDATED = "task.updated"
    TASK_MOVED = "task.moved"
    TASK_DELETED = "task.deleted"

    # Group actions
    GROUP_CREATED = "group.created"
    GROUP_UPDATED = "group.updated"
    GROUP_DELETED = "group.deleted"

    # Membership actions
    MEMBER_INVITED = "member.invited"
    MEMBER_JOINED = "member.joined"
    MEMBER_DECLINED = "member.declined"
    MEMBER_REMOVED = "member.removed"
    MEMBER_LEFT = "member.left"
    MEMBER_ROLE_CHANGED = "member.role_changed"


@dataclass
class ActivityLog:
    """Domain entity for an activity log entry.

    ``group_tag`` is ``None`` for activity on personal tasks.
    """

    actor_id: str
    action: str
    id: UUID = field(default_factory=uuid4)
    actor_name: str | None = None
    group_tag: str | None = None
    task_id: UUID | None = None
    task_title: str | None = None
    from_status: str | None = None
    to_status: str | None = None
    target_user_id: str | None = None
    changes: dict[str, Any] | None = None
    metadata: dict[str, Any] | None = None
    created_at: datetime = field(default_factory=datetime.utcnow)
