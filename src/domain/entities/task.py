"""Task domain entity."""

from dataclasses import dataclass, field
from datetime import datetime
from enum import StrEnum
from uuid import UUID, uuid4

from domain.entities.group_ref import GroupRef, parse_group_ref


class TaskPriority(StrEnum):
    """Task priority."""

    HIGH = "High"
    MEDIUM = "Medium"
    LOW = "Low"


class TaskStatus(StrEnum):
    """Board column a task sits in."""

    PENDING = "pending"
    IN_PROGRESS = "in-progress"
    COMPLETED = "completed"


@dataclass
class AssigneeSnapshot:
    """Last-known identity of an assignee, kept on the task for display.

    Refreshed whenever assignments are written; it survives the assignee
    leaving the group, unlike the live roster.
    """

    user_id: str
    name: str | None = None
    email: str | None = None
    picture: str | None = None


@dataclass
class Task:
    """Domain entity for a Task."""

    owner_id: str
    title: str
    id: UUID = field(default_factory=uuid4)
    description: str = ""
    category: str = "General"
    priority: TaskPriority = TaskPriority.MEDIUM
    status: TaskStatus = TaskStatus.PENDING
    due_date: datetime | None = None
    progress: int | None = None
    group_tag: str | None = None
    assigned_to: list[str] = field(default_factory=list)
    assignee_snapshots: list[AssigneeSnapshot] = field(default_factory=list)
    created_at: datetime = field(default_factory=datetime.utcnow)
    updated_at: datetime = field(default_factory=datetime.utcnow)

    def __post_init__(self) -> None:
        """Ensure updated_at is always at least as recent as created_at."""
        if self.updated_at < self.created_at:
            self.updated_at = self.created_at

    @property
    def group_ref(self) -> GroupRef:
        return parse_group_ref(self.group_tag)

    @property
    def is_overdue(self) -> bool:
        """A task is overdue once its due date passes without completion."""
        if self.due_date is None or self.status == TaskStatus.COMPLETED:
            return False
        return self.due_date < datetime.utcnow()

    def is_assigned(self, user_id: str) -> bool:
        return user_id in self.assigned_to

    def snapshot_for(self, user_id: str) -> AssigneeSnapshot | None:
        for snapshot in self.assignee_snapshots:
            if snapshot.user_id == user_id:
                return snapshot
        return None

    def move_to(self, status: TaskStatus) -> TaskStatus:
        """Change the task's column, returning the previous one."""
        previous = self.status
        self.status = status
        if status == TaskStatus.COMPLETED:
            self.progress = 100
        self.updated_at = datetime.utcnow()
        return previous
