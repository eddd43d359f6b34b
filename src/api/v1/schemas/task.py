"""Pydantic schemas for Task API."""

from datetime import datetime
from typing import Any
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from domain.entities.task import TaskPriority, TaskStatus


class TaskBase(BaseModel):
    """Base schema for Task."""

    title: str = Field(..., min_length=1, max_length=500)
    description: str = Field("", max_length=5000)
    category: str = Field("General", min_length=1, max_length=100)
    priority: TaskPriority = TaskPriority.MEDIUM
    due_date: datetime | None = None
    progress: int | None = Field(None, ge=0, le=100)


class TaskCreate(TaskBase):
    """Schema for creating a Task.

    ``group_tag`` omitted (or ``@personal``) creates a personal task.
    """

    status: TaskStatus = TaskStatus.PENDING
    group_tag: str | None = Field(None, max_length=100)
    assigned_to: list[str] = Field(default_factory=list, max_length=50)


class TaskUpdate(BaseModel):
    """Schema for updating a Task (all fields optional)."""

    title: str | None = Field(None, min_length=1, max_length=500)
    description: str | None = Field(None, max_length=5000)
    category: str | None = Field(None, min_length=1, max_length=100)
    priority: TaskPriority | None = None
    due_date: datetime | None = None
    progress: int | None = Field(None, ge=0, le=100)


class TaskStatusUpdate(BaseModel):
    """Schema for dragging a Task to another column."""

    status: TaskStatus


class TaskProgressUpdate(BaseModel):
    """Schema for setting a Task's progress."""

    progress: int = Field(..., ge=0, le=100)


class TaskAssigneesUpdate(BaseModel):
    """Schema for replacing a Task's assignees."""

    assigned_to: list[str] = Field(default_factory=list, max_length=50)


class TaskPermissionsResponse(BaseModel):
    """What the caller may do with one task."""

    can_edit: bool
    can_delete: bool
    can_drag: bool


class TaskResponse(BaseModel):
    """Schema for Task response."""

    model_config = ConfigDict(
        from_attributes=True,
        json_schema_extra={
            "example": {
                "id": "123e4567-e89b-12d3-a456-426614174000",
                "owner_id": "auth0|64f1c2",
                "title": "Draft the launch checklist",
                "description": "",
                "category": "General",
                "priority": "High",
                "status": "in-progress",
                "due_date": None,
                "progress": 40,
                "group_tag": "@design",
                "assigned_to": ["auth0|64f1c2"],
                "is_overdue": False,
                "created_at": "2026-01-28T10:00:00",
                "updated_at": "2026-01-28T10:00:00",
            }
        },
    )

    id: UUID
    owner_id: str
    title: str
    description: str
    category: str
    priority: TaskPriority
    status: TaskStatus
    due_date: datetime | None = None
    progress: int | None = None
    group_tag: str | None = None
    assigned_to: list[str] = Field(default_factory=list)
    is_overdue: bool = False
    permissions: TaskPermissionsResponse | None = None
    created_at: datetime
    updated_at: datetime


class TaskListResponse(BaseModel):
    """Schema for list of Tasks response."""

    data: list[TaskResponse]
    meta: dict[str, Any] = Field(default_factory=dict)


class TaskDetailResponse(BaseModel):
    """Schema for single Task response."""

    data: TaskResponse


class AssigneeResponse(BaseModel):
    """One assignee as rendered on the board."""

    user_id: str
    name: str | None = None
    email: str | None = None
    picture: str | None = None
    is_owner: bool = False


class AssigneePartitionResponse(BaseModel):
    """Assignees split by their current standing in the group."""

    active: list[AssigneeResponse] = Field(default_factory=list)
    exited: list[AssigneeResponse] = Field(default_factory=list)
    pending: list[AssigneeResponse] = Field(default_factory=list)
    active_count: int = 0


class AssigneesDetailResponse(BaseModel):
    """Schema for a Task's assignee breakdown."""

    data: AssigneePartitionResponse
