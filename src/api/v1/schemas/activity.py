"""Pydantic schemas for Activity API."""

from datetime import datetime
from typing import Any
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field


class ActivityLogResponse(BaseModel):
    """Schema for an activity log entry response."""

    model_config = ConfigDict(from_attributes=True)

    id: UUID
    actor_id: str
    actor_name: str | None = None
    action: str
    group_tag: str | None = None
    task_id: UUID | None = None
    task_title: str | None = None
    from_status: str | None = None
    to_status: str | None = None
    target_user_id: str | None = None
    changes: dict[str, Any] | None = None
    metadata: dict[str, Any] | None = None
    created_at: datetime


class ActivityListResponse(BaseModel):
    """Schema for activity feed response."""

    data: list[ActivityLogResponse]
    meta: dict[str, Any] = Field(default_factory=dict)
