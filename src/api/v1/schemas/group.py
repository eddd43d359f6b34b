"""Pydantic schemas for Group API."""

from datetime import datetime
from typing import Any
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, field_validator

from domain.entities.group import CollaboratorRole, CollaboratorStatus


def _normalize_email(v: str) -> str:
    v = v.strip().lower()
    if "@" not in v or "." not in v.split("@")[-1]:
        raise ValueError("Invalid email address")
    return v


class InviteRequest(BaseModel):
    """Schema for inviting a user to a group.

    Identity fields come from the identity provider's user directory; the
    service stores them on the roster entry as given.
    """

    user_id: str = Field(..., min_length=1, max_length=128)
    name: str = Field(..., min_length=1, max_length=255)
    email: str = Field(..., min_length=3, max_length=255)
    picture: str | None = Field(None, max_length=500)
    role: CollaboratorRole = CollaboratorRole.VIEWER

    @field_validator("email")
    @classmethod
    def validate_email(cls, v: str) -> str:
        """Basic email validation."""
        return _normalize_email(v)


class GroupCreate(BaseModel):
    """Schema for creating a group."""

    name: str = Field(..., min_length=1, max_length=100)
    tag: str = Field(..., min_length=1, max_length=50, pattern=r"^@?[A-Za-z0-9_-]+$")
    color: str | None = Field(None, pattern=r"^#[0-9A-Fa-f]{6}$")
    collaborators: list[InviteRequest] = Field(default_factory=list, max_length=50)


class GroupUpdate(BaseModel):
    """Schema for updating a group."""

    name: str | None = Field(None, min_length=1, max_length=100)
    color: str | None = Field(None, pattern=r"^#[0-9A-Fa-f]{6}$")


class RoleUpdate(BaseModel):
    """Schema for changing a member's role."""

    role: CollaboratorRole


class PermissionsResponse(BaseModel):
    """The caller's permission flags in a group."""

    can_create_task: bool
    can_edit_any_task: bool
    can_delete_any_task: bool
    can_drag_any_task: bool
    can_manage_members: bool | None = None
    can_delete_group: bool | None = None


class CollaboratorResponse(BaseModel):
    """Schema for a roster entry."""

    model_config = ConfigDict(from_attributes=True)

    user_id: str
    name: str
    email: str
    picture: str | None = None
    role: CollaboratorRole
    status: CollaboratorStatus
    invited_at: datetime
    accepted_at: datetime | None = None


class GroupResponse(BaseModel):
    """Schema for Group response."""

    model_config = ConfigDict(
        from_attributes=True,
        json_schema_extra={
            "example": {
                "id": "123e4567-e89b-12d3-a456-426614174000",
                "tag": "@design",
                "name": "Design Team",
                "color": "#6366f1",
                "owner_id": "auth0|64f1c2",
                "member_count": 2,
                "role": "admin",
            }
        },
    )

    id: UUID
    tag: str
    name: str
    color: str
    owner_id: str
    owner_name: str | None = None
    owner_email: str | None = None
    member_count: int = 0
    version: int
    role: str
    permissions: PermissionsResponse
    collaborators: list[CollaboratorResponse] = Field(default_factory=list)
    created_at: datetime
    updated_at: datetime


class PendingInvitationResponse(BaseModel):
    """An invitation the caller has not answered yet."""

    group_id: UUID
    tag: str
    name: str
    color: str
    owner_id: str
    owner_name: str | None = None
    role: CollaboratorRole
    invited_at: datetime


class GroupListResponse(BaseModel):
    """Schema for list of Groups response."""

    data: list[GroupResponse]
    invitations: list[PendingInvitationResponse] = Field(default_factory=list)
    meta: dict[str, Any] = Field(default_factory=dict)


class GroupDetailResponse(BaseModel):
    """Schema for single Group response."""

    data: GroupResponse


class CollaboratorListResponse(BaseModel):
    """Schema for list of roster entries response."""

    data: list[CollaboratorResponse]
    meta: dict[str, Any] = Field(default_factory=dict)
