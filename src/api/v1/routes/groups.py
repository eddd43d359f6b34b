"""Group API routes: group store and membership lifecycle."""

from uuid import UUID

from fastapi import APIRouter, Depends, Request, status

from api.dependencies.auth import CurrentUser
from api.v1.dependencies import get_group_service
from api.v1.schemas.common import error_responses
from api.v1.schemas.group import (
    CollaboratorListResponse,
    CollaboratorResponse,
    GroupCreate,
    GroupDetailResponse,
    GroupListResponse,
    GroupResponse,
    GroupUpdate,
    InviteRequest,
    PendingInvitationResponse,
    PermissionsResponse,
    RoleUpdate,
)
from core.rate_limit import READ_LIMIT, WRITE_LIMIT, limiter
from domain.entities.group import Collaborator, Group
from domain.policies.assignment import member_count
from domain.policies.authorization import EffectiveRole, Permissions, permissions, resolve_role
from domain.policies.membership import Invitee
from domain.services.group_service import GroupService, PendingInvitation

router = APIRouter(prefix="/groups", tags=["groups"])

NO_GROUP_RIGHTS = Permissions(False, False, False, False, False, False)


@router.get(
    "",
    response_model=GroupListResponse,
    summary="List my groups and pending invitations",
    responses=error_responses(401),
)
@limiter.limit(READ_LIMIT)  # type: ignore[untyped-decorator]
async def list_groups(
    request: Request,
    user: CurrentUser,
    service: GroupService = Depends(get_group_service),
) -> GroupListResponse:
    """Get the groups the caller owns or has joined, plus open invitations."""
    overview = await service.list_for_user(user.id)
    data = [_build_group_response(g, user.id) for g in overview.groups]
    invitations = [_build_invitation_response(i) for i in overview.pending_invitations]
    return GroupListResponse(
        data=data,
        invitations=invitations,
        meta={"total": len(data), "pending_invitations": len(invitations)},
    )


@router.post(
    "",
    response_model=GroupDetailResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create a group",
    responses=error_responses(400, 401, 409),
)
@limiter.limit(WRITE_LIMIT)  # type: ignore[untyped-decorator]
async def create_group(
    request: Request,
    body: GroupCreate,
    user: CurrentUser,
    service: GroupService = Depends(get_group_service),
) -> GroupDetailResponse:
    """Create a group owned by the caller. Initial collaborators start pending."""
    group = await service.create(
        user_id=user.id,
        name=body.name,
        tag=body.tag,
        color=body.color,
        collaborators=[(_to_invitee(c), c.role) for c in body.collaborators],
        owner_name=user.display_name,
        owner_email=user.email,
    )
    return GroupDetailResponse(data=_build_group_response(group, user.id))


@router.get(
    "/{group_id}",
    response_model=GroupDetailResponse,
    summary="Get a group",
    responses=error_responses(401, 403, 404),
)
@limiter.limit(READ_LIMIT)  # type: ignore[untyped-decorator]
async def get_group(
    request: Request,
    group_id: UUID,
    user: CurrentUser,
    service: GroupService = Depends(get_group_service),
) -> GroupDetailResponse:
    """Get a group with the caller's effective role and permissions."""
    group = await service.get_by_id(group_id, user.id)
    return GroupDetailResponse(data=_build_group_response(group, user.id))


@router.put(
    "/{group_id}",
    response_model=GroupDetailResponse,
    summary="Update a group",
    responses=error_responses(401, 403, 404, 409),
)
@limiter.limit(WRITE_LIMIT)  # type: ignore[untyped-decorator]
async def update_group(
    request: Request,
    group_id: UUID,
    body: GroupUpdate,
    user: CurrentUser,
    service: GroupService = Depends(get_group_service),
) -> GroupDetailResponse:
    """Rename or recolor a group. Requires owner or admin."""
    group = await service.update(
        group_id=group_id,
        user_id=user.id,
        name=body.name,
        color=body.color,
        actor_name=user.name,
    )
    return GroupDetailResponse(data=_build_group_response(group, user.id))


@router.delete(
    "/{group_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete a group",
    responses=error_responses(401, 403, 404),
)
@limiter.limit(WRITE_LIMIT)  # type: ignore[untyped-decorator]
async def delete_group(
    request: Request,
    group_id: UUID,
    user: CurrentUser,
    service: GroupService = Depends(get_group_service),
) -> None:
    """Delete a group and its tasks and activity. Owner only."""
    await service.delete(group_id, user.id, actor_name=user.name)
    return None


# --- Membership lifecycle ---


@router.post(
    "/{group_id}/invite",
    response_model=GroupDetailResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Invite a user",
    responses=error_responses(401, 403, 404, 409),
)
@limiter.limit(WRITE_LIMIT)  # type: ignore[untyped-decorator]
async def invite_member(
    request: Request,
    group_id: UUID,
    body: InviteRequest,
    user: CurrentUser,
    service: GroupService = Depends(get_group_service),
) -> GroupDetailResponse:
    """Invite a user to the group. Requires owner or admin."""
    group = await service.invite(
        group_id=group_id,
        inviter_id=user.id,
        target=_to_invitee(body),
        role=body.role,
        actor_name=user.name,
    )
    return GroupDetailResponse(data=_build_group_response(group, user.id))


@router.post(
    "/{group_id}/accept",
    response_model=GroupDetailResponse,
    summary="Accept an invitation",
    responses=error_responses(401, 404, 409),
)
@limiter.limit(WRITE_LIMIT)  # type: ignore[untyped-decorator]
async def accept_invitation(
    request: Request,
    group_id: UUID,
    user: CurrentUser,
    service: GroupService = Depends(get_group_service),
) -> GroupDetailResponse:
    """Accept the caller's pending invitation."""
    group = await service.accept(group_id, user.id, actor_name=user.display_name)
    return GroupDetailResponse(data=_build_group_response(group, user.id))


@router.post(
    "/{group_id}/decline",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Decline an invitation",
    responses=error_responses(401, 404, 409),
)
@limiter.limit(WRITE_LIMIT)  # type: ignore[untyped-decorator]
async def decline_invitation(
    request: Request,
    group_id: UUID,
    user: CurrentUser,
    service: GroupService = Depends(get_group_service),
) -> None:
    """Decline the caller's pending invitation."""
    await service.decline(group_id, user.id, actor_name=user.display_name)
    return None


@router.post(
    "/{group_id}/exit",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Leave a group",
    responses=error_responses(401, 403, 404),
)
@limiter.limit(WRITE_LIMIT)  # type: ignore[untyped-decorator]
async def exit_group(
    request: Request,
    group_id: UUID,
    user: CurrentUser,
    service: GroupService = Depends(get_group_service),
) -> None:
    """Leave a group. The owner must delete the group instead."""
    await service.exit(group_id, user.id, actor_name=user.display_name)
    return None


@router.get(
    "/{group_id}/members",
    response_model=CollaboratorListResponse,
    summary="List group members",
    responses=error_responses(401, 403, 404),
)
@limiter.limit(READ_LIMIT)  # type: ignore[untyped-decorator]
async def list_members(
    request: Request,
    group_id: UUID,
    user: CurrentUser,
    service: GroupService = Depends(get_group_service),
) -> CollaboratorListResponse:
    """Get the roster of a group, pending invitations included."""
    members = await service.get_members(group_id, user.id)
    data = [_build_collaborator_response(m) for m in members]
    return CollaboratorListResponse(
        data=data,
        meta={"total": len(data), "accepted": sum(1 for m in members if m.is_accepted)},
    )


@router.put(
    "/{group_id}/members/{member_user_id}",
    response_model=GroupDetailResponse,
    summary="Change a member's role",
    responses=error_responses(401, 403, 404, 409),
)
@limiter.limit(WRITE_LIMIT)  # type: ignore[untyped-decorator]
async def change_member_role(
    request: Request,
    group_id: UUID,
    member_user_id: str,
    body: RoleUpdate,
    user: CurrentUser,
    service: GroupService = Depends(get_group_service),
) -> GroupDetailResponse:
    """Change a member's role. Requires owner or admin."""
    group = await service.change_role(
        group_id=group_id,
        acting_user_id=user.id,
        target_user_id=member_user_id,
        role=body.role,
        actor_name=user.name,
    )
    return GroupDetailResponse(data=_build_group_response(group, user.id))


@router.delete(
    "/{group_id}/members/{member_user_id}",
    response_model=GroupDetailResponse,
    summary="Remove a member",
    responses=error_responses(401, 403, 404, 409),
)
@limiter.limit(WRITE_LIMIT)  # type: ignore[untyped-decorator]
async def remove_member(
    request: Request,
    group_id: UUID,
    member_user_id: str,
    user: CurrentUser,
    service: GroupService = Depends(get_group_service),
) -> GroupDetailResponse:
    """Remove a member or revoke an invitation. Requires owner or admin."""
    group = await service.remove_member(
        group_id=group_id,
        acting_user_id=user.id,
        target_user_id=member_user_id,
        actor_name=user.name,
    )
    return GroupDetailResponse(data=_build_group_response(group, user.id))


def _to_invitee(body: InviteRequest) -> Invitee:
    return Invitee(user_id=body.user_id, name=body.name, email=body.email, picture=body.picture)


def _build_collaborator_response(collaborator: Collaborator) -> CollaboratorResponse:
    """Convert roster entry to response schema."""
    return CollaboratorResponse(
        user_id=collaborator.user_id,
        name=collaborator.name,
        email=collaborator.email,
        picture=collaborator.picture,
        role=collaborator.role,
        status=collaborator.status,
        invited_at=collaborator.invited_at,
        accepted_at=collaborator.accepted_at,
    )


def _build_group_response(group: Group, user_id: str) -> GroupResponse:
    """Convert domain entity to response schema, from the caller's point of view."""
    role = resolve_role(group, user_id)
    perms = permissions(role)
    if role == EffectiveRole.NONE:
        # Pending invitees can read the group but hold no rights in it yet.
        perms = NO_GROUP_RIGHTS
    return GroupResponse(
        id=group.id,
        tag=group.tag,
        name=group.name,
        color=group.color,
        owner_id=group.owner_id,
        owner_name=group.owner_name,
        owner_email=group.owner_email,
        member_count=member_count(group),
        version=group.version,
        role=role.value,
        permissions=PermissionsResponse(
            can_create_task=perms.can_create_task,
            can_edit_any_task=perms.can_edit_any_task,
            can_delete_any_task=perms.can_delete_any_task,
            can_drag_any_task=perms.can_drag_any_task,
            can_manage_members=perms.can_manage_members,
            can_delete_group=perms.can_delete_group,
        ),
        collaborators=[_build_collaborator_response(c) for c in group.collaborators],
        created_at=group.created_at,
        updated_at=group.updated_at,
    )


def _build_invitation_response(invitation: PendingInvitation) -> PendingInvitationResponse:
    group = invitation.group
    return PendingInvitationResponse(
        group_id=group.id,
        tag=group.tag,
        name=group.name,
        color=group.color,
        owner_id=group.owner_id,
        owner_name=group.owner_name,
        role=invitation.collaborator.role,
        invited_at=invitation.collaborator.invited_at,
    )
