"""Membership state machine over a group's roster.

Per ``(group, user_id)`` pair::

    (no entry) --invite-->  pending
    pending    --accept-->  accepted
    pending    --decline--> (entry deleted)
    accepted   --remove-->  (entry deleted)   by owner/admin
    accepted   --exit-->    (entry deleted)   by the member
    accepted   --change_role--> accepted

Each transition mutates the given :class:`Group` in place and either
completes or raises before touching it. None of them alter ``owner_id`` or
leave two entries for one user. Checks run in a fixed order: authorization
of the actor, then the target's roster state.
"""

from dataclasses import dataclass
from datetime import datetime

from core.exceptions import (
    AlreadyMemberError,
    CollaboratorNotFoundError,
    ForbiddenError,
    InvalidTransitionError,
    NotInvitedError,
    ReservedTagError,
)
from domain.entities.group import (
    Collaborator,
    CollaboratorRole,
    CollaboratorStatus,
    Group,
)
from domain.entities.group_ref import is_reserved_tag, normalize_tag
from domain.policies.authorization import can_manage_members


@dataclass(frozen=True, slots=True)
class Invitee:
    """Identity of a user being invited, as supplied by the identity provider."""

    user_id: str
    name: str
    email: str
    picture: str | None = None


def new_group(
    owner_id: str,
    name: str,
    tag: str,
    color: str | None = None,
    initial_collaborators: list[tuple[Invitee, CollaboratorRole]] | None = None,
    owner_name: str | None = None,
    owner_email: str | None = None,
    now: datetime | None = None,
) -> Group:
    """Build a new group with every initial collaborator in ``pending``.

    Tag uniqueness is a storage concern and is checked by the caller.
    """
    tag = normalize_tag(tag)
    if is_reserved_tag(tag):
        raise ReservedTagError(tag)

    now = now or datetime.utcnow()
    group = Group(
        tag=tag,
        name=name,
        owner_id=owner_id,
        owner_name=owner_name,
        owner_email=owner_email,
        created_at=now,
        updated_at=now,
    )
    if color:
        group.color = color

    for invitee, role in initial_collaborators or []:
        _add_pending(group, invitee, role, now)
    return group


def invite(
    group: Group,
    inviter_id: str,
    target: Invitee,
    role: CollaboratorRole,
    now: datetime | None = None,
) -> Collaborator:
    """Add a pending roster entry for ``target``."""
    if not can_manage_members(group, inviter_id):
        raise ForbiddenError("Only the owner or an admin can invite members", action="invite")
    return _add_pending(group, target, role, now or datetime.utcnow())


def accept(group: Group, user_id: str, now: datetime | None = None) -> Collaborator:
    """Accept ``user_id``'s pending invitation."""
    collaborator = _require_pending(group, user_id, "accept")
    collaborator.status = CollaboratorStatus.ACCEPTED
    collaborator.accepted_at = now or datetime.utcnow()
    return collaborator


def decline(group: Group, user_id: str) -> Collaborator:
    """Decline ``user_id``'s pending invitation; the entry is removed."""
    collaborator = _require_pending(group, user_id, "decline")
    collaborator.status = CollaboratorStatus.DECLINED
    group.collaborators.remove(collaborator)
    return collaborator


def remove(group: Group, acting_user_id: str, target_user_id: str) -> Collaborator:
    """Remove another user's roster entry (revokes pending invitations too)."""
    if not can_manage_members(group, acting_user_id):
        raise ForbiddenError("Only the owner or an admin can remove members", action="remove")
    if group.is_owner(target_user_id):
        raise ForbiddenError("The group owner cannot be removed", action="remove")

    collaborator = group.get_collaborator(target_user_id)
    if collaborator is None:
        raise CollaboratorNotFoundError(target_user_id)
    group.collaborators.remove(collaborator)
    return collaborator


def exit_group(group: Group, user_id: str) -> Collaborator:
    """Let an accepted member leave. Owners must delete the group instead."""
    if group.is_owner(user_id):
        raise ForbiddenError("The owner cannot leave the group; delete it instead", action="exit")

    collaborator = group.get_collaborator(user_id)
    if collaborator is None or not collaborator.is_accepted:
        raise CollaboratorNotFoundError(user_id)
    group.collaborators.remove(collaborator)
    return collaborator


def change_role(
    group: Group,
    acting_user_id: str,
    target_user_id: str,
    new_role: CollaboratorRole,
) -> tuple[Collaborator, CollaboratorRole]:
    """Update a roster entry's role in place. Returns (entry, previous role)."""
    if not can_manage_members(group, acting_user_id):
        raise ForbiddenError("Only the owner or an admin can change roles", action="change_role")
    if group.is_owner(target_user_id):
        raise ForbiddenError("The owner role cannot be changed", action="change_role")

    collaborator = group.get_collaborator(target_user_id)
    if collaborator is None:
        raise CollaboratorNotFoundError(target_user_id)
    previous = collaborator.role
    collaborator.role = new_role
    return collaborator, previous


def _add_pending(
    group: Group, target: Invitee, role: CollaboratorRole, now: datetime
) -> Collaborator:
    if group.is_owner(target.user_id) or group.get_collaborator(target.user_id):
        raise AlreadyMemberError(target.user_id)

    collaborator = Collaborator(
        user_id=target.user_id,
        name=target.name,
        email=target.email,
        picture=target.picture,
        role=role,
        status=CollaboratorStatus.PENDING,
        invited_at=now,
    )
    group.collaborators.append(collaborator)
    return collaborator


def _require_pending(group: Group, user_id: str, transition: str) -> Collaborator:
    collaborator = group.get_collaborator(user_id)
    if collaborator is None:
        raise NotInvitedError(user_id)
    if not collaborator.is_pending:
        raise InvalidTransitionError(user_id, collaborator.status.value, transition)
    return collaborator
