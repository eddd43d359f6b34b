"""Group service layer: group storage and the membership lifecycle."""

from collections.abc import Awaitable, Callable, Sequence
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Optional, TypeVar
from uuid import UUID

import structlog
from sqlalchemy.exc import IntegrityError

from core.config import settings
from core.exceptions import (
    DuplicateTagError,
    ForbiddenError,
    GroupNotFoundError,
    GroupVersionConflictError,
)
from domain.entities.activity import Actions
from domain.entities.group import Collaborator, CollaboratorRole, Group
from domain.policies import membership
from domain.policies.authorization import has_access, permissions, resolve_role
from domain.policies.membership import Invitee
from domain.repositories.unit_of_work import IUnitOfWork
from domain.services.activity_service import ActivityService

logger = structlog.get_logger(__name__)

_T = TypeVar("_T")


@dataclass(frozen=True)
class GroupDeleted:
    """Signal emitted after a group is deleted.

    Tasks and activity bearing ``tag`` must be dissociated or purged by the
    listeners; this service does not touch them itself.
    """

    group_id: UUID
    tag: str
    deleted_by: str


GroupDeletedListener = Callable[[GroupDeleted], Awaitable[Any]]


@dataclass
class PendingInvitation:
    """A group the user has been invited to but not yet joined."""

    group: Group
    collaborator: Collaborator


@dataclass
class GroupOverview:
    """Groups a user can open plus the invitations awaiting an answer."""

    groups: list[Group] = field(default_factory=list)
    pending_invitations: list[PendingInvitation] = field(default_factory=list)


class GroupService:
    """Service layer for groups and their rosters.

    Every roster mutation is a load, pure transition, save cycle inside one
    Unit of Work. ``save`` checks the group's version, so concurrent writers
    on the same group serialize: the loser reloads and re-applies the
    transition, up to ``max_attempts`` times.
    """

    def __init__(
        self,
        uow_factory: Callable[[], IUnitOfWork],
        activity_service: Optional["ActivityService"] = None,
        on_deleted: Sequence[GroupDeletedListener] = (),
        max_attempts: int | None = None,
    ) -> None:
        self._uow_factory = uow_factory
        self._activity = activity_service
        self._on_deleted = list(on_deleted)
        self._max_attempts = max_attempts or settings.group_write_max_attempts

    def add_delete_listener(self, listener: GroupDeletedListener) -> None:
        self._on_deleted.append(listener)

    # --- Queries ---

    async def list_for_user(self, user_id: str) -> GroupOverview:
        """Groups the user owns or has joined, plus their pending invitations."""
        async with self._uow_factory() as uow:
            groups = await uow.groups.get_for_user(user_id)

        overview = GroupOverview()
        for group in groups:
            if has_access(group, user_id):
                overview.groups.append(group)
                continue
            collaborator = group.get_collaborator(user_id)
            if collaborator is not None and collaborator.is_pending:
                overview.pending_invitations.append(PendingInvitation(group, collaborator))
        return overview

    async def get_by_id(self, group_id: UUID, user_id: str) -> Group:
        """Get a group. Members and pending invitees may read it."""
        async with self._uow_factory() as uow:
            group = await uow.groups.get(group_id)
            if not group:
                raise GroupNotFoundError(str(group_id))

        self._require_reader(group, user_id)
        return group

    async def get_members(self, group_id: UUID, user_id: str) -> list[Collaborator]:
        """Get the roster of a group (owner excluded)."""
        group = await self.get_by_id(group_id, user_id)
        return list(group.collaborators)

    # --- Group store ---

    async def create(
        self,
        user_id: str,
        name: str,
        tag: str,
        color: str | None = None,
        collaborators: list[tuple[Invitee, CollaboratorRole]] | None = None,
        owner_name: str | None = None,
        owner_email: str | None = None,
    ) -> Group:
        """Create a group owned by ``user_id``; initial collaborators start pending."""
        group = membership.new_group(
            owner_id=user_id,
            name=name,
            tag=tag,
            color=color,
            initial_collaborators=collaborators,
            owner_name=owner_name,
            owner_email=owner_email,
        )

        async with self._uow_factory() as uow:
            if await uow.groups.get_by_tag(group.tag):
                raise DuplicateTagError(group.tag)
            # A deleted group's tasks and activity keep the tag until the
            # cascade purges them; a new group must not inherit them.
            if await uow.tasks.has_group_tag(group.tag) or await uow.activities.has_group_tag(
                group.tag
            ):
                logger.warning("group_tag_still_referenced", group_tag=group.tag, actor_id=user_id)
                raise DuplicateTagError(group.tag)
            try:
                created = await uow.groups.create(group)
                await uow.commit()
            except IntegrityError as exc:
                await uow.rollback()
                # Lost a race for the unique tag.
                orig = str(exc.orig).lower() if exc.orig else ""
                if "unique" in orig or "duplicate" in orig:
                    raise DuplicateTagError(group.tag) from exc
                raise

        logger.info("group_created", group_id=str(created.id), group_tag=created.tag, actor_id=user_id)
        await self._notify(
            actor_id=user_id,
            actor_name=owner_name,
            action=Actions.GROUP_CREATED,
            group_tag=created.tag,
            metadata={"group_name": created.name},
        )
        for collaborator in created.collaborators:
            await self._notify(
                actor_id=user_id,
                actor_name=owner_name,
                action=Actions.MEMBER_INVITED,
                group_tag=created.tag,
                target_user_id=collaborator.user_id,
                metadata={"role": collaborator.role.value},
            )
        return created

    async def update(
        self,
        group_id: UUID,
        user_id: str,
        name: str | None = None,
        color: str | None = None,
        actor_name: str | None = None,
    ) -> Group:
        """Rename or recolor a group. Requires owner or admin."""

        def apply(group: Group) -> dict[str, dict[str, Any]]:
            if not permissions(resolve_role(group, user_id)).can_manage_members:
                raise ForbiddenError("Only the owner or an admin can edit the group", action="update")
            old_state = {"name": group.name, "color": group.color}
            if name is not None:
                group.name = name
            if color is not None:
                group.color = color
            return ActivityService.compute_diff(old_state, {"name": group.name, "color": group.color})

        group, changes = await self._mutate(group_id, apply)
        if changes:
            await self._notify(
                actor_id=user_id,
                actor_name=actor_name,
                action=Actions.GROUP_UPDATED,
                group_tag=group.tag,
                changes=changes,
            )
        return group

    async def delete(self, group_id: UUID, user_id: str, actor_name: str | None = None) -> None:
        """Delete a group. Owner only. Emits GroupDeleted to the listeners."""
        async with self._uow_factory() as uow:
            group = await uow.groups.get(group_id)
            if not group:
                raise GroupNotFoundError(str(group_id))
            if not permissions(resolve_role(group, user_id)).can_delete_group:
                raise ForbiddenError("Only the owner can delete the group", action="delete_group")

            if not await uow.groups.delete(group_id):
                raise GroupNotFoundError(str(group_id))
            await uow.commit()

        logger.info("group_deleted", group_id=str(group_id), group_tag=group.tag, actor_id=user_id)
        event = GroupDeleted(group_id=group_id, tag=group.tag, deleted_by=user_id)
        for listener in self._on_deleted:
            try:
                await listener(event)
            except Exception:
                # Tasks still carrying the tag are invisible until cleaned up.
                logger.exception("group_delete_cascade_failed", group_id=str(group_id), group_tag=group.tag)

        await self._notify(
            actor_id=user_id,
            actor_name=actor_name,
            action=Actions.GROUP_DELETED,
            metadata={"group_tag": group.tag, "group_name": group.name},
        )

    # --- Membership lifecycle ---

    async def invite(
        self,
        group_id: UUID,
        inviter_id: str,
        target: Invitee,
        role: CollaboratorRole = CollaboratorRole.VIEWER,
        actor_name: str | None = None,
    ) -> Group:
        """Invite a user. Requires owner or admin."""
        group, collaborator = await self._mutate(
            group_id, lambda g: membership.invite(g, inviter_id, target, role)
        )
        logger.info(
            "member_invited",
            group_id=str(group_id),
            actor_id=inviter_id,
            target_user_id=target.user_id,
            role=role.value,
        )
        await self._notify(
            actor_id=inviter_id,
            actor_name=actor_name,
            action=Actions.MEMBER_INVITED,
            group_tag=group.tag,
            target_user_id=collaborator.user_id,
            metadata={"role": collaborator.role.value},
        )
        return group

    async def accept(self, group_id: UUID, user_id: str, actor_name: str | None = None) -> Group:
        """Accept the caller's pending invitation."""
        group, collaborator = await self._mutate(group_id, lambda g: membership.accept(g, user_id))
        logger.info("invitation_accepted", group_id=str(group_id), actor_id=user_id)
        await self._notify(
            actor_id=user_id,
            actor_name=actor_name or collaborator.name,
            action=Actions.MEMBER_JOINED,
            group_tag=group.tag,
            target_user_id=user_id,
            metadata={"role": collaborator.role.value},
        )
        return group

    async def decline(self, group_id: UUID, user_id: str, actor_name: str | None = None) -> None:
        """Decline the caller's pending invitation; the roster entry is removed."""
        group, collaborator = await self._mutate(group_id, lambda g: membership.decline(g, user_id))
        logger.info("invitation_declined", group_id=str(group_id), actor_id=user_id)
        await self._notify(
            actor_id=user_id,
            actor_name=actor_name or collaborator.name,
            action=Actions.MEMBER_DECLINED,
            group_tag=group.tag,
            target_user_id=user_id,
        )

    async def remove_member(
        self,
        group_id: UUID,
        acting_user_id: str,
        target_user_id: str,
        actor_name: str | None = None,
    ) -> Group:
        """Remove another member or revoke an invitation. Requires owner or admin."""
        group, collaborator = await self._mutate(
            group_id, lambda g: membership.remove(g, acting_user_id, target_user_id)
        )
        logger.info(
            "member_removed",
            group_id=str(group_id),
            actor_id=acting_user_id,
            target_user_id=target_user_id,
        )
        await self._notify(
            actor_id=acting_user_id,
            actor_name=actor_name,
            action=Actions.MEMBER_REMOVED,
            group_tag=group.tag,
            target_user_id=target_user_id,
            metadata={"role": collaborator.role.value, "status": collaborator.status.value},
        )
        return group

    async def exit(self, group_id: UUID, user_id: str, actor_name: str | None = None) -> None:
        """Leave a group the caller has joined. Owners cannot leave."""
        group, collaborator = await self._mutate(group_id, lambda g: membership.exit_group(g, user_id))
        logger.info("member_exited", group_id=str(group_id), actor_id=user_id)
        await self._notify(
            actor_id=user_id,
            actor_name=actor_name or collaborator.name,
            action=Actions.MEMBER_LEFT,
            group_tag=group.tag,
            target_user_id=user_id,
            metadata={"role": collaborator.role.value},
        )

    async def change_role(
        self,
        group_id: UUID,
        acting_user_id: str,
        target_user_id: str,
        role: CollaboratorRole,
        actor_name: str | None = None,
    ) -> Group:
        """Change a member's role. Requires owner or admin; the owner is immutable."""
        group, (collaborator, previous) = await self._mutate(
            group_id, lambda g: membership.change_role(g, acting_user_id, target_user_id, role)
        )
        logger.info(
            "member_role_changed",
            group_id=str(group_id),
            actor_id=acting_user_id,
            target_user_id=target_user_id,
            old_role=previous.value,
            new_role=role.value,
        )
        if previous != role:
            await self._notify(
                actor_id=acting_user_id,
                actor_name=actor_name,
                action=Actions.MEMBER_ROLE_CHANGED,
                group_tag=group.tag,
                target_user_id=target_user_id,
                changes={"role": {"old": previous.value, "new": collaborator.role.value}},
            )
        return group

    # --- Internal helpers ---

    async def _mutate(
        self, group_id: UUID, transition: Callable[[Group], _T]
    ) -> tuple[Group, _T]:
        """Load the group, apply ``transition`` and save, retrying on version conflicts."""
        for attempt in range(1, self._max_attempts + 1):
            try:
                async with self._uow_factory() as uow:
                    group = await uow.groups.get(group_id)
                    if not group:
                        raise GroupNotFoundError(str(group_id))

                    result = transition(group)
                    group.updated_at = datetime.utcnow()
                    saved = await uow.groups.save(group)
                    await uow.commit()
                    return saved, result
            except GroupVersionConflictError:
                logger.info("group_write_conflict", group_id=str(group_id), attempt=attempt)
        raise GroupVersionConflictError(str(group_id))

    @staticmethod
    def _require_reader(group: Group, user_id: str) -> None:
        if has_access(group, user_id):
            return
        collaborator = group.get_collaborator(user_id)
        if collaborator is not None and collaborator.is_pending:
            return
        raise ForbiddenError("You are not a member of this group", action="view_group")

    async def _notify(self, **kwargs: Any) -> None:
        if self._activity:
            await self._activity.record(**kwargs)

