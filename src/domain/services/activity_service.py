"""Activity service layer for recording and querying group activity."""

from collections.abc import Callable
from typing import Any
from uuid import UUID

import structlog

from core.exceptions import ForbiddenError
from domain.entities.activity import ActivityLog
from domain.entities.group_ref import NamedRef, parse_group_ref
from domain.policies.authorization import has_access
from domain.repositories.unit_of_work import IUnitOfWork

logger = structlog.get_logger(__name__)


class ActivityService:
    """Service layer for activity logging and retrieval.

    Activity is notified, never gated: :meth:`record` runs in its own Unit of
    Work after the triggering operation committed, and a failure here is
    logged and swallowed so it cannot undo that operation.
    """

    def __init__(self, uow_factory: Callable[[], IUnitOfWork]) -> None:
        self._uow_factory = uow_factory

    async def record(
        self,
        actor_id: str,
        action: str,
        actor_name: str | None = None,
        group_tag: str | None = None,
        task_id: UUID | None = None,
        task_title: str | None = None,
        from_status: str | None = None,
        to_status: str | None = None,
        target_user_id: str | None = None,
        changes: dict[str, Any] | None = None,
        metadata: dict[str, Any] | None = None,
    ) -> ActivityLog | None:
        """Persist one activity entry. Returns None if it could not be stored."""
        activity = ActivityLog(
            actor_id=actor_id,
            actor_name=actor_name,
            action=action,
            group_tag=parse_group_ref(group_tag).tag,
            task_id=task_id,
            task_title=task_title,
            from_status=from_status,
            to_status=to_status,
            target_user_id=target_user_id,
            changes=changes,
            metadata=metadata,
        )
        try:
            async with self._uow_factory() as uow:
                created = await uow.activities.create(activity)
                await uow.commit()
                return created
        except Exception:
            logger.exception(
                "activity_log_failed",
                action=action,
                actor_id=actor_id,
                group_tag=activity.group_tag,
            )
            return None

    async def list_for_user(
        self,
        user_id: str,
        group_tag: str | None = None,
        limit: int = 50,
    ) -> list[ActivityLog]:
        """Get the activity feed visible to ``user_id``, newest first.

        ``group_tag`` narrows the feed to one group (which requires access) or,
        with ``@personal``, to the user's own group-less activity. Without it
        the feed covers personal activity plus every accessible group.
        """
        async with self._uow_factory() as uow:
            if group_tag is not None:
                ref = parse_group_ref(group_tag)
                if not isinstance(ref, NamedRef):
                    return await uow.activities.get_personal_for_user(user_id, limit=limit)  # type: ignore[no-any-return]

                group = await uow.groups.get_by_tag(ref.tag)
                if not has_access(group, user_id):
                    raise ForbiddenError(
                        "You do not have access to this group's activity",
                        action="view_activity",
                    )
                return await uow.activities.get_for_group_tags([ref.tag], limit=limit)  # type: ignore[no-any-return]

            groups = await uow.groups.get_for_user(user_id)
            tags = [g.tag for g in groups if has_access(g, user_id)]
            personal = await uow.activities.get_personal_for_user(user_id, limit=limit)
            grouped = await uow.activities.get_for_group_tags(tags, limit=limit) if tags else []

        merged = sorted([*personal, *grouped], key=lambda a: a.created_at, reverse=True)
        return merged[:limit]

    async def purge_group_tag(self, tag: str) -> int:
        """Remove all activity bearing a deleted group's tag."""
        async with self._uow_factory() as uow:
            deleted = await uow.activities.delete_for_group_tag(tag)
            await uow.commit()
        logger.info("group_activity_purged", group_tag=tag, deleted_count=deleted)
        return deleted  # type: ignore[no-any-return]

    @staticmethod
    def compute_diff(
        old_dict: dict[str, Any], new_dict: dict[str, Any]
    ) -> dict[str, dict[str, Any]]:
        """Compute field-level diff between two dictionaries.

        Args:
            old_dict: The original values.
            new_dict: The updated values.

        Returns:
            Dict of changed fields: {field_name: {"old": old_val, "new": new_val}}
        """
        diff: dict[str, dict[str, Any]] = {}
        all_keys = set(old_dict.keys()) | set(new_dict.keys())

        for key in all_keys:
            old_val = old_dict.get(key)
            new_val = new_dict.get(key)
            if old_val != new_val:
                diff[key] = {"old": old_val, "new": new_val}

        return diff
