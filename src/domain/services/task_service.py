"""Task service layer with business logic."""

from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Optional
from uuid import UUID

import structlog

from core.exceptions import (
    ForbiddenError,
    GroupNotFoundError,
    InvalidAssigneeError,
    TaskNotFoundError,
)
from domain.entities.activity import Actions
from domain.entities.group import Group
from domain.entities.group_ref import NamedRef, PersonalRef, parse_group_ref
from domain.entities.task import Task, TaskPriority, TaskStatus
from domain.policies.assignment import (
    AssigneePartition,
    active_member_ids,
    build_snapshots,
    reconcile_assignees,
)
from domain.policies.authorization import TaskAction, can_act, can_create_task, has_access
from domain.policies.visibility import ViewMode, filter_visible, tags_in_view
from domain.repositories.unit_of_work import IUnitOfWork
from domain.services.activity_service import ActivityService

logger = structlog.get_logger(__name__)

_UNSET: Any = ...


@dataclass
class TaskBoard:
    """Tasks visible in one view, with the groups needed to judge them."""

    tasks: list[Task] = field(default_factory=list)
    groups_by_tag: dict[str, Group] = field(default_factory=dict)

    def group_for(self, task: Task) -> Group | None:
        return self.groups_by_tag.get(task.group_tag) if task.group_tag else None


class TaskService:
    """Service layer for Task business logic.

    Personal tasks are private to their owner. Group tasks are gated by the
    caller's effective role in the group named by the task's tag.
    """

    def __init__(
        self,
        uow_factory: Callable[[], IUnitOfWork],
        activity_service: Optional["ActivityService"] = None,
    ) -> None:
        self._uow_factory = uow_factory
        self._activity = activity_service

    async def list_tasks(self, user_id: str, view: ViewMode = None) -> list[Task]:
        """Get the tasks visible to ``user_id`` in ``view``."""
        board = await self.get_board(user_id, view)
        return board.tasks

    async def get_board(self, user_id: str, view: ViewMode = None) -> TaskBoard:
        """Get the visible tasks of a view plus the groups they belong to.

        ``None`` is the aggregate board, ``PersonalRef`` the personal board and
        a ``NamedRef`` one group's board.
        """
        async with self._uow_factory() as uow:
            if isinstance(view, NamedRef):
                group = await uow.groups.get_by_tag(view.tag)
                accessible = [group] if group and has_access(group, user_id) else []
            elif view is None:
                groups = await uow.groups.get_for_user(user_id)
                accessible = [g for g in groups if has_access(g, user_id)]
            else:
                accessible = []

            candidates: list[Task] = []
            if not isinstance(view, NamedRef):
                candidates = await uow.tasks.get_personal_for_user(user_id)
            tags = tags_in_view(view, accessible)
            if tags:
                grouped = await uow.tasks.get_for_group_tags(tags)
                candidates = [*candidates, *grouped]

        groups_by_tag = {g.tag: g for g in accessible}
        return TaskBoard(
            tasks=filter_visible(candidates, user_id, view, groups_by_tag),
            groups_by_tag=groups_by_tag,
        )

    async def get_by_id(self, task_id: UUID, user_id: str) -> Task:
        """Get a task the caller can see."""
        async with self._uow_factory() as uow:
            task, _ = await self._load(uow, task_id, user_id)
            return task

    async def get_with_group(self, task_id: UUID, user_id: str) -> tuple[Task, Group | None]:
        """Get a task together with its group (``None`` for personal tasks)."""
        async with self._uow_factory() as uow:
            return await self._load(uow, task_id, user_id)

    async def create(
        self,
        user_id: str,
        title: str,
        description: str = "",
        category: str = "General",
        priority: TaskPriority = TaskPriority.MEDIUM,
        status: TaskStatus = TaskStatus.PENDING,
        due_date: datetime | None = None,
        progress: int | None = None,
        group_tag: str | None = None,
        assigned_to: list[str] | None = None,
        actor_name: str | None = None,
    ) -> Task:
        """Create a task. Group tasks require a role that may create tasks."""
        ref = parse_group_ref(group_tag)
        assignees = list(dict.fromkeys(assigned_to or []))

        async with self._uow_factory() as uow:
            task = Task(
                owner_id=user_id,
                title=title,
                description=description,
                category=category,
                priority=priority,
                status=status,
                due_date=due_date,
                progress=100 if status == TaskStatus.COMPLETED else progress,
                group_tag=ref.tag,
            )

            if isinstance(ref, NamedRef):
                group = await uow.groups.get_by_tag(ref.tag)
                if not group:
                    raise GroupNotFoundError(ref.tag)
                if not can_create_task(group, user_id):
                    raise ForbiddenError(
                        "You do not have permission to create tasks in this group",
                        action="create_task",
                    )
                self._check_assignable(group, assignees)
                task.assigned_to = assignees
                task.assignee_snapshots = build_snapshots(group, assignees)
            elif assignees:
                raise InvalidAssigneeError(assignees)

            created = await uow.tasks.create(task)
            await uow.commit()

        logger.info("task_created", task_id=str(created.id), group_tag=created.group_tag, actor_id=user_id)
        await self._notify(
            actor_id=user_id,
            actor_name=actor_name,
            action=Actions.TASK_CREATED,
            group_tag=created.group_tag,
            task_id=created.id,
            task_title=created.title,
            to_status=created.status.value,
        )
        return created

    async def update(
        self,
        task_id: UUID,
        user_id: str,
        title: str | None = None,
        description: str | None = None,
        category: str | None = None,
        priority: TaskPriority | None = None,
        due_date: Any = _UNSET,  # Sentinel to detect explicit None
        progress: int | None = None,
        actor_name: str | None = None,
    ) -> Task:
        """Edit a task's fields."""
        async with self._uow_factory() as uow:
            task, group = await self._load(uow, task_id, user_id)
            self._require(task, user_id, group, TaskAction.EDIT)

            old_state = self._snapshot_state(task)
            if title is not None:
                task.title = title
            if description is not None:
                task.description = description
            if category is not None:
                task.category = category
            if priority is not None:
                task.priority = priority
            if due_date is not _UNSET:
                task.due_date = due_date
            if progress is not None:
                task.progress = progress
            task.updated_at = datetime.utcnow()

            updated = await uow.tasks.update(task)
            await uow.commit()

        changes = ActivityService.compute_diff(old_state, self._snapshot_state(updated))
        if changes:
            await self._notify(
                actor_id=user_id,
                actor_name=actor_name,
                action=Actions.TASK_UPDATED,
                group_tag=updated.group_tag,
                task_id=updated.id,
                task_title=updated.title,
                changes=changes,
            )
        return updated

    async def move(
        self,
        task_id: UUID,
        user_id: str,
        status: TaskStatus,
        actor_name: str | None = None,
    ) -> Task:
        """Drag a task to another board column."""
        async with self._uow_factory() as uow:
            task, group = await self._load(uow, task_id, user_id)
            self._require(task, user_id, group, TaskAction.DRAG)

            previous = task.move_to(status)
            updated = await uow.tasks.update(task)
            await uow.commit()

        if previous != status:
            logger.info(
                "task_moved",
                task_id=str(task_id),
                from_status=previous.value,
                to_status=status.value,
                actor_id=user_id,
            )
            await self._notify(
                actor_id=user_id,
                actor_name=actor_name,
                action=Actions.TASK_MOVED,
                group_tag=updated.group_tag,
                task_id=updated.id,
                task_title=updated.title,
                from_status=previous.value,
                to_status=status.value,
            )
        return updated

    async def update_progress(
        self,
        task_id: UUID,
        user_id: str,
        progress: int,
        actor_name: str | None = None,
    ) -> Task:
        """Set a task's progress percentage."""
        return await self.update(task_id, user_id, progress=progress, actor_name=actor_name)

    async def update_assignees(
        self,
        task_id: UUID,
        user_id: str,
        assigned_to: list[str],
        actor_name: str | None = None,
    ) -> Task:
        """Replace a group task's assignee list.

        Newly added assignees must be active members. Assignees already on the
        task are kept even if they have since left the group; their stored
        snapshot is preserved so they still render as exited.
        """
        assignees = list(dict.fromkeys(assigned_to))

        async with self._uow_factory() as uow:
            task, group = await self._load(uow, task_id, user_id)
            self._require(task, user_id, group, TaskAction.EDIT)
            if group is None:
                if assignees:
                    raise InvalidAssigneeError(assignees)
                return task

            added = [uid for uid in assignees if not task.is_assigned(uid)]
            self._check_assignable(group, added)

            active = active_member_ids(group)
            refreshed = {s.user_id: s for s in build_snapshots(group, [u for u in assignees if u in active])}
            snapshots = []
            for uid in assignees:
                snapshot = refreshed.get(uid) or task.snapshot_for(uid)
                if snapshot is not None:
                    snapshots.append(snapshot)

            old_assignees = list(task.assigned_to)
            task.assigned_to = assignees
            task.assignee_snapshots = snapshots
            task.updated_at = datetime.utcnow()
            updated = await uow.tasks.update(task)
            await uow.commit()

        if old_assignees != assignees:
            await self._notify(
                actor_id=user_id,
                actor_name=actor_name,
                action=Actions.TASK_UPDATED,
                group_tag=updated.group_tag,
                task_id=updated.id,
                task_title=updated.title,
                changes={"assigned_to": {"old": old_assignees, "new": assignees}},
            )
        return updated

    async def delete(self, task_id: UUID, user_id: str, actor_name: str | None = None) -> bool:
        """Delete a task."""
        async with self._uow_factory() as uow:
            task, group = await self._load(uow, task_id, user_id)
            self._require(task, user_id, group, TaskAction.DELETE)

            deleted = await uow.tasks.delete(task_id)
            await uow.commit()

        logger.info("task_deleted", task_id=str(task_id), group_tag=task.group_tag, actor_id=user_id)
        await self._notify(
            actor_id=user_id,
            actor_name=actor_name,
            action=Actions.TASK_DELETED,
            group_tag=task.group_tag,
            task_id=task.id,
            task_title=task.title,
        )
        return deleted  # type: ignore[no-any-return]

    async def get_assignees(self, task_id: UUID, user_id: str) -> AssigneePartition:
        """Split a task's assignees into active, exited and pending members."""
        task, group = await self.get_with_group(task_id, user_id)
        return reconcile_assignees(task, group)

    async def purge_group_tag(self, tag: str) -> int:
        """Delete every task bearing a deleted group's tag."""
        async with self._uow_factory() as uow:
            deleted = await uow.tasks.delete_for_group_tag(tag)
            await uow.commit()
        logger.info("group_tasks_purged", group_tag=tag, deleted_count=deleted)
        return deleted  # type: ignore[no-any-return]

    # --- Internal helpers ---

    async def _load(
        self, uow: IUnitOfWork, task_id: UUID, user_id: str
    ) -> tuple[Task, Group | None]:
        """Load a task and its group, hiding tasks the caller cannot see."""
        task = await uow.tasks.get(task_id)
        if not task:
            raise TaskNotFoundError(str(task_id))

        ref = task.group_ref
        if isinstance(ref, PersonalRef):
            if task.owner_id != user_id:
                raise TaskNotFoundError(str(task_id))
            return task, None

        group = await uow.groups.get_by_tag(ref.tag)
        if not has_access(group, user_id):
            raise TaskNotFoundError(str(task_id))
        return task, group

    @staticmethod
    def _require(task: Task, user_id: str, group: Group | None, action: TaskAction) -> None:
        if not can_act(task, user_id, group, action):
            raise ForbiddenError(
                f"You do not have permission to {action.value} this task",
                action=f"{action.value}_task",
            )

    @staticmethod
    def _check_assignable(group: Group, user_ids: list[str]) -> None:
        active = active_member_ids(group)
        invalid = [uid for uid in user_ids if uid not in active]
        if invalid:
            raise InvalidAssigneeError(invalid)

    @staticmethod
    def _snapshot_state(task: Task) -> dict[str, Any]:
        return {
            "title": task.title,
            "description": task.description,
            "category": task.category,
            "priority": task.priority.value,
            "due_date": task.due_date.isoformat() if task.due_date else None,
            "progress": task.progress,
        }

    async def _notify(self, **kwargs: Any) -> None:
        if self._activity:
            await self._activity.record(**kwargs)
