"""SQLAlchemy implementation of Task repository."""

from typing import Any
from uuid import UUID

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from domain.entities.task import AssigneeSnapshot, Task, TaskPriority, TaskStatus
from infrastructure.database.models import TaskModel


class SQLAlchemyTaskRepository:
    """SQLAlchemy implementation of ITaskRepository."""

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def get(self, id: UUID) -> Task | None:
        """Get a task by ID."""
        stmt = select(TaskModel).where(TaskModel.id == id)
        result = await self._session.execute(stmt)
        model = result.scalar_one_or_none()
        return self._to_entity(model) if model else None

    async def get_personal_for_user(self, user_id: str) -> list[Task]:
        """Get the user's tasks that belong to no group."""
        stmt = (
            select(TaskModel)
            .where(TaskModel.owner_id == user_id, TaskModel.group_tag.is_(None))
            .order_by(TaskModel.created_at.desc())
        )
        result = await self._session.execute(stmt)
        return [self._to_entity(model) for model in result.scalars()]

    async def get_for_group_tags(self, tags: list[str]) -> list[Task]:
        """Get all tasks tagged with any of the given group tags."""
        if not tags:
            return []
        stmt = (
            select(TaskModel)
            .where(TaskModel.group_tag.in_(tags))
            .order_by(TaskModel.created_at.desc())
        )
        result = await self._session.execute(stmt)
        return [self._to_entity(model) for model in result.scalars()]

    async def create(self, task: Task) -> Task:
        """Create a new task."""
        model = self._to_model(task)
        self._session.add(model)
        await self._session.flush()
        await self._session.refresh(model)
        return self._to_entity(model)

    async def update(self, task: Task) -> Task:
        """Update an existing task."""
        stmt = select(TaskModel).where(TaskModel.id == task.id)
        result = await self._session.execute(stmt)
        model = result.scalar_one_or_none()

        if not model:
            raise ValueError(f"Task {task.id} not found")

        model.title = task.title
        model.description = task.description
        model.category = task.category
        model.priority = task.priority.value
        model.status = task.status.value
        model.due_date = task.due_date
        model.progress = task.progress
        model.assigned_to = list(task.assigned_to)
        model.assignee_snapshots = self._snapshots_to_json(task.assignee_snapshots)
        model.updated_at = task.updated_at

        await self._session.flush()
        return self._to_entity(model)

    async def delete(self, id: UUID) -> bool:
        """Delete a task."""
        stmt = select(TaskModel).where(TaskModel.id == id)
        result = await self._session.execute(stmt)
        model = result.scalar_one_or_none()

        if not model:
            return False

        await self._session.delete(model)
        await self._session.flush()
        return True

    async def has_group_tag(self, tag: str) -> bool:
        """Whether any task still bears ``tag``."""
        stmt = select(TaskModel.id).where(TaskModel.group_tag == tag).limit(1)
        result = await self._session.execute(stmt)
        return result.first() is not None

    async def delete_for_group_tag(self, tag: str) -> int:
        """Delete every task bearing ``tag``. Returns the number removed."""
        stmt = delete(TaskModel).where(TaskModel.group_tag == tag)
        result = await self._session.execute(stmt)
        return result.rowcount or 0  # type: ignore[attr-defined]

    def _to_entity(self, model: TaskModel) -> Task:
        """Convert ORM model to domain entity."""
        return Task(
            id=model.id,
            owner_id=model.owner_id,
            title=model.title,
            description=model.description,
            category=model.category,
            priority=TaskPriority(model.priority),
            status=TaskStatus(model.status),
            due_date=model.due_date,
            progress=model.progress,
            group_tag=model.group_tag,
            assigned_to=list(model.assigned_to or []),
            assignee_snapshots=[
                AssigneeSnapshot(
                    user_id=item["user_id"],
                    name=item.get("name"),
                    email=item.get("email"),
                    picture=item.get("picture"),
                )
                for item in model.assignee_snapshots or []
            ],
            created_at=model.created_at,
            updated_at=model.updated_at,
        )

    def _to_model(self, entity: Task) -> TaskModel:
        """Convert domain entity to ORM model."""
        return TaskModel(
            id=entity.id,
            owner_id=entity.owner_id,
            title=entity.title,
            description=entity.description,
            category=entity.category,
            priority=entity.priority.value,
            status=entity.status.value,
            due_date=entity.due_date,
            progress=entity.progress,
            group_tag=entity.group_tag,
            assigned_to=list(entity.assigned_to),
            assignee_snapshots=self._snapshots_to_json(entity.assignee_snapshots),
            created_at=entity.created_at,
            updated_at=entity.updated_at,
        )

    @staticmethod
    def _snapshots_to_json(snapshots: list[AssigneeSnapshot]) -> list[dict[str, Any]]:
        return [
            {
                "user_id": s.user_id,
                "name": s.name,
                "email": s.email,
                "picture": s.picture,
            }
            for s in snapshots
        ]
