"""SQLAlchemy implementation of Activity Log repository."""

from typing import List

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from domain.entities.activity import ActivityLog
from infrastructure.database.models import ActivityLogModel


class SQLAlchemyActivityRepository:
    """SQLAlchemy implementation of IActivityRepository."""

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def create(self, activity: ActivityLog) -> ActivityLog:
        """Create a new activity log entry."""
        model = self._to_model(activity)
        self._session.add(model)
        await self._session.flush()
        await self._session.refresh(model)
        return self._to_entity(model)

    async def get_for_group_tags(
        self,
        tags: List[str],
        limit: int = 50,
    ) -> List[ActivityLog]:
        """Get activity log entries for the given groups, newest first."""
        if not tags:
            return []
        stmt = (
            select(ActivityLogModel)
            .where(ActivityLogModel.group_tag.in_(tags))
            .order_by(ActivityLogModel.created_at.desc())
            .limit(limit)
        )
        result = await self._session.execute(stmt)
        return [self._to_entity(model) for model in result.scalars()]

    async def get_personal_for_user(
        self,
        user_id: str,
        limit: int = 50,
    ) -> List[ActivityLog]:
        """Get the user's own entries outside any group, newest first."""
        stmt = (
            select(ActivityLogModel)
            .where(
                ActivityLogModel.actor_id == user_id,
                ActivityLogModel.group_tag.is_(None),
            )
            .order_by(ActivityLogModel.created_at.desc())
            .limit(limit)
        )
        result = await self._session.execute(stmt)
        return [self._to_entity(model) for model in result.scalars()]

    async def has_group_tag(self, tag: str) -> bool:
        """Whether any entry still bears ``tag``."""
        stmt = select(ActivityLogModel.id).where(ActivityLogModel.group_tag == tag).limit(1)
        result = await self._session.execute(stmt)
        return result.first() is not None

    async def delete_for_group_tag(self, tag: str) -> int:
        """Delete every entry bearing ``tag``."""
        stmt = delete(ActivityLogModel).where(ActivityLogModel.group_tag == tag)
        result = await self._session.execute(stmt)
        return result.rowcount or 0  # type: ignore[attr-defined]

    def _to_entity(self, model: ActivityLogModel) -> ActivityLog:
        """Convert ORM model to domain entity."""
        return ActivityLog(
            id=model.id,
            actor_id=model.actor_id,
            actor_name=model.actor_name,
            action=model.action,
            group_tag=model.group_tag,
            task_id=model.task_id,
            task_title=model.task_title,
            from_status=model.from_status,
            to_status=model.to_status,
            target_user_id=model.target_user_id,
            changes=model.changes,
            metadata=model.metadata_,
            created_at=model.created_at,
        )

    def _to_model(self, entity: ActivityLog) -> ActivityLogModel:
        """Convert domain entity to ORM model."""
        return ActivityLogModel(
            id=entity.id,
            actor_id=entity.actor_id,
            actor_name=entity.actor_name,
            action=entity.action,
            group_tag=entity.group_tag,
            task_id=entity.task_id,
            task_title=entity.task_title,
            from_status=entity.from_status,
            to_status=entity.to_status,
            target_user_id=entity.target_user_id,
            changes=entity.changes,
            metadata_=entity.metadata,
            created_at=entity.created_at,
        )
