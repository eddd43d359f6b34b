"""Dependency injection factories for API v1."""

from functools import lru_cache
from typing import Callable

from domain.services.activity_service import ActivityService
from domain.services.group_service import GroupDeleted, GroupService
from domain.services.task_service import TaskService
from infrastructure.database.session import async_session_factory
from infrastructure.database.sqlalchemy_uow import SQLAlchemyUnitOfWork


def get_uow_factory() -> Callable[[], SQLAlchemyUnitOfWork]:
    """Factory for creating Unit of Work instances."""

    def factory() -> SQLAlchemyUnitOfWork:
        return SQLAlchemyUnitOfWork(async_session_factory)

    return factory


@lru_cache
def get_activity_service() -> ActivityService:
    """Get Activity service instance."""
    return ActivityService(get_uow_factory())


@lru_cache
def get_task_service() -> TaskService:
    """Get Task service instance."""
    return TaskService(get_uow_factory(), activity_service=get_activity_service())


@lru_cache
def get_group_service() -> GroupService:
    """Get Group service instance, wired to purge a deleted group's data."""
    return build_group_service(
        get_uow_factory(),
        task_service=get_task_service(),
        activity_service=get_activity_service(),
    )


def build_group_service(
    uow_factory: Callable[[], SQLAlchemyUnitOfWork],
    task_service: TaskService,
    activity_service: ActivityService,
) -> GroupService:
    """Assemble a GroupService whose deletions cascade to tasks and activity."""

    async def purge_tasks(event: GroupDeleted) -> None:
        await task_service.purge_group_tag(event.tag)

    async def purge_activity(event: GroupDeleted) -> None:
        await activity_service.purge_group_tag(event.tag)

    return GroupService(
        uow_factory,
        activity_service=activity_service,
        on_deleted=[purge_tasks, purge_activity],
    )
