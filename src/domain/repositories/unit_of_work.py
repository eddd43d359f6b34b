"""Unit of Work protocol."""

from typing import Any, Protocol

from domain.repositories.activity_repository import IActivityRepository
from domain.repositories.group_repository import IGroupRepository
from domain.repositories.task_repository import ITaskRepository


class IUnitOfWork(Protocol):
    """One transaction over groups, tasks and the activity log.

    A group's roster is written whole by ``groups.save`` inside the
    transaction; leaving the context without ``commit`` discards everything.
    """

    groups: IGroupRepository
    tasks: ITaskRepository
    activities: IActivityRepository

    async def commit(self) -> None: ...

    async def rollback(self) -> None: ...

    async def __aenter__(self) -> "IUnitOfWork": ...

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None: ...
