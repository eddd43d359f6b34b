"""Task repository protocol."""

from typing import Protocol
from uuid import UUID

from domain.entities.task import Task


class ITaskRepository(Protocol):
    """Repository interface for Task entities."""

    async def get(self, id: UUID) -> Task | None:
        """Get a task by ID."""
        ...

    async def get_personal_for_user(self, user_id: str) -> list[Task]:
        """Get the user's tasks that belong to no group."""
        ...

    async def get_for_group_tags(self, tags: list[str]) -> list[Task]:
        """Get all tasks tagged with any of the given group tags."""
        ...

    async def create(self, task: Task) -> Task:
        """Create a new task."""
        ...

    async def update(self, task: Task) -> Task:
        """Update an existing task."""
        ...

    async def delete(self, id: UUID) -> bool:
        """Delete a task and return success status."""
        ...

    async def has_group_tag(self, tag: str) -> bool:
        """Whether any task still bears ``tag``."""
        ...

    async def delete_for_group_tag(self, tag: str) -> int:
        """Delete every task bearing ``tag``. Returns the number removed."""
        ...
