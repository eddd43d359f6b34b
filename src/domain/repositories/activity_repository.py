"""Activity log repository protocol."""

from typing import List, Protocol

from domain.entities.activity import ActivityLog


class IActivityRepository(Protocol):
    """Repository interface for ActivityLog entities."""

    async def create(self, activity: ActivityLog) -> ActivityLog:
        """Create a new activity log entry."""
        ...

    async def get_for_group_tags(
        self,
        tags: List[str],
        limit: int = 50,
    ) -> List[ActivityLog]:
        """Get entries for the given groups, newest first."""
        ...

    async def get_personal_for_user(
        self,
        user_id: str,
        limit: int = 50,
    ) -> List[ActivityLog]:
        """Get the user's own entries outside any group, newest first."""
        ...

    async def has_group_tag(self, tag: str) -> bool:
        """Whether any entry still bears ``tag``."""
        ...

    async def delete_for_group_tag(self, tag: str) -> int:
        """Delete every entry bearing ``tag``. Returns the number removed."""
        ...
