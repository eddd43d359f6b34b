"""Group repository protocol."""

from typing import Protocol
from uuid import UUID

from domain.entities.group import Group


class IGroupRepository(Protocol):
    """Repository interface for Group entities (roster included)."""

    async def get(self, id: UUID) -> Group | None:
        """Get a group with its roster by ID."""
        ...

    async def get_by_tag(self, tag: str) -> Group | None:
        """Get a group with its roster by tag."""
        ...

    async def get_for_user(self, user_id: str) -> list[Group]:
        """Get groups the user owns or has any roster entry in."""
        ...

    async def create(self, group: Group) -> Group:
        """Create a new group and its initial roster."""
        ...

    async def save(self, group: Group) -> Group:
        """Persist the group and its whole roster, bumping ``version``.

        Raises GroupVersionConflictError if the stored version no longer
        matches ``group.version``.
        """
        ...

    async def delete(self, id: UUID) -> bool:
        """Delete a group (cascade deletes its roster)."""
        ...
