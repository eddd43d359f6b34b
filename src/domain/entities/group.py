"""Group (shared workspace) domain entities."""

from dataclasses import dataclass, field
from datetime import datetime
from enum import StrEnum
from uuid import UUID, uuid4


class CollaboratorRole(StrEnum):
    """Role a collaborator can be granted. Ownership is not a grantable role."""

    VIEWER = "viewer"
    EDITOR = "editor"
    ADMIN = "admin"


class CollaboratorStatus(StrEnum):
    """Invitation status of a roster entry."""

    PENDING = "pending"
    ACCEPTED = "accepted"
    DECLINED = "declined"


@dataclass
class Collaborator:
    """A non-owner roster entry."""

    user_id: str
    name: str
    email: str
    role: CollaboratorRole = CollaboratorRole.VIEWER
    status: CollaboratorStatus = CollaboratorStatus.PENDING
    invited_at: datetime = field(default_factory=datetime.utcnow)
    accepted_at: datetime | None = None
    picture: str | None = None

    @property
    def is_accepted(self) -> bool:
        return self.status == CollaboratorStatus.ACCEPTED

    @property
    def is_pending(self) -> bool:
        return self.status == CollaboratorStatus.PENDING


@dataclass
class Group:
    """Domain entity for a shared workspace.

    ``owner_id`` is the implicit top role and never appears in
    ``collaborators``; the roster holds at most one entry per user id.
    ``version`` increases by one on every persisted write.
    """

    tag: str
    name: str
    owner_id: str
    id: UUID = field(default_factory=uuid4)
    color: str = "#6366f1"
    owner_name: str | None = None
    owner_email: str | None = None
    collaborators: list[Collaborator] = field(default_factory=list)
    version: int = 1
    created_at: datetime = field(default_factory=datetime.utcnow)
    updated_at: datetime = field(default_factory=datetime.utcnow)

    def __post_init__(self) -> None:
        """Ensure updated_at is always at least as recent as created_at."""
        if self.updated_at < self.created_at:
            self.updated_at = self.created_at

    def get_collaborator(self, user_id: str) -> Collaborator | None:
        """Return the roster entry for ``user_id``, whatever its status."""
        for collaborator in self.collaborators:
            if collaborator.user_id == user_id:
                return collaborator
        return None

    def is_owner(self, user_id: str) -> bool:
        return self.owner_id == user_id

    @property
    def accepted_collaborators(self) -> list[Collaborator]:
        return [c for c in self.collaborators if c.is_accepted]
