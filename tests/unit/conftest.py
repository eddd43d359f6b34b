"""Shared fixtures and builders for unit tests."""

from datetime import datetime, timedelta
from typing import Any
from unittest.mock import AsyncMock

import pytest

from domain.entities.group import (
    Collaborator,
    CollaboratorRole,
    CollaboratorStatus,
    Group,
)
from domain.entities.task import Task

OWNER_ID = "auth0|owner"
ALICE_ID = "auth0|alice"
BOB_ID = "auth0|bob"
CAROL_ID = "auth0|carol"


class FakeUnitOfWork:
    """Fake Unit of Work with repository mocks for unit testing."""

    def __init__(self) -> None:
        self.groups = AsyncMock()
        self.tasks = AsyncMock()
        self.activities = AsyncMock()
        self.tasks.has_group_tag.return_value = False
        self.activities.has_group_tag.return_value = False
        self.committed = False
        self.rolled_back = False

    async def commit(self) -> None:
        self.committed = True

    async def rollback(self) -> None:
        self.rolled_back = True

    async def __aenter__(self) -> "FakeUnitOfWork":
        return self

    async def __aexit__(self, *args: Any) -> None:
        pass


def make_collaborator(
    user_id: str,
    role: CollaboratorRole = CollaboratorRole.EDITOR,
    status: CollaboratorStatus = CollaboratorStatus.ACCEPTED,
) -> Collaborator:
    """Roster entry whose name and email are derived from the id."""
    short = user_id.split("|")[-1]
    return Collaborator(
        user_id=user_id,
        name=short.title(),
        email=f"{short}@example.com",
        role=role,
        status=status,
        invited_at=datetime.utcnow() - timedelta(days=1),
        accepted_at=datetime.utcnow() if status == CollaboratorStatus.ACCEPTED else None,
    )


def make_group(
    *collaborators: Collaborator,
    tag: str = "@design",
    owner_id: str = OWNER_ID,
) -> Group:
    return Group(
        tag=tag,
        name="Design",
        owner_id=owner_id,
        owner_name="Olive Owner",
        owner_email="owner@example.com",
        collaborators=list(collaborators),
    )


def make_task(
    owner_id: str = OWNER_ID,
    group_tag: str | None = "@design",
    assigned_to: list[str] | None = None,
    **kwargs: Any,
) -> Task:
    return Task(
        owner_id=owner_id,
        title=kwargs.pop("title", "Write release notes"),
        group_tag=group_tag,
        assigned_to=list(assigned_to or []),
        **kwargs,
    )


@pytest.fixture
def uow() -> FakeUnitOfWork:
    """Create a fresh FakeUnitOfWork."""
    return FakeUnitOfWork()


@pytest.fixture
def user_id() -> str:
    """The acting user's id."""
    return OWNER_ID
