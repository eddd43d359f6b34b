"""Unit tests for ActivityService."""

from datetime import datetime, timedelta
from uuid import uuid4

import pytest

from core.exceptions import ForbiddenError
from domain.entities.activity import Actions, ActivityLog
from domain.entities.group import CollaboratorStatus
from domain.services.activity_service import ActivityService
from tests.unit.conftest import (
    ALICE_ID,
    BOB_ID,
    OWNER_ID,
    FakeUnitOfWork,
    make_collaborator,
    make_group,
)


@pytest.fixture
def service(uow: FakeUnitOfWork) -> ActivityService:
    return ActivityService(lambda: uow)


def entry(group_tag: str | None, minutes_ago: int, actor_id: str = OWNER_ID) -> ActivityLog:
    return ActivityLog(
        actor_id=actor_id,
        action=Actions.TASK_CREATED,
        group_tag=group_tag,
        created_at=datetime.utcnow() - timedelta(minutes=minutes_ago),
    )


# --- record ---


class TestRecord:
    @pytest.mark.asyncio
    async def test_creates_activity_entry(self, service: ActivityService, uow: FakeUnitOfWork):
        uow.activities.create.side_effect = lambda a: a
        task_id = uuid4()

        result = await service.record(
            actor_id=OWNER_ID,
            action=Actions.TASK_MOVED,
            group_tag="@eng",
            task_id=task_id,
            from_status="pending",
            to_status="completed",
        )

        assert result.action == Actions.TASK_MOVED
        assert result.task_id == task_id
        assert uow.committed

    @pytest.mark.asyncio
    async def test_passes_changes_and_metadata(
        self, service: ActivityService, uow: FakeUnitOfWork
    ):
        changes = {"title": {"old": "Old", "new": "New"}}
        metadata = {"role": "admin"}

        await service.record(
            actor_id=OWNER_ID,
            action=Actions.MEMBER_ROLE_CHANGED,
            changes=changes,
            metadata=metadata,
        )

        call_arg = uow.activities.create.call_args[0][0]
        assert call_arg.changes == changes
        assert call_arg.metadata == metadata

    @pytest.mark.asyncio
    async def test_personal_tag_stored_as_none(
        self, service: ActivityService, uow: FakeUnitOfWork
    ):
        await service.record(actor_id=OWNER_ID, action=Actions.TASK_CREATED, group_tag="@personal")

        assert uow.activities.create.call_args[0][0].group_tag is None

    @pytest.mark.asyncio
    async def test_failure_is_swallowed(self, service: ActivityService, uow: FakeUnitOfWork):
        uow.activities.create.side_effect = RuntimeError("database down")

        result = await service.record(actor_id=OWNER_ID, action=Actions.TASK_CREATED)

        assert result is None
        assert not uow.committed


# --- list_for_user ---


class TestListForUser:
    @pytest.mark.asyncio
    async def test_group_feed_requires_access(
        self, service: ActivityService, uow: FakeUnitOfWork
    ):
        uow.groups.get_by_tag.return_value = make_group(
            make_collaborator(ALICE_ID, status=CollaboratorStatus.PENDING), tag="@eng"
        )

        with pytest.raises(ForbiddenError):
            await service.list_for_user(ALICE_ID, group_tag="@eng")

    @pytest.mark.asyncio
    async def test_unknown_group_forbidden(self, service: ActivityService, uow: FakeUnitOfWork):
        uow.groups.get_by_tag.return_value = None

        with pytest.raises(ForbiddenError):
            await service.list_for_user(OWNER_ID, group_tag="@gone")

    @pytest.mark.asyncio
    async def test_group_feed(self, service: ActivityService, uow: FakeUnitOfWork):
        uow.groups.get_by_tag.return_value = make_group(make_collaborator(ALICE_ID), tag="@eng")
        uow.activities.get_for_group_tags.return_value = [entry("@eng", 1)]

        result = await service.list_for_user(ALICE_ID, group_tag="eng", limit=10)

        assert len(result) == 1
        uow.activities.get_for_group_tags.assert_awaited_once_with(["@eng"], limit=10)

    @pytest.mark.asyncio
    async def test_personal_feed(self, service: ActivityService, uow: FakeUnitOfWork):
        uow.activities.get_personal_for_user.return_value = [entry(None, 1)]

        result = await service.list_for_user(OWNER_ID, group_tag="@personal")

        assert len(result) == 1
        uow.groups.get_by_tag.assert_not_called()

    @pytest.mark.asyncio
    async def test_aggregate_feed_merges_newest_first(
        self, service: ActivityService, uow: FakeUnitOfWork
    ):
        joined = make_group(make_collaborator(ALICE_ID), tag="@eng")
        invited = make_group(
            make_collaborator(ALICE_ID, status=CollaboratorStatus.PENDING), tag="@ops"
        )
        uow.groups.get_for_user.return_value = [joined, invited]
        uow.activities.get_personal_for_user.return_value = [entry(None, 5, ALICE_ID)]
        uow.activities.get_for_group_tags.return_value = [
            entry("@eng", 1, BOB_ID),
            entry("@eng", 10, BOB_ID),
        ]

        result = await service.list_for_user(ALICE_ID, limit=2)

        assert [a.group_tag for a in result] == ["@eng", None]
        uow.activities.get_for_group_tags.assert_awaited_once_with(["@eng"], limit=2)


# --- purge / diff ---


class TestPurgeGroupTag:
    @pytest.mark.asyncio
    async def test_deletes_and_commits(self, service: ActivityService, uow: FakeUnitOfWork):
        uow.activities.delete_for_group_tag.return_value = 3

        assert await service.purge_group_tag("@eng") == 3
        assert uow.committed


class TestComputeDiff:
    def test_reports_changed_fields_only(self):
        diff = ActivityService.compute_diff(
            {"title": "A", "progress": 10}, {"title": "B", "progress": 10}
        )

        assert diff == {"title": {"old": "A", "new": "B"}}

    def test_no_changes(self):
        assert ActivityService.compute_diff({"a": 1}, {"a": 1}) == {}
