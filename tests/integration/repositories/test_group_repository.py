"""Integration tests for the SQLAlchemy group repository."""

from datetime import datetime

import pytest

from core.exceptions import GroupVersionConflictError
from domain.entities.group import CollaboratorRole, CollaboratorStatus
from tests.unit.conftest import ALICE_ID, BOB_ID, make_collaborator, make_group


@pytest.fixture
async def stored_group(uow_factory):
    group = make_group(make_collaborator(ALICE_ID, CollaboratorRole.ADMIN), tag="@eng")
    async with uow_factory() as uow:
        created = await uow.groups.create(group)
        await uow.commit()
    return created


class TestGroupRepository:
    @pytest.mark.asyncio
    async def test_lookup_by_tag_and_member(self, uow_factory, stored_group):
        async with uow_factory() as uow:
            by_tag = await uow.groups.get_by_tag("@eng")
            for_alice = await uow.groups.get_for_user(ALICE_ID)
            for_bob = await uow.groups.get_for_user(BOB_ID)

        assert by_tag.id == stored_group.id
        assert [g.id for g in for_alice] == [stored_group.id]
        assert for_bob == []

    @pytest.mark.asyncio
    async def test_save_syncs_roster_and_bumps_version(self, uow_factory, stored_group):
        async with uow_factory() as uow:
            group = await uow.groups.get(stored_group.id)
            group.collaborators.append(
                make_collaborator(BOB_ID, CollaboratorRole.VIEWER, CollaboratorStatus.PENDING)
            )
            group.updated_at = datetime.utcnow()
            saved = await uow.groups.save(group)
            await uow.commit()

        assert saved.version == stored_group.version + 1
        async with uow_factory() as uow:
            reloaded = await uow.groups.get(stored_group.id)
        assert {c.user_id for c in reloaded.collaborators} == {ALICE_ID, BOB_ID}

    @pytest.mark.asyncio
    async def test_stale_copy_is_rejected(self, uow_factory, stored_group):
        async with uow_factory() as uow:
            first = await uow.groups.get(stored_group.id)
        async with uow_factory() as uow:
            second = await uow.groups.get(stored_group.id)

        first.name = "Engineering"
        first.updated_at = datetime.utcnow()
        async with uow_factory() as uow:
            await uow.groups.save(first)
            await uow.commit()

        second.name = "Platform"
        second.updated_at = datetime.utcnow()
        with pytest.raises(GroupVersionConflictError):
            async with uow_factory() as uow:
                await uow.groups.save(second)

        async with uow_factory() as uow:
            current = await uow.groups.get(stored_group.id)
        assert current.name == "Engineering"
