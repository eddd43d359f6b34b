"""Unit tests for role resolution and the permission table."""

import pytest

from domain.entities.group import CollaboratorRole, CollaboratorStatus
from domain.policies.authorization import (
    EffectiveRole,
    TaskAction,
    can_act,
    can_create_task,
    can_manage_members,
    has_access,
    permissions,
    resolve_role,
)
from tests.unit.conftest import (
    ALICE_ID,
    BOB_ID,
    CAROL_ID,
    OWNER_ID,
    make_collaborator,
    make_group,
    make_task,
)

# --- resolve_role ---


class TestResolveRole:
    def test_owner(self):
        group = make_group()

        assert resolve_role(group, OWNER_ID) == EffectiveRole.OWNER

    @pytest.mark.parametrize(
        "role,expected",
        [
            (CollaboratorRole.ADMIN, EffectiveRole.ADMIN),
            (CollaboratorRole.EDITOR, EffectiveRole.EDITOR),
            (CollaboratorRole.VIEWER, EffectiveRole.VIEWER),
        ],
    )
    def test_accepted_collaborator_gets_their_role(self, role, expected):
        group = make_group(make_collaborator(ALICE_ID, role=role))

        assert resolve_role(group, ALICE_ID) == expected

    @pytest.mark.parametrize(
        "status", [CollaboratorStatus.PENDING, CollaboratorStatus.DECLINED]
    )
    def test_unaccepted_entry_resolves_to_none(self, status):
        group = make_group(
            make_collaborator(ALICE_ID, role=CollaboratorRole.ADMIN, status=status)
        )

        assert resolve_role(group, ALICE_ID) == EffectiveRole.NONE

    def test_stranger_resolves_to_none(self):
        group = make_group(make_collaborator(ALICE_ID))

        assert resolve_role(group, CAROL_ID) == EffectiveRole.NONE

    def test_missing_group_resolves_to_none(self):
        assert resolve_role(None, OWNER_ID) == EffectiveRole.NONE

    def test_same_snapshot_same_answer(self):
        group = make_group(make_collaborator(ALICE_ID, role=CollaboratorRole.VIEWER))

        assert {resolve_role(group, ALICE_ID) for _ in range(5)} == {EffectiveRole.VIEWER}


# --- permissions ---


class TestPermissions:
    def test_owner_has_everything(self):
        perms = permissions(EffectiveRole.OWNER)

        assert perms.can_create_task
        assert perms.can_edit_any_task
        assert perms.can_delete_any_task
        assert perms.can_drag_any_task
        assert perms.can_manage_members
        assert perms.can_delete_group

    def test_admin_cannot_delete_group(self):
        perms = permissions(EffectiveRole.ADMIN)

        assert perms.can_manage_members
        assert perms.can_delete_group is False

    def test_editor_has_task_crud_only(self):
        perms = permissions(EffectiveRole.EDITOR)

        assert perms.can_create_task
        assert perms.can_edit_any_task
        assert perms.can_delete_any_task
        assert perms.can_drag_any_task
        assert perms.can_manage_members is False
        assert perms.can_delete_group is False

    def test_viewer_has_no_blanket_rights(self):
        perms = permissions(EffectiveRole.VIEWER)

        assert not any(
            [
                perms.can_create_task,
                perms.can_edit_any_task,
                perms.can_delete_any_task,
                perms.can_drag_any_task,
                perms.can_manage_members,
                perms.can_delete_group,
            ]
        )

    def test_personal_context_has_no_membership_flags(self):
        perms = permissions(EffectiveRole.NONE)

        assert perms.can_edit_any_task
        assert perms.can_manage_members is None
        assert perms.can_delete_group is None

    def test_allows_any_maps_actions(self):
        perms = permissions(EffectiveRole.EDITOR)

        assert all(perms.allows_any(action) for action in TaskAction)


# --- group-level helpers ---


class TestGroupHelpers:
    def test_has_access(self):
        group = make_group(
            make_collaborator(ALICE_ID),
            make_collaborator(BOB_ID, status=CollaboratorStatus.PENDING),
        )

        assert has_access(group, OWNER_ID)
        assert has_access(group, ALICE_ID)
        assert not has_access(group, BOB_ID)
        assert not has_access(None, OWNER_ID)

    def test_can_manage_members(self):
        group = make_group(
            make_collaborator(ALICE_ID, role=CollaboratorRole.ADMIN),
            make_collaborator(BOB_ID, role=CollaboratorRole.EDITOR),
        )

        assert can_manage_members(group, OWNER_ID)
        assert can_manage_members(group, ALICE_ID)
        assert not can_manage_members(group, BOB_ID)

    def test_can_create_task(self):
        group = make_group(
            make_collaborator(ALICE_ID, role=CollaboratorRole.EDITOR),
            make_collaborator(BOB_ID, role=CollaboratorRole.VIEWER),
        )

        assert can_create_task(group, ALICE_ID)
        assert not can_create_task(group, BOB_ID)
        assert not can_create_task(group, CAROL_ID)


# --- can_act ---


class TestCanAct:
    def test_personal_task_always_allowed(self):
        task = make_task(group_tag=None)

        assert can_act(task, OWNER_ID, None, TaskAction.DELETE)

    @pytest.mark.parametrize("role", [CollaboratorRole.ADMIN, CollaboratorRole.EDITOR])
    def test_editor_and_admin_act_on_any_task(self, role):
        group = make_group(make_collaborator(ALICE_ID, role=role))
        task = make_task(owner_id=OWNER_ID)

        for action in TaskAction:
            assert can_act(task, ALICE_ID, group, action)

    def test_viewer_acts_on_own_task(self):
        group = make_group(make_collaborator(ALICE_ID, role=CollaboratorRole.VIEWER))
        task = make_task(owner_id=ALICE_ID)

        for action in TaskAction:
            assert can_act(task, ALICE_ID, group, action)

    def test_viewer_acts_on_assigned_task(self):
        group = make_group(make_collaborator(ALICE_ID, role=CollaboratorRole.VIEWER))
        task = make_task(owner_id=OWNER_ID, assigned_to=[ALICE_ID])

        assert can_act(task, ALICE_ID, group, TaskAction.DRAG)

    def test_viewer_cannot_act_on_other_tasks(self):
        group = make_group(make_collaborator(ALICE_ID, role=CollaboratorRole.VIEWER))
        task = make_task(owner_id=OWNER_ID, assigned_to=[BOB_ID])

        for action in TaskAction:
            assert not can_act(task, ALICE_ID, group, action)

    def test_pending_invitee_cannot_act_on_own_task(self):
        group = make_group(
            make_collaborator(ALICE_ID, status=CollaboratorStatus.PENDING)
        )
        task = make_task(owner_id=ALICE_ID)

        assert not can_act(task, ALICE_ID, group)

    def test_deleted_group_fails_closed(self):
        task = make_task(owner_id=OWNER_ID)

        assert not can_act(task, OWNER_ID, None)

    def test_demoted_editor_loses_edit_unless_assigned(self):
        alice = make_collaborator(ALICE_ID, role=CollaboratorRole.EDITOR)
        group = make_group(alice, tag="@eng")
        task = make_task(owner_id=OWNER_ID, group_tag="@eng", assigned_to=[])

        assert can_act(task, ALICE_ID, group, TaskAction.EDIT)
        assert can_act(task, ALICE_ID, group, TaskAction.DELETE)
        assert can_act(task, ALICE_ID, group, TaskAction.DRAG)

        alice.role = CollaboratorRole.VIEWER
        assert not can_act(task, ALICE_ID, group, TaskAction.EDIT)

        task.assigned_to.append(ALICE_ID)
        assert can_act(task, ALICE_ID, group, TaskAction.EDIT)
