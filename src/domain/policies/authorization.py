"""Role resolution and the fixed permission table for groups.

Every "may this user do X" question in the service and API layers is
answered here: :func:`resolve_role` turns a roster snapshot into an
effective role, :func:`permissions` turns a role into group-level flags, and
:func:`can_act` applies the per-task viewer override. Nothing here touches
storage.
"""

from dataclasses import dataclass
from enum import StrEnum

from domain.entities.group import Group
from domain.entities.group_ref import is_personal
from domain.entities.task import Task


class EffectiveRole(StrEnum):
    """Role a user resolves to in one group at one point in time."""

    OWNER = "owner"
    ADMIN = "admin"
    EDITOR = "editor"
    VIEWER = "viewer"
    NONE = "none"


class TaskAction(StrEnum):
    """Mutations gated per task."""

    EDIT = "edit"
    DELETE = "delete"
    DRAG = "drag"


@dataclass(frozen=True, slots=True)
class Permissions:
    """Group-level permission flags for a role.

    ``can_manage_members`` and ``can_delete_group`` are ``None`` where they do
    not apply (no group context).
    """

    can_create_task: bool
    can_edit_any_task: bool
    can_delete_any_task: bool
    can_drag_any_task: bool
    can_manage_members: bool | None
    can_delete_group: bool | None

    def allows_any(self, action: TaskAction) -> bool:
        """Whether the blanket flag for ``action`` is set."""
        if action == TaskAction.EDIT:
            return self.can_edit_any_task
        if action == TaskAction.DELETE:
            return self.can_delete_any_task
        return self.can_drag_any_task


PERMISSION_TABLE: dict[EffectiveRole, Permissions] = {
    EffectiveRole.OWNER: Permissions(True, True, True, True, True, True),
    EffectiveRole.ADMIN: Permissions(True, True, True, True, True, False),
    EffectiveRole.EDITOR: Permissions(True, True, True, True, False, False),
    EffectiveRole.VIEWER: Permissions(False, False, False, False, False, False),
    # Personal-task context: the owner has unrestricted control.
    EffectiveRole.NONE: Permissions(True, True, True, True, None, None),
}

MEMBER_MANAGERS = frozenset({EffectiveRole.OWNER, EffectiveRole.ADMIN})


def resolve_role(group: Group | None, user_id: str) -> EffectiveRole:
    """Resolve ``user_id``'s effective role in ``group``.

    Pending and declined entries never yield a usable role. A missing group
    (e.g. deleted while tasks still carry its tag) resolves to ``NONE``.
    """
    if group is None:
        return EffectiveRole.NONE
    if group.is_owner(user_id):
        return EffectiveRole.OWNER
    collaborator = group.get_collaborator(user_id)
    if collaborator is None or not collaborator.is_accepted:
        return EffectiveRole.NONE
    return EffectiveRole(collaborator.role.value)


def permissions(role: EffectiveRole) -> Permissions:
    return PERMISSION_TABLE[role]


def has_access(group: Group | None, user_id: str) -> bool:
    """True for the owner and accepted collaborators."""
    return resolve_role(group, user_id) != EffectiveRole.NONE


def can_manage_members(group: Group, user_id: str) -> bool:
    return resolve_role(group, user_id) in MEMBER_MANAGERS


def can_create_task(group: Group | None, user_id: str) -> bool:
    """Whether ``user_id`` may create a task inside ``group``."""
    role = resolve_role(group, user_id)
    if role == EffectiveRole.NONE:
        return False
    return permissions(role).can_create_task


def can_act(
    task: Task,
    user_id: str,
    group: Group | None,
    action: TaskAction = TaskAction.EDIT,
) -> bool:
    """Whether ``user_id`` may edit, delete or drag ``task``.

    ``group`` must be the group named by the task's tag, or ``None`` if that
    group no longer exists. Viewers may act on tasks they own or are
    assigned to; this is decided per task, never cached per group.
    """
    if is_personal(task.group_ref):
        return True

    role = resolve_role(group, user_id)
    if role == EffectiveRole.NONE:
        return False
    if permissions(role).allows_any(action):
        return True
    if role == EffectiveRole.VIEWER:
        return task.owner_id == user_id or task.is_assigned(user_id)
    return False
