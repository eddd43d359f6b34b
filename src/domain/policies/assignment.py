"""Reconciles a task's assignees against the group's live roster.

Removing a member never rewrites ``assigned_to``; instead the assignee is
reported as *exited*: still shown (from the task's last-known snapshot) but
carrying no permissions and left out of member counts. Read-only.
"""

from dataclasses import dataclass, field

from domain.entities.group import Group
from domain.entities.group_ref import is_personal
from domain.entities.task import AssigneeSnapshot, Task


@dataclass(frozen=True, slots=True)
class AssigneeView:
    """One assignee as the board should render it."""

    user_id: str
    name: str | None = None
    email: str | None = None
    picture: str | None = None
    is_owner: bool = False


@dataclass
class AssigneePartition:
    """Assignees split by their current standing in the group."""

    active: list[AssigneeView] = field(default_factory=list)
    exited: list[AssigneeView] = field(default_factory=list)
    # Assigned while their invitation is still pending: neither active nor gone.
    pending: list[AssigneeView] = field(default_factory=list)

    @property
    def active_count(self) -> int:
        return len(self.active)


def reconcile_assignees(task: Task, group: Group | None) -> AssigneePartition:
    """Partition ``task.assigned_to`` against ``group``'s roster.

    With ``group`` ``None`` (the group was deleted) every assignee is exited.
    Personal tasks have no meaningful assignees and yield an empty partition.
    """
    partition = AssigneePartition()
    if is_personal(task.group_ref):
        return partition
    if group is None:
        partition.exited = [_from_snapshot(task, uid) for uid in _unique(task.assigned_to)]
        return partition

    for user_id in _unique(task.assigned_to):
        if group.is_owner(user_id):
            partition.active.append(
                AssigneeView(
                    user_id=user_id,
                    name=group.owner_name,
                    email=group.owner_email,
                    is_owner=True,
                )
            )
            continue

        collaborator = group.get_collaborator(user_id)
        if collaborator is None:
            partition.exited.append(_from_snapshot(task, user_id))
        elif collaborator.is_accepted:
            partition.active.append(
                AssigneeView(
                    user_id=user_id,
                    name=collaborator.name,
                    email=collaborator.email,
                    picture=collaborator.picture,
                )
            )
        else:
            partition.pending.append(
                AssigneeView(user_id=user_id, name=collaborator.name, email=collaborator.email)
            )
    return partition


def active_member_ids(group: Group) -> set[str]:
    """User ids that may currently be assigned tasks in ``group``."""
    return {group.owner_id} | {c.user_id for c in group.accepted_collaborators}


def member_count(group: Group) -> int:
    """Accepted collaborators, i.e. members other than the owner."""
    return len(group.accepted_collaborators)


def build_snapshots(group: Group, user_ids: list[str]) -> list[AssigneeSnapshot]:
    """Capture the live roster identity of each id for storage on the task."""
    snapshots: list[AssigneeSnapshot] = []
    for user_id in _unique(user_ids):
        if group.is_owner(user_id):
            snapshots.append(
                AssigneeSnapshot(user_id=user_id, name=group.owner_name, email=group.owner_email)
            )
            continue
        collaborator = group.get_collaborator(user_id)
        if collaborator is not None:
            snapshots.append(
                AssigneeSnapshot(
                    user_id=user_id,
                    name=collaborator.name,
                    email=collaborator.email,
                    picture=collaborator.picture,
                )
            )
        else:
            snapshots.append(AssigneeSnapshot(user_id=user_id))
    return snapshots


def _from_snapshot(task: Task, user_id: str) -> AssigneeView:
    snapshot = task.snapshot_for(user_id)
    if snapshot is None:
        return AssigneeView(user_id=user_id)
    return AssigneeView(
        user_id=user_id,
        name=snapshot.name,
        email=snapshot.email,
        picture=snapshot.picture,
    )


def _unique(user_ids: list[str]) -> list[str]:
    return list(dict.fromkeys(user_ids))
