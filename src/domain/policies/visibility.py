"""Which tasks a user sees in each board view.

Three view modes exist:

* personal (``PersonalRef``): tasks without a group;
* group (``NamedRef``): the group's tasks, for its owner and accepted members;
* aggregate (``None``): personal tasks plus group tasks the user both has
  access to *and* is assigned to.

The aggregate view deliberately requires assignment, so it can show less
than the group view for the same tag but never more. A task whose tag names
no known group is invisible in every view.
"""

from collections.abc import Iterable, Mapping

from domain.entities.group import Group
from domain.entities.group_ref import GroupRef, NamedRef, is_personal, parse_group_ref
from domain.entities.task import Task
from domain.policies.authorization import has_access

ViewMode = GroupRef | None


def is_visible(
    task: Task,
    user_id: str,
    view: ViewMode,
    groups_by_tag: Mapping[str, Group],
) -> bool:
    """Evaluate one task against one view.

    ``groups_by_tag`` must contain every group the caller might see; tags
    absent from it are treated as belonging to no accessible group.
    """
    ref = task.group_ref

    if view is None:
        if is_personal(ref):
            return True
        group = groups_by_tag.get(ref.tag)
        return has_access(group, user_id) and task.is_assigned(user_id)

    if is_personal(view):
        return is_personal(ref)

    if ref != view:
        return False
    return has_access(groups_by_tag.get(view.tag), user_id)


def filter_visible(
    tasks: Iterable[Task],
    user_id: str,
    view: ViewMode,
    groups_by_tag: Mapping[str, Group],
) -> list[Task]:
    """Return the visible subset of ``tasks``, preserving order."""
    return [task for task in tasks if is_visible(task, user_id, view, groups_by_tag)]


def view_from_query(group_tag: str | None) -> ViewMode:
    """Translate the ``groupTag`` query parameter into a view mode.

    No parameter means the aggregate view; ``@personal`` the personal view.
    """
    if group_tag is None:
        return None
    return parse_group_ref(group_tag)


def tags_in_view(view: ViewMode, accessible: Iterable[Group]) -> list[str]:
    """Group tags whose tasks must be loaded to evaluate ``view``.

    ``accessible`` holds the groups the caller may open; a group view of
    any other tag loads nothing.
    """
    tags = [group.tag for group in accessible]
    if isinstance(view, NamedRef):
        return [view.tag] if view.tag in tags else []
    if view is None:
        return tags
    return []
