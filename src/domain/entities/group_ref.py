"""Tagged reference from a task or activity to the workspace it lives in.

Tasks and activity entries store the group tag as a plain string (or
``None``), with ``@personal`` meaning "no group". Everything that branches on
that value goes through :func:`parse_group_ref` so the sentinel string is
compared in exactly one place.
"""

from dataclasses import dataclass

PERSONAL_TAG = "@personal"
TAG_PREFIX = "@"


@dataclass(frozen=True, slots=True)
class PersonalRef:
    """The caller's own, group-less space."""

    @property
    def tag(self) -> None:
        return None


@dataclass(frozen=True, slots=True)
class NamedRef:
    """A real workspace, identified by its ``@``-prefixed tag."""

    tag: str


GroupRef = PersonalRef | NamedRef

PERSONAL = PersonalRef()


def parse_group_ref(value: str | None) -> GroupRef:
    """Map a stored/requested group tag to a GroupRef."""
    if value is None:
        return PERSONAL
    value = value.strip()
    if not value or is_reserved_tag(value):
        return PERSONAL
    return NamedRef(normalize_tag(value))


def normalize_tag(tag: str) -> str:
    """Return the tag with exactly one leading ``@``."""
    tag = tag.strip()
    return TAG_PREFIX + tag.lstrip(TAG_PREFIX)


def is_reserved_tag(tag: str) -> bool:
    """Whether ``tag`` names the personal space, in any case or without ``@``."""
    return normalize_tag(tag).lower() == PERSONAL_TAG


def is_personal(ref: GroupRef) -> bool:
    return isinstance(ref, PersonalRef)
