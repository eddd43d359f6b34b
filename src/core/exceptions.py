"""Custom exceptions and error codes."""

from enum import StrEnum
from typing import Any


class ErrorCode(StrEnum):
    """Standardized error codes for the API."""

    # Authentication errors (401)
    UNAUTHORIZED = "UNAUTHORIZED"
    INVALID_TOKEN = "INVALID_TOKEN"
    TOKEN_EXPIRED = "TOKEN_EXPIRED"

    # Authorization errors (403)
    FORBIDDEN = "FORBIDDEN"

    # Not found errors (404)
    GROUP_NOT_FOUND = "GROUP_NOT_FOUND"
    COLLABORATOR_NOT_FOUND = "COLLABORATOR_NOT_FOUND"
    TASK_NOT_FOUND = "TASK_NOT_FOUND"

    # Validation errors (400)
    VALIDATION_ERROR = "VALIDATION_ERROR"
    RESERVED_TAG = "RESERVED_TAG"
    INVALID_ASSIGNEE = "INVALID_ASSIGNEE"

    # Conflict errors (409)
    DUPLICATE_TAG = "DUPLICATE_TAG"
    ALREADY_A_MEMBER = "ALREADY_A_MEMBER"
    NOT_INVITED = "NOT_INVITED"
    INVALID_TRANSITION = "INVALID_TRANSITION"
    VERSION_CONFLICT = "VERSION_CONFLICT"

    # Rate limiting (429)
    RATE_LIMIT_EXCEEDED = "RATE_LIMIT_EXCEEDED"

    # Server errors (500)
    INTERNAL_ERROR = "INTERNAL_ERROR"
    DATABASE_ERROR = "DATABASE_ERROR"


class AppException(Exception):
    """Base application exception."""

    def __init__(
        self,
        error_code: ErrorCode,
        message: str,
        status_code: int = 400,
        details: Any | None = None,
    ) -> None:
        self.error_code = error_code
        self.message = message
        self.status_code = status_code
        self.details = details
        super().__init__(self.message)


class AuthenticationError(AppException):
    """Authentication failed."""

    def __init__(
        self,
        message: str = "Authentication required",
        error_code: ErrorCode = ErrorCode.UNAUTHORIZED,
    ) -> None:
        super().__init__(
            error_code=error_code,
            message=message,
            status_code=401,
        )


class ForbiddenError(AppException):
    """Caller is authenticated but their role does not allow the operation."""

    def __init__(self, message: str = "Access denied", action: str | None = None) -> None:
        super().__init__(
            error_code=ErrorCode.FORBIDDEN,
            message=message,
            status_code=403,
            details={"action": action} if action else None,
        )


class GroupNotFoundError(AppException):
    """Group not found."""

    def __init__(self, group_id: str) -> None:
        super().__init__(
            error_code=ErrorCode.GROUP_NOT_FOUND,
            message=f"Group not found: {group_id}",
            status_code=404,
            details={"group_id": group_id},
        )


class CollaboratorNotFoundError(AppException):
    """The user has no matching roster entry in the group."""

    def __init__(self, user_id: str) -> None:
        super().__init__(
            error_code=ErrorCode.COLLABORATOR_NOT_FOUND,
            message="User is not a member of this group",
            status_code=404,
            details={"user_id": user_id},
        )


class TaskNotFoundError(AppException):
    """Task not found."""

    def __init__(self, task_id: str) -> None:
        super().__init__(
            error_code=ErrorCode.TASK_NOT_FOUND,
            message=f"Task not found: {task_id}",
            status_code=404,
            details={"task_id": task_id},
        )


class DuplicateTagError(AppException):
    """Group tag is already taken."""

    def __init__(self, tag: str) -> None:
        super().__init__(
            error_code=ErrorCode.DUPLICATE_TAG,
            message=f"Group tag already in use: {tag}",
            status_code=409,
            details={"tag": tag},
        )


class ReservedTagError(AppException):
    """Group tag collides with a reserved tag."""

    def __init__(self, tag: str) -> None:
        super().__init__(
            error_code=ErrorCode.RESERVED_TAG,
            message=f"Group tag is reserved: {tag}",
            status_code=400,
            details={"tag": tag},
        )


class AlreadyMemberError(AppException):
    """User already has a roster entry (or owns the group)."""

    def __init__(self, user_id: str) -> None:
        super().__init__(
            error_code=ErrorCode.ALREADY_A_MEMBER,
            message="User is already a member of this group",
            status_code=409,
            details={"user_id": user_id},
        )


class NotInvitedError(AppException):
    """User has no invitation to the group."""

    def __init__(self, user_id: str) -> None:
        super().__init__(
            error_code=ErrorCode.NOT_INVITED,
            message="No pending invitation for this user",
            status_code=409,
            details={"user_id": user_id},
        )


class InvalidTransitionError(AppException):
    """Roster entry is not in a state that allows the requested transition."""

    def __init__(self, user_id: str, status: str, transition: str) -> None:
        super().__init__(
            error_code=ErrorCode.INVALID_TRANSITION,
            message=f"Cannot {transition} a membership that is {status}",
            status_code=409,
            details={"user_id": user_id, "status": status, "transition": transition},
        )


class InvalidAssigneeError(AppException):
    """Task assignee does not hold an active role in the task's group."""

    def __init__(self, user_ids: list[str]) -> None:
        super().__init__(
            error_code=ErrorCode.INVALID_ASSIGNEE,
            message="Assignees must be active members of the task's group",
            status_code=400,
            details={"user_ids": user_ids},
        )


class GroupVersionConflictError(AppException):
    """Concurrent writers kept changing the group; the write was abandoned."""

    def __init__(self, group_id: str) -> None:
        super().__init__(
            error_code=ErrorCode.VERSION_CONFLICT,
            message="Group was modified concurrently, please retry",
            status_code=409,
            details={"group_id": group_id},
        )
