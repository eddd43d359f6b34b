"""Task API routes."""

from uuid import UUID

from fastapi import APIRouter, Depends, Query, Request, status

from api.dependencies.auth import CurrentUser
from api.v1.dependencies import get_task_service
from api.v1.schemas.common import error_responses
from api.v1.schemas.task import (
    AssigneePartitionResponse,
    AssigneeResponse,
    AssigneesDetailResponse,
    TaskAssigneesUpdate,
    TaskCreate,
    TaskDetailResponse,
    TaskListResponse,
    TaskPermissionsResponse,
    TaskProgressUpdate,
    TaskResponse,
    TaskStatusUpdate,
    TaskUpdate,
)
from core.rate_limit import READ_LIMIT, WRITE_LIMIT, limiter
from domain.entities.group import Group
from domain.entities.task import Task
from domain.policies.assignment import AssigneeView
from domain.policies.authorization import TaskAction, can_act
from domain.policies.visibility import view_from_query
from domain.services.task_service import TaskService

router = APIRouter(prefix="/tasks", tags=["tasks"])


@router.get(
    "",
    response_model=TaskListResponse,
    summary="List tasks on a board",
    responses=error_responses(401),
)
@limiter.limit(READ_LIMIT)  # type: ignore[untyped-decorator]
async def list_tasks(
    request: Request,
    user: CurrentUser,
    group_tag: str | None = Query(
        None,
        alias="groupTag",
        max_length=100,
        description="Omit for all my tasks, `@personal` for personal tasks, or a group tag",
    ),
    service: TaskService = Depends(get_task_service),
) -> TaskListResponse:
    """Get the tasks visible to the caller in the requested view."""
    view = view_from_query(group_tag)
    board = await service.get_board(user.id, view)
    data = [_build_task_response(t, user.id, board.group_for(t)) for t in board.tasks]
    return TaskListResponse(
        data=data,
        meta={"total": len(data), "view": _view_name(group_tag)},
    )


@router.post(
    "",
    response_model=TaskDetailResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create a task",
    responses=error_responses(400, 401, 403, 404),
)
@limiter.limit(WRITE_LIMIT)  # type: ignore[untyped-decorator]
async def create_task(
    request: Request,
    body: TaskCreate,
    user: CurrentUser,
    service: TaskService = Depends(get_task_service),
) -> TaskDetailResponse:
    """Create a personal task, or a group task if `group_tag` names a group."""
    task = await service.create(
        user_id=user.id,
        title=body.title,
        description=body.description,
        category=body.category,
        priority=body.priority,
        status=body.status,
        due_date=body.due_date,
        progress=body.progress,
        group_tag=body.group_tag,
        assigned_to=body.assigned_to,
        actor_name=user.name,
    )
    return TaskDetailResponse(data=_build_task_response(task))


@router.get(
    "/{task_id}",
    response_model=TaskDetailResponse,
    summary="Get a task",
    responses=error_responses(401, 404),
)
@limiter.limit(READ_LIMIT)  # type: ignore[untyped-decorator]
async def get_task(
    request: Request,
    task_id: UUID,
    user: CurrentUser,
    service: TaskService = Depends(get_task_service),
) -> TaskDetailResponse:
    """Get a task with the caller's per-task permissions."""
    task, group = await service.get_with_group(task_id, user.id)
    return TaskDetailResponse(data=_build_task_response(task, user.id, group))


@router.put(
    "/{task_id}",
    response_model=TaskDetailResponse,
    summary="Update a task",
    responses=error_responses(401, 403, 404),
)
@limiter.limit(WRITE_LIMIT)  # type: ignore[untyped-decorator]
async def update_task(
    request: Request,
    task_id: UUID,
    body: TaskUpdate,
    user: CurrentUser,
    service: TaskService = Depends(get_task_service),
) -> TaskDetailResponse:
    """Edit a task's fields. Only fields present in the body change."""
    kwargs = {}
    if "due_date" in body.model_fields_set:
        kwargs["due_date"] = body.due_date
    task = await service.update(
        task_id=task_id,
        user_id=user.id,
        title=body.title,
        description=body.description,
        category=body.category,
        priority=body.priority,
        progress=body.progress,
        actor_name=user.name,
        **kwargs,
    )
    return TaskDetailResponse(data=_build_task_response(task))


@router.patch(
    "/{task_id}/status",
    response_model=TaskDetailResponse,
    summary="Move a task to another column",
    responses=error_responses(401, 403, 404),
)
@limiter.limit(WRITE_LIMIT)  # type: ignore[untyped-decorator]
async def move_task(
    request: Request,
    task_id: UUID,
    body: TaskStatusUpdate,
    user: CurrentUser,
    service: TaskService = Depends(get_task_service),
) -> TaskDetailResponse:
    """Drag a task to another board column."""
    task = await service.move(task_id, user.id, body.status, actor_name=user.name)
    return TaskDetailResponse(data=_build_task_response(task))


@router.patch(
    "/{task_id}/progress",
    response_model=TaskDetailResponse,
    summary="Set task progress",
    responses=error_responses(401, 403, 404),
)
@limiter.limit(WRITE_LIMIT)  # type: ignore[untyped-decorator]
async def update_task_progress(
    request: Request,
    task_id: UUID,
    body: TaskProgressUpdate,
    user: CurrentUser,
    service: TaskService = Depends(get_task_service),
) -> TaskDetailResponse:
    """Set a task's progress percentage."""
    task = await service.update_progress(task_id, user.id, body.progress, actor_name=user.name)
    return TaskDetailResponse(data=_build_task_response(task))


@router.put(
    "/{task_id}/assignees",
    response_model=TaskDetailResponse,
    summary="Replace task assignees",
    responses=error_responses(400, 401, 403, 404),
)
@limiter.limit(WRITE_LIMIT)  # type: ignore[untyped-decorator]
async def update_task_assignees(
    request: Request,
    task_id: UUID,
    body: TaskAssigneesUpdate,
    user: CurrentUser,
    service: TaskService = Depends(get_task_service),
) -> TaskDetailResponse:
    """Replace a group task's assignees. New assignees must be active members."""
    task = await service.update_assignees(
        task_id, user.id, body.assigned_to, actor_name=user.name
    )
    return TaskDetailResponse(data=_build_task_response(task))


@router.get(
    "/{task_id}/assignees",
    response_model=AssigneesDetailResponse,
    summary="Get task assignees",
    responses=error_responses(401, 404),
)
@limiter.limit(READ_LIMIT)  # type: ignore[untyped-decorator]
async def get_task_assignees(
    request: Request,
    task_id: UUID,
    user: CurrentUser,
    service: TaskService = Depends(get_task_service),
) -> AssigneesDetailResponse:
    """Split a task's assignees into active, exited and pending members."""
    partition = await service.get_assignees(task_id, user.id)
    return AssigneesDetailResponse(
        data=AssigneePartitionResponse(
            active=[_build_assignee_response(a) for a in partition.active],
            exited=[_build_assignee_response(a) for a in partition.exited],
            pending=[_build_assignee_response(a) for a in partition.pending],
            active_count=partition.active_count,
        )
    )


@router.delete(
    "/{task_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete a task",
    responses=error_responses(401, 403, 404),
)
@limiter.limit(WRITE_LIMIT)  # type: ignore[untyped-decorator]
async def delete_task(
    request: Request,
    task_id: UUID,
    user: CurrentUser,
    service: TaskService = Depends(get_task_service),
) -> None:
    """Delete a task."""
    await service.delete(task_id, user.id, actor_name=user.name)
    return None


def _view_name(group_tag: str | None) -> str:
    if group_tag is None:
        return "all"
    return view_from_query(group_tag).tag or "personal"  # type: ignore[union-attr]


def _build_task_response(
    task: Task, user_id: str | None = None, group: Group | None = None
) -> TaskResponse:
    """Convert domain entity to response schema.

    Per-task permissions are included when the caller and group are known.
    """
    perms = None
    if user_id is not None:
        perms = TaskPermissionsResponse(
            can_edit=can_act(task, user_id, group, TaskAction.EDIT),
            can_delete=can_act(task, user_id, group, TaskAction.DELETE),
            can_drag=can_act(task, user_id, group, TaskAction.DRAG),
        )
    return TaskResponse(
        id=task.id,
        owner_id=task.owner_id,
        title=task.title,
        description=task.description,
        category=task.category,
        priority=task.priority,
        status=task.status,
        due_date=task.due_date,
        progress=task.progress,
        group_tag=task.group_tag,
        assigned_to=task.assigned_to,
        is_overdue=task.is_overdue,
        permissions=perms,
        created_at=task.created_at,
        updated_at=task.updated_at,
    )


def _build_assignee_response(assignee: AssigneeView) -> AssigneeResponse:
    return AssigneeResponse(
        user_id=assignee.user_id,
        name=assignee.name,
        email=assignee.email,
        picture=assignee.picture,
        is_owner=assignee.is_owner,
    )
