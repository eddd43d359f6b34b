"""Activity log API routes."""

from fastapi import APIRouter, Depends, Query, Request

from api.dependencies.auth import CurrentUser
from api.v1.dependencies import get_activity_service
from api.v1.schemas.activity import ActivityListResponse, ActivityLogResponse
from api.v1.schemas.common import error_responses
from core.config import settings
from core.rate_limit import READ_LIMIT, limiter
from domain.services.activity_service import ActivityService

router = APIRouter(prefix="/activities", tags=["activity"])


@router.get(
    "",
    response_model=ActivityListResponse,
    summary="Get the activity feed",
    responses=error_responses(401, 403),
)
@limiter.limit(READ_LIMIT)  # type: ignore[untyped-decorator]
async def list_activities(
    request: Request,
    user: CurrentUser,
    group_tag: str | None = Query(
        None,
        alias="groupTag",
        max_length=100,
        description="Narrow to one group, or `@personal` for activity outside groups",
    ),
    limit: int = Query(
        settings.activity_default_limit, ge=1, le=settings.activity_max_limit
    ),
    service: ActivityService = Depends(get_activity_service),
) -> ActivityListResponse:
    """Get recent activity, newest first. Group feeds require access to the group."""
    activities = await service.list_for_user(user.id, group_tag=group_tag, limit=limit)
    data = [
        ActivityLogResponse(
            id=a.id,
            actor_id=a.actor_id,
            actor_name=a.actor_name,
            action=a.action,
            group_tag=a.group_tag,
            task_id=a.task_id,
            task_title=a.task_title,
            from_status=a.from_status,
            to_status=a.to_status,
            target_user_id=a.target_user_id,
            changes=a.changes,
            metadata=a.metadata,
            created_at=a.created_at,
        )
        for a in activities
    ]
    return ActivityListResponse(data=data, meta={"limit": limit, "count": len(data)})
