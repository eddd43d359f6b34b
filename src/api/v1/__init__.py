"""API v1 router configuration."""

from fastapi import APIRouter

from api.v1.routes.activity import router as activity_router
from api.v1.routes.groups import router as groups_router
from api.v1.routes.tasks import router as tasks_router

router = APIRouter()
router.include_router(groups_router)
router.include_router(tasks_router)
router.include_router(activity_router)
