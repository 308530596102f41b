"""API v1 router aggregation.

Includes all endpoint modules with consistent prefix and tags. All routes
use dependencies from app.api.v1.dependencies (no manual repo/service construction).
Registration routes require X-Api-Key when REGISTRATION_API_KEY is set.
"""

from fastapi import APIRouter, Depends

from app.api.v1.dependencies import require_registration_api_key
from app.api.v1.endpoints import health, registration_tasks

api_router = APIRouter()

api_router.include_router(health.router, prefix="/health", tags=["health"])
api_router.include_router(
    registration_tasks.router,
    prefix="/registration-tasks",
    tags=["registration-tasks"],
    dependencies=[Depends(require_registration_api_key)],
)
