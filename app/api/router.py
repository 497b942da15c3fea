"""
Main API router
"""
from fastapi import APIRouter

from app.api.v1 import (
    health,
    version,
    auth,
    dashboard,
    employees,
    pending_ids,
    business_units,
    id_templates,
    user_management,
    activity_log,
    settings,
    files,
)

api_router = APIRouter()

api_router.include_router(health.router, tags=["health"])
api_router.include_router(version.router, tags=["version"])
api_router.include_router(auth.router, prefix="/auth", tags=["authentication"])
api_router.include_router(dashboard.router, prefix="/dashboard", tags=["dashboard"])
api_router.include_router(employees.router, prefix="/employees", tags=["employees"])
api_router.include_router(pending_ids.router, prefix="/pending-id", tags=["pending-ids"])
api_router.include_router(business_units.router, prefix="/business-units", tags=["business-units"])
api_router.include_router(id_templates.router, prefix="/id-templates", tags=["id-templates"])
api_router.include_router(user_management.router, prefix="/user-management", tags=["user-management"])
api_router.include_router(activity_log.router, prefix="/activity-log", tags=["activity-log"])
api_router.include_router(settings.router, prefix="/settings", tags=["settings"])
api_router.include_router(files.router, prefix="/files", tags=["files"])
