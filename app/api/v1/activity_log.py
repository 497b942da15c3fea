"""
Activity log endpoints
"""
from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from app.core.deps import get_db, require_permission
from app.core.permissions import Permission
from app.models.user import User
from app.schemas.activity_log import ActivityLogOut, ActivityLogPage, ClearResult
from app.services.audit_service import clear_activity_logs, get_activity_log, list_activity_logs

router = APIRouter()


@router.get("", response_model=ActivityLogPage)
async def list_activity_log_endpoint(
    search: Optional[str] = Query(None),
    user_id: Optional[int] = Query(None),
    action: Optional[str] = Query(None),
    sort_by: str = Query("created_at"),
    sort_direction: str = Query("desc"),
    page: int = Query(1, ge=1),
    db: Session = Depends(get_db),
    current_user: User = Depends(require_permission(Permission.ACTIVITY_LOG_VIEW))
):
    """List activity log entries (15 per page)"""
    return list_activity_logs(
        db,
        search=search,
        user_id=user_id,
        action=action,
        sort_by=sort_by,
        sort_direction=sort_direction,
        page=page,
    )


@router.delete("/clear-all", response_model=ClearResult)
async def clear_activity_log_endpoint(
    db: Session = Depends(get_db),
    current_user: User = Depends(require_permission(Permission.ACTIVITY_LOG_CLEAR))
):
    """Delete every activity log entry (Admin-only)"""
    deleted = clear_activity_logs(db, current_user.id)
    return {"message": "All activity logs have been cleared.", "deleted": deleted}


@router.get("/{log_id}", response_model=ActivityLogOut)
async def get_activity_log_endpoint(
    log_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_permission(Permission.ACTIVITY_LOG_VIEW))
):
    """Get one activity log entry"""
    return get_activity_log(db, log_id)
