"""
Dashboard endpoint
"""
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.core.deps import get_db, require_permission
from app.core.permissions import Permission
from app.models.user import User
from app.schemas.dashboard import DashboardOut
from app.services.dashboard_service import get_dashboard

router = APIRouter()


@router.get("", response_model=DashboardOut)
async def dashboard_endpoint(
    db: Session = Depends(get_db),
    current_user: User = Depends(require_permission(Permission.DASHBOARD_VIEW))
):
    """Employee totals and ID progress per business unit"""
    return get_dashboard(db)
