"""
User management endpoints (Admin/HR; deletion is Admin-only)
"""
from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from app.core.deps import get_db, require_permission
from app.core.permissions import Permission
from app.models.user import User
from app.schemas.user import UserCreate, UserOut, UserPage, UserUpdate
from app.services.user_service import create_user, delete_user, list_users, update_user

router = APIRouter()


@router.get("", response_model=UserPage)
async def list_users_endpoint(
    search: Optional[str] = Query(None),
    role: Optional[str] = Query(None),
    sort_by: str = Query("name"),
    sort_direction: str = Query("asc"),
    page: int = Query(1, ge=1),
    per_page: int = Query(10, ge=1, le=100),
    db: Session = Depends(get_db),
    current_user: User = Depends(require_permission(Permission.USER_VIEW))
):
    """List user accounts"""
    result = list_users(
        db,
        search=search,
        role=role,
        sort_by=sort_by,
        sort_direction=sort_direction,
        page=page,
        per_page=per_page,
    )
    return {**result, "current_user_role": current_user.role}


@router.post("", response_model=UserOut, status_code=201)
async def create_user_endpoint(
    user_data: UserCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_permission(Permission.USER_CREATE))
):
    """Create a user account (HR users can only create HR accounts)"""
    return create_user(db, user_data, current_user)


@router.put("/{user_id}", response_model=UserOut)
async def update_user_endpoint(
    user_id: int,
    user_data: UserUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_permission(Permission.USER_UPDATE))
):
    """Update another user's account"""
    return update_user(db, user_id, user_data, current_user)


@router.delete("/{user_id}")
async def delete_user_endpoint(
    user_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_permission(Permission.USER_DELETE))
):
    """Delete a user account (Admin-only)"""
    delete_user(db, user_id, current_user)
    return {"message": "User deleted successfully."}
