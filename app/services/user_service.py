"""
User service - business logic for managing Admin and HR accounts
"""
import logging
from typing import Any, Dict, Optional

from fastapi import HTTPException, status
from sqlalchemy import func, or_
from sqlalchemy.orm import Session

from app.core.config import settings
from app.core.permissions import Permission, can
from app.core.security import hash_password
from app.models.activity_log import AuditTarget
from app.models.user import Role, User
from app.schemas.user import UserCreate, UserUpdate
from app.services.audit_service import log_activity
from app.utils.pagination import paginate, resolve_sort

logger = logging.getLogger(__name__)

SORTABLE_COLUMNS = {
    "name": User.name,
    "email": User.email,
    "role": User.role,
    "created_at": User.created_at,
}


def get_user(db: Session, user_id: int) -> User:
    """Get a user by ID or raise 404"""
    user = db.query(User).filter(User.id == user_id).first()
    if not user:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"User with id {user_id} not found"
        )
    return user


def get_user_by_email(db: Session, email: str) -> Optional[User]:
    return db.query(User).filter(func.lower(User.email) == func.lower(email)).first()


def _ensure_email_available(db: Session, email: str, exclude_id: Optional[int] = None) -> None:
    existing = get_user_by_email(db, email)
    if existing and existing.id != exclude_id:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail={"email": "The email has already been taken."}
        )


def _assignable_role(actor: User, requested: Role) -> Role:
    """Roles other than HR can only be handed out by users allowed to assign Admin"""
    if can(actor, Permission.USER_ASSIGN_ADMIN):
        return requested
    return Role.HR


def list_users(
    db: Session,
    search: Optional[str] = None,
    role: Optional[str] = None,
    sort_by: str = "name",
    sort_direction: str = "asc",
    page: int = 1,
    per_page: Optional[int] = None,
) -> Dict[str, Any]:
    """Search, filter, sort and paginate user accounts"""
    per_page = per_page or settings.DEFAULT_PAGE_SIZE
    query = db.query(User)
    if search:
        like = f"%{search}%"
        query = query.filter(or_(User.name.ilike(like), User.email.ilike(like), User.role.ilike(like)))
    if role:
        query = query.filter(User.role == role)

    sort_key, order = resolve_sort(sort_by, sort_direction, SORTABLE_COLUMNS, "name")
    users, meta = paginate(query.order_by(order, User.id), page, per_page)
    return {
        "users": users,
        "meta": meta,
        "filters": {
            "search": search,
            "role": role,
            "sort_by": sort_key,
            "sort_direction": "desc" if (sort_direction or "").lower() == "desc" else "asc",
            "per_page": per_page,
        },
    }


def create_user(db: Session, data: UserCreate, actor: User) -> User:
    """
    Create a user account

    Args:
        db: Database session
        data: Validated user data
        actor: User performing the action; HR actors always create HR accounts

    Returns:
        Created User instance

    Raises:
        HTTPException: 422 if the e-mail is already registered
    """
    _ensure_email_available(db, data.email)
    role = _assignable_role(actor, data.role)

    user = User(
        name=data.name,
        email=data.email,
        password=hash_password(data.password),
        role=role.value,
    )
    db.add(user)
    db.commit()
    db.refresh(user)

    log_activity(
        db,
        action="user_created",
        description=f"User {user.name} was created",
        target=AuditTarget.USER,
        target_id=user.id,
        properties={"name": user.name, "email": user.email, "role": user.role},
    )
    return user


def update_user(db: Session, user_id: int, data: UserUpdate, actor: User) -> User:
    """
    Update another user's account

    Raises:
        HTTPException: 400 when editing your own account, 403 when an HR user
            edits an Admin account, 422 on a duplicate e-mail
    """
    user = get_user(db, user_id)
    if user.id == actor.id:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="You cannot modify your own account from user management."
        )
    if user.is_admin and not can(actor, Permission.USER_ASSIGN_ADMIN):
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Unauthorized action."
        )
    _ensure_email_available(db, data.email, exclude_id=user.id)

    user.name = data.name
    user.email = data.email
    user.role = _assignable_role(actor, data.role).value
    if data.password:
        user.password = hash_password(data.password)
    db.commit()
    db.refresh(user)

    log_activity(
        db,
        action="user_updated",
        description=f"User {user.name} was updated",
        target=AuditTarget.USER,
        target_id=user.id,
        properties={"name": user.name, "email": user.email, "role": user.role},
    )
    return user


def delete_user(db: Session, user_id: int, actor: User) -> None:
    """
    Delete a user account

    Raises:
        HTTPException: 400 when deleting your own account
    """
    user = get_user(db, user_id)
    if user.id == actor.id:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="You cannot delete your own account."
        )

    # Captured before the row goes away
    name = user.name
    db.delete(user)
    db.commit()

    log_activity(
        db,
        action="user_deleted",
        description=f"User {name} was deleted",
        target=AuditTarget.USER,
        target_id=user_id,
        properties={"name": name},
    )
