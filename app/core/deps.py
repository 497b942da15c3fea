"""
Dependencies and guards for FastAPI endpoints
"""
from typing import Generator
from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlalchemy.orm import Session
from app.db.session import SessionLocal
from app.core.permissions import Permission, can
from app.core.request_context import get_request_context
from app.core.security import decode_token
from app.models.user import User
from app.services.storage_service import BlobStorage, get_storage


security = HTTPBearer()


def get_db() -> Generator:
    """Dependency for getting database session"""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


async def get_current_user(
    credentials: HTTPAuthorizationCredentials = Depends(security),
    db: Session = Depends(get_db)
) -> User:
    """
    Get current authenticated user from JWT token

    Also records the user id on the request context so activity log entries
    written while handling this request are attributed to them.
    """
    token = credentials.credentials

    try:
        payload = decode_token(token)
        sub_value = payload.get("sub")
        if sub_value is None:
            raise HTTPException(
                status_code=status.HTTP_401_UNAUTHORIZED,
                detail="Invalid authentication credentials",
                headers={"WWW-Authenticate": "Bearer"},
            )
        # JWT sub is a string
        user_id: int = int(sub_value)
    except (ValueError, TypeError):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid authentication credentials",
            headers={"WWW-Authenticate": "Bearer"},
        )

    user = db.query(User).filter(User.id == user_id).first()
    if user is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="User not found",
            headers={"WWW-Authenticate": "Bearer"},
        )

    ctx = get_request_context()
    if ctx is not None:
        ctx.user_id = user.id

    return user


def require_permission(permission: Permission):
    """
    Dependency factory for policy-based access control

    Usage:
        @router.delete("/{id}")
        async def delete_endpoint(user: User = Depends(require_permission(Permission.EMPLOYEE_DELETE))):
            ...
    """
    def permission_checker(current_user: User = Depends(get_current_user)) -> User:
        if not can(current_user, permission):
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail="Unauthorized action."
            )
        return current_user
    return permission_checker


def get_blob_storage(db: Session = Depends(get_db)) -> BlobStorage:
    """Blob storage rooted at the current network path setting"""
    return get_storage(db)
