"""
Authentication endpoints
"""
import logging

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from app.core.deps import get_current_user, get_db
from app.core.security import create_access_token, verify_password
from app.models.activity_log import AuditTarget
from app.models.user import User
from app.schemas.auth import LoginRequest, TokenResponse
from app.schemas.user import UserOut
from app.services.audit_service import log_activity
from app.services.user_service import get_user_by_email

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("/login", response_model=TokenResponse)
async def login(
    login_data: LoginRequest,
    db: Session = Depends(get_db)
):
    """
    Authenticate user and return JWT token

    Validates e-mail and password. The token subject is the user id.
    """
    user = get_user_by_email(db, login_data.email)
    if not user or not verify_password(login_data.password, user.password):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="These credentials do not match our records."
        )

    access_token = create_access_token(data={"sub": str(user.id), "role": user.role})

    log_activity(
        db,
        action="user_login",
        description=f"User {user.name} logged in",
        target=AuditTarget.USER,
        target_id=user.id,
        properties={"email": user.email, "role": user.role},
        actor_id=user.id,
    )
    return TokenResponse(access_token=access_token)


@router.get("/me", response_model=UserOut)
async def me(current_user: User = Depends(get_current_user)):
    """Get the authenticated user"""
    return current_user
