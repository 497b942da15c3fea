"""
Activity log service - audit trail writes and the activity log viewer
"""
import logging
from typing import Any, Dict, Optional

from fastapi import HTTPException, status
from sqlalchemy import or_
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.core.config import settings
from app.core.request_context import get_request_context
from app.models.activity_log import ActivityLog, AuditTarget
from app.models.user import User
from app.utils.datetime_utils import now_utc
from app.utils.json_serializer import sanitize_for_json
from app.utils.pagination import paginate, resolve_sort

logger = logging.getLogger(__name__)

SORTABLE_COLUMNS = {
    "created_at": ActivityLog.created_at,
    "action": ActivityLog.action,
    "user_id": ActivityLog.user_id,
    "model_type": ActivityLog.model_type,
    "id": ActivityLog.id,
}


def log_activity(
    db: Session,
    action: str,
    description: Optional[str] = None,
    target: Optional[AuditTarget] = None,
    target_id: Any = None,
    properties: Optional[Dict[str, Any]] = None,
    actor_id: Optional[int] = None,
) -> Optional[ActivityLog]:
    """
    Append one entry to the activity log

    Call after the primary change has been committed. The entry is written in
    its own commit; if that fails the failure is logged, the session rolled back
    and None returned, unless settings.AUDIT_STRICT is on, in which case the
    error propagates.

    Args:
        db: Database session
        action: Machine-readable action tag (e.g. "employee_created")
        description: Human-readable sentence
        target: Kind of entity affected
        target_id: Identifier of the affected entity (stored as text)
        properties: Structured context, sanitized to JSON-safe values
        actor_id: Acting user; defaults to the user of the current request

    Returns:
        Created ActivityLog instance, or None when the write was skipped
    """
    if not action:
        raise ValueError("action is required")

    ctx = get_request_context()
    if actor_id is None and ctx is not None:
        actor_id = ctx.user_id

    entry = ActivityLog(
        user_id=actor_id,
        action=action,
        description=description,
        model_type=target.value if target is not None else None,
        model_id=str(target_id) if target_id is not None else None,
        ip_address=ctx.ip_address if ctx else None,
        user_agent=ctx.user_agent if ctx else None,
        properties=sanitize_for_json(properties) if properties is not None else None,
        created_at=now_utc(),
    )
    try:
        db.add(entry)
        db.commit()
        db.refresh(entry)
    except SQLAlchemyError:
        db.rollback()
        if settings.AUDIT_STRICT:
            raise
        logger.exception("Failed to write activity log entry action=%s model_id=%s", action, entry.model_id)
        return None
    return entry


def list_activity_logs(
    db: Session,
    search: Optional[str] = None,
    user_id: Optional[int] = None,
    action: Optional[str] = None,
    sort_by: str = "created_at",
    sort_direction: str = "desc",
    page: int = 1,
    per_page: Optional[int] = None,
) -> Dict[str, Any]:
    """
    Search, filter, sort and paginate the activity log

    Returns:
        Dict with activities, meta, filters, users (for the actor dropdown)
        and action_types (distinct actions)
    """
    per_page = per_page or settings.ACTIVITY_LOG_PAGE_SIZE
    query = db.query(ActivityLog).outerjoin(User, ActivityLog.user_id == User.id)

    if search:
        like = f"%{search}%"
        query = query.filter(
            or_(
                ActivityLog.action.ilike(like),
                ActivityLog.description.ilike(like),
                User.name.ilike(like),
            )
        )
    if user_id:
        query = query.filter(ActivityLog.user_id == user_id)
    if action:
        query = query.filter(ActivityLog.action == action)

    sort_key, order = resolve_sort(sort_by, sort_direction, SORTABLE_COLUMNS, "created_at")
    query = query.order_by(order, ActivityLog.id.desc())

    activities, meta = paginate(query, page, per_page)

    users = db.query(User.id, User.name).order_by(User.name).all()
    action_types = [
        row[0] for row in db.query(ActivityLog.action).distinct().order_by(ActivityLog.action).all()
    ]

    return {
        "activities": activities,
        "meta": meta,
        "filters": {
            "search": search,
            "user_id": user_id,
            "action": action,
            "sort_by": sort_key,
            "sort_direction": "desc" if (sort_direction or "").lower() == "desc" else "asc",
        },
        "users": [{"id": u.id, "name": u.name} for u in users],
        "action_types": action_types,
    }


def get_activity_log(db: Session, log_id: int) -> ActivityLog:
    """Get an activity log entry by ID or raise 404"""
    entry = db.query(ActivityLog).filter(ActivityLog.id == log_id).first()
    if not entry:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Activity log with id {log_id} not found"
        )
    return entry


def clear_activity_logs(db: Session, actor_id: int) -> int:
    """
    Delete every activity log entry

    Nothing is written to the activity log afterwards so the table ends up
    empty; the clearing itself goes to the application log.

    Returns:
        Number of deleted entries
    """
    deleted = db.query(ActivityLog).delete(synchronize_session=False)
    db.commit()
    logger.warning("Activity log cleared by user_id=%s (%d entries)", actor_id, deleted)
    return deleted
