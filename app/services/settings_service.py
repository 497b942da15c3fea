"""
Settings service - runtime key-value settings (network image path)
"""
import logging
from typing import Optional

from sqlalchemy.orm import Session

from app.constants import NETWORK_IMAGES_PATH_KEY
from app.core.config import settings
from app.models.activity_log import AuditTarget
from app.models.network_path import NetworkPath
from app.services.audit_service import log_activity

logger = logging.getLogger(__name__)


def get_setting(db: Session, key: str) -> Optional[NetworkPath]:
    return db.query(NetworkPath).filter(NetworkPath.key == key).first()


def get_network_images_path(db: Session) -> str:
    """Network share root: the stored override if present, else settings.NETWORK_IMAGES_PATH"""
    row = get_setting(db, NETWORK_IMAGES_PATH_KEY)
    if row is not None and row.value:
        return row.value
    return settings.NETWORK_IMAGES_PATH


def set_network_images_path(db: Session, value: str, actor_id: int) -> NetworkPath:
    """
    Create or update the network image path override

    Args:
        db: Database session
        value: New base directory
        actor_id: ID of the user making the change

    Returns:
        The stored NetworkPath row
    """
    row = get_setting(db, NETWORK_IMAGES_PATH_KEY)
    old_value = row.value if row is not None else None
    if row is None:
        row = NetworkPath(key=NETWORK_IMAGES_PATH_KEY, value=value)
        db.add(row)
    else:
        row.value = value
    db.commit()
    db.refresh(row)

    logger.info("Network images path changed from %r to %r", old_value, value)
    log_activity(
        db,
        action="network_path_updated",
        description="Network images path was updated",
        target=AuditTarget.NETWORK_PATH,
        target_id=row.id,
        properties={"old": old_value, "new": value, "updated_by": actor_id},
    )
    return row
