"""
Runtime settings endpoints (Admin-only)
"""
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.constants import NETWORK_IMAGES_PATH_KEY
from app.core.deps import get_db, require_permission
from app.core.permissions import Permission
from app.models.user import User
from app.schemas.settings import NetworkPathOut, NetworkPathUpdate
from app.services.settings_service import get_network_images_path, get_setting, set_network_images_path

router = APIRouter()


@router.get("/network-path", response_model=NetworkPathOut)
async def get_network_path_endpoint(
    db: Session = Depends(get_db),
    current_user: User = Depends(require_permission(Permission.SETTINGS_MANAGE))
):
    """Current network image path and whether it is the configured default"""
    return {
        "network_path": get_network_images_path(db),
        "is_default": get_setting(db, NETWORK_IMAGES_PATH_KEY) is None,
    }


@router.put("/network-path", response_model=NetworkPathOut)
async def update_network_path_endpoint(
    payload: NetworkPathUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_permission(Permission.SETTINGS_MANAGE))
):
    """Override the network image path"""
    row = set_network_images_path(db, payload.network_path, current_user.id)
    return {"network_path": row.value, "is_default": False}
