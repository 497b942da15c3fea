"""
Stored image download endpoint
"""
from fastapi import APIRouter, Depends, HTTPException, status
from fastapi.responses import FileResponse

from app.core.deps import get_blob_storage, require_permission
from app.core.permissions import Permission
from app.models.user import User
from app.services.storage_service import BlobStorage

router = APIRouter()


@router.get("/{bucket}/{filename}")
async def get_file_endpoint(
    bucket: str,
    filename: str,
    storage: BlobStorage = Depends(get_blob_storage),
    current_user: User = Depends(require_permission(Permission.EMPLOYEE_VIEW))
):
    """Serve a stored image (employee photos, signatures, QR codes, templates, logos)"""
    try:
        if not storage.exists(bucket, filename):
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Image not found")
        path = storage.path(bucket, filename)
    except ValueError:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Image not found")
    return FileResponse(path, headers={"Cache-Control": "no-store, no-cache, must-revalidate"})
