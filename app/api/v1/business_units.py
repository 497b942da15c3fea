"""
Business unit endpoints (Admin/HR; deletion is Admin-only)
"""
from typing import Optional

from fastapi import APIRouter, Depends, Query, Request
from sqlalchemy.orm import Session

from app.api.forms import parse_form, read_multipart
from app.core.deps import get_blob_storage, get_db, require_permission
from app.core.permissions import Permission
from app.models.user import User
from app.schemas.business_unit import (
    BusinessUnitBulkDelete,
    BusinessUnitCreate,
    BusinessUnitOut,
    BusinessUnitPage,
    BusinessUnitUpdate,
)
from app.schemas.employee import BulkDeleteResult
from app.services.business_unit_service import (
    bulk_delete_business_units,
    business_unit_out,
    create_business_unit,
    delete_business_unit,
    get_business_unit,
    list_business_units,
    update_business_unit,
)
from app.services.storage_service import BlobStorage

router = APIRouter()


@router.get("", response_model=BusinessUnitPage)
async def list_business_units_endpoint(
    search: Optional[str] = Query(None),
    sort_by: str = Query("businessunit_name"),
    sort_direction: str = Query("asc"),
    page: int = Query(1, ge=1),
    db: Session = Depends(get_db),
    current_user: User = Depends(require_permission(Permission.BUSINESS_UNIT_VIEW))
):
    """List business units"""
    result = list_business_units(db, search=search, sort_by=sort_by, sort_direction=sort_direction, page=page)
    result["business_units"] = [business_unit_out(u) for u in result["business_units"]]
    return {**result, "current_user_role": current_user.role}


@router.post("", response_model=BusinessUnitOut, status_code=201)
async def create_business_unit_endpoint(
    request: Request,
    db: Session = Depends(get_db),
    storage: BlobStorage = Depends(get_blob_storage),
    current_user: User = Depends(require_permission(Permission.BUSINESS_UNIT_CREATE))
):
    """Create a business unit (multipart form with optional image)"""
    fields, files = await read_multipart(request, ["image"])
    data = parse_form(BusinessUnitCreate, fields)
    unit = create_business_unit(db, data, files.get("image"), storage, current_user)
    return business_unit_out(unit)


@router.post("/bulk-destroy", response_model=BulkDeleteResult)
async def bulk_delete_business_units_endpoint(
    payload: BusinessUnitBulkDelete,
    db: Session = Depends(get_db),
    storage: BlobStorage = Depends(get_blob_storage),
    current_user: User = Depends(require_permission(Permission.BUSINESS_UNIT_DELETE))
):
    """Delete several business units (Admin-only)"""
    deleted = bulk_delete_business_units(db, payload.ids, storage, current_user)
    return {"message": f"{deleted} business units deleted successfully.", "deleted": deleted}


@router.get("/{businessunit_id}", response_model=BusinessUnitOut)
async def get_business_unit_endpoint(
    businessunit_id: str,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_permission(Permission.BUSINESS_UNIT_VIEW))
):
    """Get a business unit by ID"""
    return business_unit_out(get_business_unit(db, businessunit_id))


@router.api_route("/{businessunit_id}", methods=["PUT", "POST"], response_model=BusinessUnitOut)
async def update_business_unit_endpoint(
    businessunit_id: str,
    request: Request,
    db: Session = Depends(get_db),
    storage: BlobStorage = Depends(get_blob_storage),
    current_user: User = Depends(require_permission(Permission.BUSINESS_UNIT_UPDATE))
):
    """Update a business unit's name, code or logo"""
    fields, files = await read_multipart(request, ["image"])
    data = parse_form(BusinessUnitUpdate, fields)
    unit = update_business_unit(db, businessunit_id, data, files.get("image"), storage, current_user)
    return business_unit_out(unit)


@router.delete("/{businessunit_id}")
async def delete_business_unit_endpoint(
    businessunit_id: str,
    db: Session = Depends(get_db),
    storage: BlobStorage = Depends(get_blob_storage),
    current_user: User = Depends(require_permission(Permission.BUSINESS_UNIT_DELETE))
):
    """Delete a business unit and everything that belongs to it (Admin-only)"""
    delete_business_unit(db, businessunit_id, storage, current_user)
    return {"message": "Business unit deleted successfully."}
