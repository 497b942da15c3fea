"""
Pending ID endpoints: employees whose ID card has not been printed yet
"""
from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from app.core.deps import get_blob_storage, get_db, require_permission
from app.core.permissions import Permission
from app.models.employee import IdStatus
from app.models.user import User
from app.schemas.employee import BulkDeleteResult, EmployeeBulkDelete, EmployeePage
from app.services.employee_service import bulk_delete_employees, delete_employee, list_employees
from app.services.storage_service import BlobStorage

router = APIRouter()


@router.get("", response_model=EmployeePage)
async def list_pending_ids_endpoint(
    search: Optional[str] = Query(None),
    businessunit_id: Optional[str] = Query(None),
    sort_by: str = Query("employee_lastname"),
    sort_direction: str = Query("asc"),
    page: int = Query(1, ge=1),
    db: Session = Depends(get_db),
    current_user: User = Depends(require_permission(Permission.EMPLOYEE_VIEW))
):
    """List employees with a pending ID card"""
    result = list_employees(
        db,
        search=search,
        businessunit_id=businessunit_id,
        sort_by=sort_by,
        sort_direction=sort_direction,
        page=page,
        id_status=IdStatus.PENDING,
    )
    return {**result, "current_user_role": current_user.role}


@router.post("/bulk-destroy", response_model=BulkDeleteResult)
async def bulk_delete_pending_endpoint(
    payload: EmployeeBulkDelete,
    db: Session = Depends(get_db),
    storage: BlobStorage = Depends(get_blob_storage),
    current_user: User = Depends(require_permission(Permission.EMPLOYEE_DELETE))
):
    """Delete several pending employees (Admin-only)"""
    deleted = bulk_delete_employees(db, payload.uuids, storage, current_user.id)
    return {"message": f"{deleted} employees deleted successfully.", "deleted": deleted}


@router.delete("/{employee_uuid}")
async def delete_pending_endpoint(
    employee_uuid: str,
    db: Session = Depends(get_db),
    storage: BlobStorage = Depends(get_blob_storage),
    current_user: User = Depends(require_permission(Permission.EMPLOYEE_DELETE))
):
    """Delete a pending employee (Admin-only)"""
    delete_employee(db, employee_uuid, storage, current_user.id)
    return {"message": "Employee deleted successfully."}
