"""
Employee endpoints (Admin/HR; deletion is Admin-only)
"""
from typing import List, Optional

from fastapi import APIRouter, Depends, Query, Request
from sqlalchemy.orm import Session

from app.api.forms import parse_form, read_multipart
from app.core.deps import get_blob_storage, get_db, require_permission
from app.core.permissions import Permission
from app.models.employee import Employee
from app.models.user import User
from app.schemas.employee import (
    BulkDeleteResult,
    EmployeeBulkDelete,
    EmployeeCreate,
    EmployeeCreated,
    EmployeeOut,
    EmployeePage,
    EmployeeUpdate,
    IdExportOut,
    IdPreviewRequest,
)
from app.schemas.template_image import IdPreview, IdPreviewGroup
from app.services.employee_service import (
    bulk_delete_employees,
    create_employee,
    delete_employee,
    get_employee,
    id_expiry,
    list_employees,
    mark_id_exported,
    update_employee,
)
from app.services.storage_service import BlobStorage
from app.services.template_service import bulk_id_preview, id_preview

router = APIRouter()


@router.get("", response_model=EmployeePage)
async def list_employees_endpoint(
    search: Optional[str] = Query(None),
    businessunit_id: Optional[str] = Query(None),
    sort_by: str = Query("employee_lastname"),
    sort_direction: str = Query("asc"),
    page: int = Query(1, ge=1),
    db: Session = Depends(get_db),
    current_user: User = Depends(require_permission(Permission.EMPLOYEE_VIEW))
):
    """List employees with search, business unit filter and sorting"""
    result = list_employees(
        db,
        search=search,
        businessunit_id=businessunit_id,
        sort_by=sort_by,
        sort_direction=sort_direction,
        page=page,
    )
    return {**result, "current_user_role": current_user.role}


@router.post("", response_model=EmployeeCreated, status_code=201)
async def create_employee_endpoint(
    request: Request,
    db: Session = Depends(get_db),
    storage: BlobStorage = Depends(get_blob_storage),
    current_user: User = Depends(require_permission(Permission.EMPLOYEE_CREATE))
):
    """Create an employee (multipart form with optional image_person, image_signature, image_qrcode)"""
    fields, files = await read_multipart(request, Employee.FILE_FIELDS)
    data = parse_form(EmployeeCreate, fields)
    employee = create_employee(db, data, files, storage, current_user.id)
    return {
        "message": f"Employee {employee.full_name} has been added successfully.",
        "employee": employee.id_no,
        "uuid": employee.uuid,
    }


@router.post("/bulk-destroy", response_model=BulkDeleteResult)
async def bulk_delete_employees_endpoint(
    payload: EmployeeBulkDelete,
    db: Session = Depends(get_db),
    storage: BlobStorage = Depends(get_blob_storage),
    current_user: User = Depends(require_permission(Permission.EMPLOYEE_DELETE))
):
    """Delete several employees (Admin-only)"""
    deleted = bulk_delete_employees(db, payload.uuids, storage, current_user.id)
    return {"message": f"{deleted} employees deleted successfully.", "deleted": deleted}


@router.post("/bulk-id-preview", response_model=List[IdPreviewGroup])
async def bulk_id_preview_endpoint(
    payload: IdPreviewRequest,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_permission(Permission.EMPLOYEE_VIEW))
):
    """ID card data for several employees, grouped by business unit"""
    return bulk_id_preview(db, payload.uuids)


@router.get("/{employee_uuid}", response_model=EmployeeOut)
async def get_employee_endpoint(
    employee_uuid: str,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_permission(Permission.EMPLOYEE_VIEW))
):
    """Get an employee by UUID"""
    return get_employee(db, employee_uuid)


@router.api_route("/{employee_uuid}", methods=["PUT", "POST"], response_model=EmployeeOut)
async def update_employee_endpoint(
    employee_uuid: str,
    request: Request,
    db: Session = Depends(get_db),
    storage: BlobStorage = Depends(get_blob_storage),
    current_user: User = Depends(require_permission(Permission.EMPLOYEE_UPDATE))
):
    """Update an employee; omitted fields are left unchanged"""
    fields, files = await read_multipart(request, Employee.FILE_FIELDS)
    data = parse_form(EmployeeUpdate, fields)
    return update_employee(db, employee_uuid, data, files, storage, current_user.id)


@router.delete("/{employee_uuid}")
async def delete_employee_endpoint(
    employee_uuid: str,
    db: Session = Depends(get_db),
    storage: BlobStorage = Depends(get_blob_storage),
    current_user: User = Depends(require_permission(Permission.EMPLOYEE_DELETE))
):
    """Delete an employee (Admin-only)"""
    delete_employee(db, employee_uuid, storage, current_user.id)
    return {"message": "Employee deleted successfully."}


@router.post("/{employee_uuid}/export-id", response_model=IdExportOut)
async def export_id_endpoint(
    employee_uuid: str,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_permission(Permission.EMPLOYEE_EXPORT))
):
    """Mark an employee's ID card as exported and bump its issuance counter"""
    employee = mark_id_exported(db, employee_uuid, current_user.id)
    return {
        "uuid": employee.uuid,
        "id_no": employee.id_no,
        "id_status": employee.id_status,
        "employee_id_counter": employee.employee_id_counter,
        "id_last_exported_at": employee.id_last_exported_at,
        "id_expires_at": id_expiry(employee),
    }


@router.get("/{employee_uuid}/id-preview", response_model=IdPreview)
async def id_preview_endpoint(
    employee_uuid: str,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_permission(Permission.EMPLOYEE_VIEW))
):
    """ID card data (employee, layout, image URLs) for one employee"""
    return id_preview(db, get_employee(db, employee_uuid))
