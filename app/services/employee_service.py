"""
Employee service - business logic for employee records and their ID cards
"""
import logging
from typing import Any, Dict, List, Optional

from fastapi import HTTPException, status
from sqlalchemy import Integer, cast, func, or_
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, selectinload
from starlette.datastructures import UploadFile

from app.constants import EMPLOYEE_ID_SEQUENCE, ID_NUMBER_WIDTH, ID_VALIDITY_YEARS
from app.core.config import settings
from app.models.activity_log import AuditTarget
from app.models.business_unit import BusinessUnit
from app.models.employee import Employee, IdSequence, IdStatus
from app.schemas.employee import EmployeeCreate, EmployeeUpdate
from app.services.audit_service import log_activity
from app.services.storage_service import BlobStorage, validate_image
from app.utils.datetime_utils import add_years, now_utc, today_local
from app.utils.pagination import paginate, resolve_sort

logger = logging.getLogger(__name__)

# Required columns: a blank value in an update means "leave as is"
_NON_NULLABLE = {
    "employee_firstname",
    "employee_lastname",
    "position",
    "businessunit_id",
    "employment_status",
    "id_status",
}

SORTABLE_COLUMNS = {
    "employee_lastname": Employee.employee_lastname,
    "employee_firstname": Employee.employee_firstname,
    "id_no": Employee.id_no,
    "position": Employee.position,
    "date_hired": Employee.date_hired,
    "id_status": Employee.id_status,
    "employment_status": Employee.employment_status,
    "created_at": Employee.created_at,
    # Virtual column: ordered by the foreign key, echoed back under its display name
    "businessunit_name": Employee.businessunit_id,
    "businessunit_id": Employee.businessunit_id,
}


def format_id_number(value: int) -> str:
    return str(value).zfill(ID_NUMBER_WIDTH)


def next_id_number(db: Session) -> str:
    """
    Reserve the next sequential ID number inside the caller's transaction

    The sequence row is seeded from the highest existing id_no the first time
    it is used and only ever moves forward, so numbers of deleted employees are
    not handed out again. The UPDATE takes the row lock, serializing
    concurrent creates until the surrounding transaction ends.
    """
    seq = db.query(IdSequence).filter(IdSequence.name == EMPLOYEE_ID_SEQUENCE).first()
    if seq is None:
        current_max = db.query(func.max(cast(Employee.id_no, Integer))).scalar() or 0
        db.add(IdSequence(name=EMPLOYEE_ID_SEQUENCE, value=current_max))
        db.flush()

    db.query(IdSequence).filter(IdSequence.name == EMPLOYEE_ID_SEQUENCE).update(
        {IdSequence.value: IdSequence.value + 1}, synchronize_session=False
    )
    value = db.query(IdSequence.value).filter(IdSequence.name == EMPLOYEE_ID_SEQUENCE).scalar()
    return format_id_number(value)


def get_employee(db: Session, employee_uuid: str) -> Employee:
    """Get an employee by UUID or raise 404"""
    employee = db.query(Employee).filter(Employee.uuid == employee_uuid).first()
    if not employee:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Employee with id {employee_uuid} not found"
        )
    return employee


def _ensure_business_unit(db: Session, businessunit_id: str) -> BusinessUnit:
    unit = db.query(BusinessUnit).filter(BusinessUnit.businessunit_id == businessunit_id).first()
    if not unit:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail={"businessunit_id": "The selected business unit is invalid."}
        )
    return unit


def list_employees(
    db: Session,
    search: Optional[str] = None,
    businessunit_id: Optional[str] = None,
    sort_by: str = "employee_lastname",
    sort_direction: str = "asc",
    page: int = 1,
    per_page: Optional[int] = None,
    id_status: Optional[IdStatus] = None,
) -> Dict[str, Any]:
    """
    Search, filter, sort and paginate employees

    Args:
        db: Database session
        search: Matches first/middle/last name, ID number and business unit name
        businessunit_id: Restrict to one business unit
        sort_by: Column key; "businessunit_name" sorts by the business unit id
        sort_direction: "asc" or "desc"
        page: 1-based page number
        per_page: Page size (defaults to settings.DEFAULT_PAGE_SIZE)
        id_status: Restrict to pending or printed IDs

    Returns:
        Dict with employees, meta, filters and the business_units dropdown
    """
    per_page = per_page or settings.DEFAULT_PAGE_SIZE
    query = (
        db.query(Employee)
        .outerjoin(BusinessUnit, Employee.businessunit_id == BusinessUnit.businessunit_id)
        .options(selectinload(Employee.business_unit))
    )

    if search:
        like = f"%{search}%"
        query = query.filter(
            or_(
                Employee.employee_firstname.ilike(like),
                Employee.employee_middlename.ilike(like),
                Employee.employee_lastname.ilike(like),
                Employee.id_no.ilike(like),
                BusinessUnit.businessunit_name.ilike(like),
            )
        )
    if businessunit_id:
        query = query.filter(Employee.businessunit_id == businessunit_id)
    if id_status is not None:
        query = query.filter(Employee.id_status == IdStatus(id_status).value)

    sort_key, order = resolve_sort(sort_by, sort_direction, SORTABLE_COLUMNS, "employee_lastname")
    query = query.order_by(order, Employee.id_no.asc())

    employees, meta = paginate(query, page, per_page)
    business_units = db.query(BusinessUnit).order_by(BusinessUnit.businessunit_name).all()

    return {
        "employees": employees,
        "meta": meta,
        "filters": {
            "search": search,
            "businessunit_id": businessunit_id,
            "sort_by": sort_key,
            "sort_direction": "desc" if (sort_direction or "").lower() == "desc" else "asc",
            "per_page": per_page,
        },
        "business_units": business_units,
    }


def _validate_uploads(files: Dict[str, UploadFile]) -> None:
    for field, upload in files.items():
        validate_image(upload, field)


def create_employee(
    db: Session,
    data: EmployeeCreate,
    files: Dict[str, UploadFile],
    storage: BlobStorage,
    actor_id: int,
) -> Employee:
    """
    Create an employee with the next ID number and any uploaded images

    The ID number reservation, the row and the file placements succeed or fail
    together: on any failure placed files are removed and nothing is committed.

    Args:
        db: Database session
        data: Validated form fields
        files: Uploads keyed by image column (image_person, image_signature, image_qrcode)
        storage: Blob storage
        actor_id: ID of the user creating the employee

    Returns:
        Created Employee instance

    Raises:
        HTTPException: 422 for an unknown business unit or invalid image, 500 on storage/database failure
    """
    _ensure_business_unit(db, data.businessunit_id)
    _validate_uploads(files)

    placed: List[tuple] = []
    try:
        values = data.model_dump(exclude_none=True)
        values["employment_status"] = data.employment_status.value
        values["id_status"] = (data.id_status or IdStatus.PENDING).value

        employee = Employee(
            **values,
            id_no=next_id_number(db),
            date_hired=today_local(),
            employee_id_counter=1,
        )
        for field, bucket in Employee.FILE_FIELDS.items():
            if field in files:
                name = storage.save(bucket, files[field], keep_original_name=True)
                placed.append((bucket, name))
                setattr(employee, field, name)

        db.add(employee)
        db.commit()
        db.refresh(employee)
    except (SQLAlchemyError, OSError):
        db.rollback()
        storage.delete_many(placed)
        logger.exception("Failed to create employee %s %s", data.employee_firstname, data.employee_lastname)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to add employee. Please try again."
        )

    log_activity(
        db,
        action="employee_created",
        description=f"Employee {employee.full_name} was created",
        target=AuditTarget.EMPLOYEE,
        target_id=employee.uuid,
        properties={
            "name": employee.full_name,
            "position": employee.position,
            "id_no": employee.id_no,
        },
    )
    return employee


def update_employee(
    db: Session,
    employee_uuid: str,
    data: EmployeeUpdate,
    files: Dict[str, UploadFile],
    storage: BlobStorage,
    actor_id: int,
) -> Employee:
    """
    Update an employee from a submitted form

    Only fields present in the form are applied; a blank optional field is
    cleared. Each uploaded image replaces the previous file, which is removed
    first.

    Returns:
        Updated Employee instance
    """
    employee = get_employee(db, employee_uuid)
    submitted = data.model_dump(include=data.model_fields_set)
    if "businessunit_id" in submitted:
        _ensure_business_unit(db, submitted["businessunit_id"])
    _validate_uploads(files)

    old_values = {key: getattr(employee, key) for key in submitted}
    new_values: Dict[str, Any] = {}
    placed: List[tuple] = []
    try:
        for key, value in submitted.items():
            if value is None and key in _NON_NULLABLE:
                continue
            if key == "id_status" and value is not None:
                value = IdStatus(value).value
            setattr(employee, key, value)
            new_values[key] = value

        for field, bucket in Employee.FILE_FIELDS.items():
            if field not in files:
                continue
            previous = getattr(employee, field)
            if previous:
                storage.delete(bucket, previous)
            name = storage.save(bucket, files[field], keep_original_name=True)
            placed.append((bucket, name))
            old_values[field] = previous
            new_values[field] = name
            setattr(employee, field, name)

        db.commit()
        db.refresh(employee)
    except (SQLAlchemyError, OSError):
        db.rollback()
        storage.delete_many(placed)
        logger.exception("Failed to update employee %s", employee_uuid)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to update employee. Please try again."
        )

    log_activity(
        db,
        action="employee_updated",
        description=f"Employee {employee.full_name} was updated",
        target=AuditTarget.EMPLOYEE,
        target_id=employee.uuid,
        properties={"old": old_values, "new": new_values},
    )
    return employee


def delete_employee(db: Session, employee_uuid: str, storage: BlobStorage, actor_id: int) -> None:
    """Delete an employee and the images it references"""
    employee = get_employee(db, employee_uuid)
    name = employee.full_name
    files = employee.stored_files()

    db.delete(employee)
    db.commit()
    storage.delete_many(files)

    log_activity(
        db,
        action="employee_deleted",
        description=f"Employee {name} was deleted",
        target=AuditTarget.EMPLOYEE,
        target_id=employee_uuid,
        properties={"name": name, "deleted_by": actor_id},
    )


def bulk_delete_employees(db: Session, uuids: List[str], storage: BlobStorage, actor_id: int) -> int:
    """
    Delete several employees at once

    Duplicate and unknown UUIDs are ignored.

    Returns:
        Number of employees actually deleted
    """
    unique_ids = list(dict.fromkeys(uuids))
    employees = db.query(Employee).filter(Employee.uuid.in_(unique_ids)).all()
    if not employees:
        return 0

    files = [f for employee in employees for f in employee.stored_files()]
    summary = [{"uuid": e.uuid, "id_no": e.id_no, "name": e.full_name} for e in employees]

    deleted = (
        db.query(Employee)
        .filter(Employee.uuid.in_([e.uuid for e in employees]))
        .delete(synchronize_session=False)
    )
    db.commit()
    storage.delete_many(files)

    log_activity(
        db,
        action="employees_bulk_deleted",
        description=f"{deleted} employees were deleted",
        target=AuditTarget.EMPLOYEE,
        properties={"count": deleted, "employees": summary, "deleted_by": actor_id},
    )
    return deleted


def id_expiry(employee: Employee):
    if employee.id_last_exported_at is None:
        return None
    return add_years(employee.id_last_exported_at, ID_VALIDITY_YEARS)


def mark_id_exported(db: Session, employee_uuid: str, actor_id: int) -> Employee:
    """
    Record that an employee's ID card was exported for printing

    Sets the status to printed, bumps the issuance counter and stamps the
    export time (the card expires ID_VALIDITY_YEARS later).
    """
    employee = get_employee(db, employee_uuid)
    employee.id_status = IdStatus.PRINTED.value
    employee.employee_id_counter = (employee.employee_id_counter or 0) + 1
    employee.id_last_exported_at = now_utc()
    db.commit()
    db.refresh(employee)

    log_activity(
        db,
        action="employee_id_exported",
        description=f"ID card of {employee.full_name} was exported",
        target=AuditTarget.EMPLOYEE,
        target_id=employee.uuid,
        properties={
            "id_no": employee.id_no,
            "employee_id_counter": employee.employee_id_counter,
            "expires_at": id_expiry(employee),
        },
    )
    return employee
