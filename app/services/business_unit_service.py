"""
Business unit service - business logic for business unit management
"""
import logging
from typing import Any, Dict, List, Optional

from fastapi import HTTPException, status
from sqlalchemy import func, or_
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session
from starlette.datastructures import UploadFile

from app.constants import BUCKET_BUSINESS_UNITS
from app.core.config import settings
from app.models.activity_log import AuditTarget
from app.models.business_unit import BusinessUnit
from app.models.employee import Employee
from app.models.template_image import TemplateImage
from app.models.user import User
from app.schemas.business_unit import BusinessUnitCreate, BusinessUnitOut, BusinessUnitUpdate
from app.services.audit_service import log_activity
from app.services.storage_service import BlobStorage, validate_image
from app.utils.pagination import paginate, resolve_sort

logger = logging.getLogger(__name__)

SORTABLE_COLUMNS = {
    "businessunit_name": BusinessUnit.businessunit_name,
    "businessunit_code": BusinessUnit.businessunit_code,
    "businessunit_id": BusinessUnit.businessunit_id,
    "created_at": BusinessUnit.created_at,
}


def get_business_unit(db: Session, businessunit_id: str) -> BusinessUnit:
    """Get a business unit by ID or raise 404"""
    unit = db.query(BusinessUnit).filter(BusinessUnit.businessunit_id == businessunit_id).first()
    if not unit:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Business unit with id {businessunit_id} not found"
        )
    return unit


def _ensure_code_available(db: Session, code: Optional[str], exclude_id: Optional[str] = None) -> None:
    if not code:
        return
    query = db.query(BusinessUnit).filter(func.lower(BusinessUnit.businessunit_code) == func.lower(code))
    if exclude_id is not None:
        query = query.filter(BusinessUnit.businessunit_id != exclude_id)
    if query.first():
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail={"businessunit_code": "The business unit code has already been taken."}
        )


def _dependent_files(db: Session, businessunit_ids: List[str]) -> List[tuple]:
    """Files of employees and templates that the database cascade will remove"""
    files: List[tuple] = []
    for employee in db.query(Employee).filter(Employee.businessunit_id.in_(businessunit_ids)).all():
        files.extend(employee.stored_files())
    for template in db.query(TemplateImage).filter(TemplateImage.businessunit_id.in_(businessunit_ids)).all():
        files.extend(template.stored_files())
    return files


def snapshot(unit: BusinessUnit) -> Dict[str, Any]:
    return {
        "businessunit_id": unit.businessunit_id,
        "businessunit_name": unit.businessunit_name,
        "businessunit_code": unit.businessunit_code,
        "businessunit_image_path": unit.businessunit_image_path,
    }


def list_business_units(
    db: Session,
    search: Optional[str] = None,
    sort_by: str = "businessunit_name",
    sort_direction: str = "asc",
    page: int = 1,
    per_page: Optional[int] = None,
) -> Dict[str, Any]:
    """Search, sort and paginate business units"""
    per_page = per_page or settings.DEFAULT_PAGE_SIZE
    query = db.query(BusinessUnit)
    if search:
        like = f"%{search}%"
        query = query.filter(
            or_(
                BusinessUnit.businessunit_name.ilike(like),
                BusinessUnit.businessunit_code.ilike(like),
                BusinessUnit.businessunit_id.ilike(like),
            )
        )
    sort_key, order = resolve_sort(sort_by, sort_direction, SORTABLE_COLUMNS, "businessunit_name")
    units, meta = paginate(query.order_by(order), page, per_page)
    return {
        "business_units": units,
        "meta": meta,
        "filters": {
            "search": search,
            "sort_by": sort_key,
            "sort_direction": "desc" if (sort_direction or "").lower() == "desc" else "asc",
        },
    }


def create_business_unit(
    db: Session,
    data: BusinessUnitCreate,
    image: Optional[UploadFile],
    storage: BlobStorage,
    actor: User,
) -> BusinessUnit:
    """
    Create a business unit with an optional logo

    Args:
        db: Database session
        data: Validated form fields
        image: Optional logo upload
        storage: Blob storage
        actor: User creating the business unit

    Returns:
        Created BusinessUnit instance

    Raises:
        HTTPException: 422 if the code or id is taken or the logo is invalid
    """
    _ensure_code_available(db, data.businessunit_code)
    if data.businessunit_id and db.query(BusinessUnit).filter(
        BusinessUnit.businessunit_id == data.businessunit_id
    ).first():
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail={"businessunit_id": "The business unit id has already been taken."}
        )
    if image is not None:
        validate_image(image, "image")

    unit = BusinessUnit(
        businessunit_name=data.businessunit_name,
        businessunit_code=data.businessunit_code,
    )
    if data.businessunit_id:
        unit.businessunit_id = data.businessunit_id

    placed = None
    try:
        if image is not None:
            placed = storage.save(BUCKET_BUSINESS_UNITS, image)
            unit.businessunit_image_path = placed
        db.add(unit)
        db.commit()
        db.refresh(unit)
    except (SQLAlchemyError, OSError):
        db.rollback()
        storage.delete(BUCKET_BUSINESS_UNITS, placed)
        logger.exception("Failed to create business unit %s", data.businessunit_name)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to create business unit. Please try again."
        )

    log_activity(
        db,
        action="business_unit_created",
        description=f"Business unit {unit.businessunit_name} was created",
        target=AuditTarget.BUSINESS_UNIT,
        target_id=unit.businessunit_id,
        properties={
            "name": unit.businessunit_name,
            "code": unit.businessunit_code,
            "has_image": unit.businessunit_image_path is not None,
            "created_by": actor.name,
        },
    )
    return unit


def update_business_unit(
    db: Session,
    businessunit_id: str,
    data: BusinessUnitUpdate,
    image: Optional[UploadFile],
    storage: BlobStorage,
    actor: User,
) -> BusinessUnit:
    """
    Update a business unit's name, code and logo

    The activity log entry records only the keys whose value changed, each as
    an {"old", "new"} pair under "changes".
    """
    unit = get_business_unit(db, businessunit_id)
    _ensure_code_available(db, data.businessunit_code, exclude_id=unit.businessunit_id)
    if image is not None:
        validate_image(image, "image")

    changes: Dict[str, Dict[str, Any]] = {}
    if unit.businessunit_name != data.businessunit_name:
        changes["name"] = {"old": unit.businessunit_name, "new": data.businessunit_name}
    if unit.businessunit_code != data.businessunit_code:
        changes["code"] = {"old": unit.businessunit_code, "new": data.businessunit_code}

    unit.businessunit_name = data.businessunit_name
    unit.businessunit_code = data.businessunit_code

    placed = None
    try:
        if image is not None:
            previous = unit.businessunit_image_path
            storage.delete(BUCKET_BUSINESS_UNITS, previous)
            placed = storage.save(BUCKET_BUSINESS_UNITS, image)
            unit.businessunit_image_path = placed
            changes["image"] = {"old": previous, "new": placed}
        db.commit()
        db.refresh(unit)
    except (SQLAlchemyError, OSError):
        db.rollback()
        storage.delete(BUCKET_BUSINESS_UNITS, placed)
        logger.exception("Failed to update business unit %s", businessunit_id)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to update business unit. Please try again."
        )

    log_activity(
        db,
        action="business_unit_updated",
        description=f"Business unit {unit.businessunit_name} was updated",
        target=AuditTarget.BUSINESS_UNIT,
        target_id=unit.businessunit_id,
        properties={"changes": changes, "updated_by": actor.name},
    )
    return unit


def delete_business_unit(db: Session, businessunit_id: str, storage: BlobStorage, actor: User) -> None:
    """
    Delete a business unit together with its employees and templates

    Rows go through the database cascade; logo, employee images and template
    images are removed once the delete has been committed.
    """
    unit = get_business_unit(db, businessunit_id)
    data = snapshot(unit)
    files = _dependent_files(db, [unit.businessunit_id])
    if unit.businessunit_image_path:
        files.append((BUCKET_BUSINESS_UNITS, unit.businessunit_image_path))

    db.delete(unit)
    db.commit()
    storage.delete_many(files)

    log_activity(
        db,
        action="business_unit_deleted",
        description=f"Business unit {data['businessunit_name']} was deleted",
        target=AuditTarget.BUSINESS_UNIT,
        target_id=businessunit_id,
        properties={"business_unit": data, "deleted_by": actor.name, "user_role": actor.role},
    )


def bulk_delete_business_units(db: Session, ids: List[str], storage: BlobStorage, actor: User) -> int:
    """
    Delete several business units in one statement

    Raises:
        HTTPException: 422 listing any ids that do not exist (nothing is deleted)
    """
    unique_ids = list(dict.fromkeys(ids))
    units = db.query(BusinessUnit).filter(BusinessUnit.businessunit_id.in_(unique_ids)).all()
    found = {u.businessunit_id for u in units}
    missing = [i for i in unique_ids if i not in found]
    if missing:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail={"ids": f"The selected business units are invalid: {', '.join(missing)}"}
        )

    summaries = [snapshot(u) for u in units]
    files = _dependent_files(db, unique_ids)
    files.extend((BUCKET_BUSINESS_UNITS, u.businessunit_image_path) for u in units if u.businessunit_image_path)

    deleted = (
        db.query(BusinessUnit)
        .filter(BusinessUnit.businessunit_id.in_(unique_ids))
        .delete(synchronize_session=False)
    )
    db.commit()
    storage.delete_many(files)

    log_activity(
        db,
        action="business_units_bulk_deleted",
        description=f"{deleted} business units were deleted",
        target=AuditTarget.BUSINESS_UNIT,
        properties={
            "count": deleted,
            "business_units": summaries,
            "deleted_by": actor.name,
            "user_role": actor.role,
        },
    )
    return deleted


def business_unit_out(unit: BusinessUnit) -> BusinessUnitOut:
    out = BusinessUnitOut.model_validate(unit)
    return out.model_copy(update={"logo_url": BlobStorage.url(BUCKET_BUSINESS_UNITS, unit.businessunit_image_path)})
