"""
Template service - ID card templates and their overlay layouts
"""
import logging
from typing import Any, Dict, List, Optional

from fastapi import HTTPException, status
from fastapi.exceptions import RequestValidationError
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, selectinload
from starlette.datastructures import UploadFile

from app.constants import BUCKET_EMPLOYEE_PHOTO, BUCKET_ID_TEMPLATES, BUCKET_QRCODE, BUCKET_SIGNATURE
from app.models.activity_log import AuditTarget
from app.models.business_unit import BusinessUnit
from app.models.employee import Employee
from app.models.template_image import LAYOUT_FIELDS, TemplateImage
from app.models.user import User
from app.schemas.employee import EmployeeOut
from app.schemas.template_image import TemplateOut, TemplatePositionsUpdate
from app.services.audit_service import log_activity
from app.services.storage_service import BlobStorage, validate_image

logger = logging.getLogger(__name__)

# Used for coordinates a template has not positioned yet
DEFAULT_LAYOUT: Dict[str, int] = {
    "emp_img_x": 177,
    "emp_img_y": 338,
    "emp_img_width": 300,
    "emp_img_height": 300,
    "emp_name_x": 325,
    "emp_name_y": 675,
    "emp_pos_x": 325,
    "emp_pos_y": 700,
    "emp_idno_x": 325,
    "emp_idno_y": 725,
    "emp_sig_x": 325,
    "emp_sig_y": 760,
    "emp_add_x": 325,
    "emp_add_y": 225,
    "emp_bday_x": 325,
    "emp_bday_y": 261,
    "emp_sss_x": 325,
    "emp_sss_y": 286,
    "emp_phic_x": 325,
    "emp_phic_y": 311,
    "emp_hdmf_x": 325,
    "emp_hdmf_y": 336,
    "emp_tin_x": 325,
    "emp_tin_y": 361,
    "emp_emergency_name_x": 325,
    "emp_emergency_name_y": 626,
    "emp_emergency_num_x": 325,
    "emp_emergency_num_y": 681,
    "emp_emergency_add_x": 325,
    "emp_emergency_add_y": 739,
    "emp_qrcode_x": 325,
    "emp_qrcode_y": 500,
    "emp_qrcode_width": 150,
    "emp_qrcode_height": 150,
    "emp_back_idno_x": 325,
    "emp_back_idno_y": 400,
}

_IMAGE_FIELDS = {"image_front": "image_path", "image_back": "image_path2"}
_CHANGE_KEYS = {"image_path": "front_image", "image_path2": "back_image"}


def template_out(template: TemplateImage) -> TemplateOut:
    out = TemplateOut.model_validate(template)
    return out.model_copy(update={
        "front_image_url": BlobStorage.url(BUCKET_ID_TEMPLATES, template.image_path),
        "back_image_url": BlobStorage.url(BUCKET_ID_TEMPLATES, template.image_path2),
    })


def get_template(db: Session, template_id: int) -> TemplateImage:
    """Get a template by ID or raise 404"""
    template = db.query(TemplateImage).filter(TemplateImage.id == template_id).first()
    if not template:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Template with id {template_id} not found"
        )
    return template


def _ensure_business_unit(db: Session, businessunit_id: str) -> BusinessUnit:
    unit = db.query(BusinessUnit).filter(BusinessUnit.businessunit_id == businessunit_id).first()
    if not unit:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail={"businessunit_id": "The selected business unit is invalid."}
        )
    return unit


def list_templates(db: Session, businessunit_id: Optional[str] = None) -> Dict[str, Any]:
    """List templates, optionally for one business unit ("all" means no filter)"""
    query = db.query(TemplateImage).options(selectinload(TemplateImage.business_unit))
    if businessunit_id and businessunit_id != "all":
        query = query.filter(TemplateImage.businessunit_id == businessunit_id)
    templates = query.order_by(TemplateImage.id.desc()).all()
    business_units = db.query(BusinessUnit).order_by(BusinessUnit.businessunit_name).all()
    return {
        "templates": [template_out(t) for t in templates],
        "business_units": business_units,
        "filters": {"business_unit": businessunit_id or "all"},
    }


def create_template(
    db: Session,
    businessunit_id: str,
    files: Dict[str, UploadFile],
    storage: BlobStorage,
    actor: User,
) -> TemplateImage:
    """
    Create a template from front and back images

    Coordinates start out null; the layout editor fills them in later.

    Raises:
        HTTPException: 422 for an unknown business unit or invalid image
    """
    _ensure_business_unit(db, businessunit_id)
    for field, upload in files.items():
        validate_image(upload, field)

    template = TemplateImage(businessunit_id=businessunit_id)
    placed: List[tuple] = []
    try:
        for field, column in _IMAGE_FIELDS.items():
            name = storage.save(BUCKET_ID_TEMPLATES, files[field])
            placed.append((BUCKET_ID_TEMPLATES, name))
            setattr(template, column, name)
        db.add(template)
        db.commit()
        db.refresh(template)
    except (SQLAlchemyError, OSError):
        db.rollback()
        storage.delete_many(placed)
        logger.exception("Failed to create template for business unit %s", businessunit_id)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to upload template. Please try again."
        )

    log_activity(
        db,
        action="template_created",
        description=f"ID template was created for {template.businessunit_name}",
        target=AuditTarget.TEMPLATE_IMAGE,
        target_id=template.id,
        properties={
            "businessunit_id": businessunit_id,
            "front_image": template.image_path,
            "back_image": template.image_path2,
            "created_by": actor.name,
        },
    )
    return template


def update_template(
    db: Session,
    template_id: int,
    businessunit_id: str,
    files: Dict[str, UploadFile],
    storage: BlobStorage,
    actor: User,
) -> TemplateImage:
    """
    Reassign a template and/or replace either image

    An image that is not uploaded keeps its current file.
    """
    template = get_template(db, template_id)
    _ensure_business_unit(db, businessunit_id)
    for field, upload in files.items():
        validate_image(upload, field)

    changes: Dict[str, Dict[str, Any]] = {}
    if template.businessunit_id != businessunit_id:
        changes["businessunit_id"] = {"old": template.businessunit_id, "new": businessunit_id}
        template.businessunit_id = businessunit_id

    placed: List[tuple] = []
    try:
        for field, column in _IMAGE_FIELDS.items():
            if field not in files:
                continue
            previous = getattr(template, column)
            storage.delete(BUCKET_ID_TEMPLATES, previous)
            name = storage.save(BUCKET_ID_TEMPLATES, files[field])
            placed.append((BUCKET_ID_TEMPLATES, name))
            setattr(template, column, name)
            changes[_CHANGE_KEYS[column]] = {"old": previous, "new": name}
        db.commit()
        db.refresh(template)
    except (SQLAlchemyError, OSError):
        db.rollback()
        storage.delete_many(placed)
        logger.exception("Failed to update template %s", template_id)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to update template. Please try again."
        )

    log_activity(
        db,
        action="template_updated",
        description=f"ID template #{template.id} was updated",
        target=AuditTarget.TEMPLATE_IMAGE,
        target_id=template.id,
        properties={"changes": changes, "updated_by": actor.name},
    )
    return template


def update_positions(
    db: Session,
    template_id: int,
    data: TemplatePositionsUpdate,
    actor: User,
    require_all: bool = False,
) -> TemplateImage:
    """
    Store overlay coordinates

    Args:
        db: Database session
        template_id: Template to update
        data: Submitted coordinates
        actor: User saving the layout
        require_all: Every coordinate field must be present (full layout save)

    Raises:
        RequestValidationError: When require_all is set and fields are missing
    """
    template = get_template(db, template_id)
    submitted = data.model_dump(include=data.model_fields_set)

    if require_all:
        missing = [f for f in LAYOUT_FIELDS if submitted.get(f) is None]
        if missing:
            raise RequestValidationError(
                [
                    {"type": "missing", "loc": ("body", f), "msg": f"The {f} field is required.", "input": None}
                    for f in missing
                ]
            )
        # A full save replaces the hidden list too
        if submitted.get("hidden_elements") is None:
            submitted["hidden_elements"] = []

    old_positions = {key: getattr(template, key) for key in submitted}
    for key, value in submitted.items():
        setattr(template, key, value)
    db.commit()
    db.refresh(template)

    log_activity(
        db,
        action="template_positions_updated",
        description=f"Layout of ID template #{template.id} was updated",
        target=AuditTarget.TEMPLATE_IMAGE,
        target_id=template.id,
        properties={
            "old_positions": old_positions,
            "new_positions": submitted,
            "updated_by": actor.name,
        },
    )
    return template


def delete_template(db: Session, template_id: int, storage: BlobStorage, actor: User) -> None:
    """Delete a template and both of its images"""
    template = get_template(db, template_id)
    data = {
        "id": template.id,
        "businessunit_id": template.businessunit_id,
        "front_image": template.image_path,
        "back_image": template.image_path2,
    }
    files = template.stored_files()

    db.delete(template)
    db.commit()
    storage.delete_many(files)

    log_activity(
        db,
        action="template_deleted",
        description=f"ID template #{template_id} was deleted",
        target=AuditTarget.TEMPLATE_IMAGE,
        target_id=template_id,
        properties={"template_data": data, "deleted_by": actor.name, "user_role": actor.role},
    )


def effective_layout(template: Optional[TemplateImage]) -> Dict[str, int]:
    """Template coordinates with unpositioned fields taken from DEFAULT_LAYOUT"""
    layout = dict(DEFAULT_LAYOUT)
    if template is not None:
        layout.update({k: v for k, v in template.layout().items() if v is not None})
    return layout


def _first_template(db: Session, businessunit_id: str) -> Optional[TemplateImage]:
    return (
        db.query(TemplateImage)
        .filter(TemplateImage.businessunit_id == businessunit_id)
        .order_by(TemplateImage.id)
        .first()
    )


def build_id_preview(employee: Employee, template: Optional[TemplateImage]) -> Dict[str, Any]:
    """Everything the client needs to draw one employee's ID card"""
    return {
        "employee": EmployeeOut.model_validate(employee).model_dump(mode="json"),
        "layout": effective_layout(template),
        "hidden_elements": (template.hidden_elements or []) if template else [],
        "template_id": template.id if template else None,
        "front_image_url": BlobStorage.url(BUCKET_ID_TEMPLATES, template.image_path) if template else None,
        "back_image_url": BlobStorage.url(BUCKET_ID_TEMPLATES, template.image_path2) if template else None,
        "photo_url": BlobStorage.url(BUCKET_EMPLOYEE_PHOTO, employee.image_person),
        "signature_url": BlobStorage.url(BUCKET_SIGNATURE, employee.image_signature),
        "qrcode_url": BlobStorage.url(BUCKET_QRCODE, employee.image_qrcode),
    }


def id_preview(db: Session, employee: Employee) -> Dict[str, Any]:
    return build_id_preview(employee, _first_template(db, employee.businessunit_id))


def bulk_id_preview(db: Session, uuids: List[str]) -> List[Dict[str, Any]]:
    """Previews for several employees, grouped by business unit"""
    employees = (
        db.query(Employee)
        .filter(Employee.uuid.in_(list(dict.fromkeys(uuids))))
        .order_by(Employee.businessunit_id, Employee.id_no)
        .all()
    )
    groups: Dict[str, Dict[str, Any]] = {}
    templates: Dict[str, Optional[TemplateImage]] = {}
    for employee in employees:
        bu_id = employee.businessunit_id
        if bu_id not in groups:
            templates[bu_id] = _first_template(db, bu_id)
            groups[bu_id] = {
                "businessunit_id": bu_id,
                "businessunit_name": employee.businessunit_name,
                "previews": [],
            }
        groups[bu_id]["previews"].append(build_id_preview(employee, templates[bu_id]))
    return list(groups.values())
