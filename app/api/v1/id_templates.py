"""
ID card template endpoints (Admin/HR; deletion is Admin-only)
"""
from typing import Optional

from fastapi import APIRouter, Depends, Query, Request
from sqlalchemy.orm import Session

from app.api.forms import parse_form, read_multipart, require_files
from app.core.deps import get_blob_storage, get_db, require_permission
from app.core.permissions import Permission
from app.models.user import User
from app.schemas.template_image import (
    TemplateCreate,
    TemplateLayout,
    TemplateList,
    TemplateOut,
    TemplatePositionsUpdate,
    TemplateUpdate,
)
from app.services.storage_service import BlobStorage
from app.services.template_service import (
    create_template,
    delete_template,
    get_template,
    list_templates,
    template_out,
    update_positions,
    update_template,
)

router = APIRouter()

IMAGE_FIELDS = ("image_front", "image_back")


@router.get("", response_model=TemplateList)
async def list_templates_endpoint(
    business_unit: Optional[str] = Query(None, description="Business unit id, or 'all'"),
    db: Session = Depends(get_db),
    current_user: User = Depends(require_permission(Permission.TEMPLATE_VIEW))
):
    """List ID templates"""
    return list_templates(db, business_unit)


@router.post("", response_model=TemplateOut, status_code=201)
async def create_template_endpoint(
    request: Request,
    db: Session = Depends(get_db),
    storage: BlobStorage = Depends(get_blob_storage),
    current_user: User = Depends(require_permission(Permission.TEMPLATE_CREATE))
):
    """Upload a template (multipart: businessunit_id, image_front, image_back)"""
    fields, files = await read_multipart(request, IMAGE_FIELDS)
    data = parse_form(TemplateCreate, fields)
    require_files(files, IMAGE_FIELDS)
    template = create_template(db, data.businessunit_id, files, storage, current_user)
    return template_out(template)


@router.get("/{template_id}", response_model=TemplateOut)
async def get_template_endpoint(
    template_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_permission(Permission.TEMPLATE_VIEW))
):
    """Get a template by ID"""
    return template_out(get_template(db, template_id))


@router.api_route("/{template_id}", methods=["PUT", "POST"], response_model=TemplateOut)
async def update_template_endpoint(
    template_id: int,
    request: Request,
    db: Session = Depends(get_db),
    storage: BlobStorage = Depends(get_blob_storage),
    current_user: User = Depends(require_permission(Permission.TEMPLATE_UPDATE))
):
    """Reassign a template or replace its front/back image"""
    fields, files = await read_multipart(request, IMAGE_FIELDS)
    data = parse_form(TemplateUpdate, fields)
    template = update_template(db, template_id, data.businessunit_id, files, storage, current_user)
    return template_out(template)


@router.delete("/{template_id}")
async def delete_template_endpoint(
    template_id: int,
    db: Session = Depends(get_db),
    storage: BlobStorage = Depends(get_blob_storage),
    current_user: User = Depends(require_permission(Permission.TEMPLATE_DELETE))
):
    """Delete a template and its images (Admin-only)"""
    delete_template(db, template_id, storage, current_user)
    return {"message": "Template deleted successfully."}


@router.get("/{template_id}/layout", response_model=TemplateLayout)
async def template_layout_endpoint(
    template_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_permission(Permission.TEMPLATE_VIEW))
):
    """Template and image URLs for the layout editor"""
    out = template_out(get_template(db, template_id))
    return {"template": out, "front_image_url": out.front_image_url, "back_image_url": out.back_image_url}


@router.put("/{template_id}/positions", response_model=TemplateOut)
async def replace_positions_endpoint(
    template_id: int,
    positions: TemplatePositionsUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_permission(Permission.TEMPLATE_UPDATE))
):
    """Save the full layout; every coordinate is required"""
    template = update_positions(db, template_id, positions, current_user, require_all=True)
    return template_out(template)


@router.patch("/{template_id}/positions", response_model=TemplateOut)
async def patch_positions_endpoint(
    template_id: int,
    positions: TemplatePositionsUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_permission(Permission.TEMPLATE_UPDATE))
):
    """Update any subset of coordinates (e.g. only the QR code box)"""
    template = update_positions(db, template_id, positions, current_user)
    return template_out(template)
