"""
ID card template schemas
"""
from datetime import datetime
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from typing import List, Optional
from pydantic import BaseModel, Field, ConfigDict, field_serializer, field_validator

from app.schemas.common import serialize_datetime
from app.schemas.employee import BusinessUnitOption


class TemplatePositions(BaseModel):
    """
    Overlay coordinates, in pixels of the template image

    Every field is optional here; the service decides whether a request must
    carry the full set (PUT) or may send any subset (PATCH).
    """
    emp_img_x: Optional[int] = None
    emp_img_y: Optional[int] = None
    emp_img_width: Optional[int] = Field(None, ge=1)
    emp_img_height: Optional[int] = Field(None, ge=1)
    emp_name_x: Optional[int] = None
    emp_name_y: Optional[int] = None
    emp_pos_x: Optional[int] = None
    emp_pos_y: Optional[int] = None
    emp_idno_x: Optional[int] = None
    emp_idno_y: Optional[int] = None
    emp_sig_x: Optional[int] = None
    emp_sig_y: Optional[int] = None
    emp_add_x: Optional[int] = None
    emp_add_y: Optional[int] = None
    emp_bday_x: Optional[int] = None
    emp_bday_y: Optional[int] = None
    emp_sss_x: Optional[int] = None
    emp_sss_y: Optional[int] = None
    emp_phic_x: Optional[int] = None
    emp_phic_y: Optional[int] = None
    emp_hdmf_x: Optional[int] = None
    emp_hdmf_y: Optional[int] = None
    emp_tin_x: Optional[int] = None
    emp_tin_y: Optional[int] = None
    emp_emergency_name_x: Optional[int] = None
    emp_emergency_name_y: Optional[int] = None
    emp_emergency_num_x: Optional[int] = None
    emp_emergency_num_y: Optional[int] = None
    emp_emergency_add_x: Optional[int] = None
    emp_emergency_add_y: Optional[int] = None
    emp_qrcode_x: Optional[int] = None
    emp_qrcode_y: Optional[int] = None
    emp_qrcode_width: Optional[int] = None
    emp_qrcode_height: Optional[int] = None
    emp_back_idno_x: Optional[int] = None
    emp_back_idno_y: Optional[int] = None


class TemplatePositionsUpdate(TemplatePositions):
    """Request body for the positions endpoint"""
    hidden_elements: Optional[List[str]] = Field(None, description="Overlay regions hidden on the card")

    model_config = ConfigDict(extra="forbid")

    @field_validator(*TemplatePositions.model_fields, mode="before")
    @classmethod
    def _round_numeric(cls, v):
        # Fractional pixels round half away from zero
        if isinstance(v, (float, str)):
            try:
                return int(Decimal(str(v).strip()).quantize(Decimal(1), rounding=ROUND_HALF_UP))
            except (InvalidOperation, ValueError):
                return v
        return v

    @field_validator("emp_qrcode_width", "emp_qrcode_height")
    @classmethod
    def _qr_min_size(cls, v):
        if v is not None and v < 50:
            raise ValueError("QR code size must be at least 50")
        return v


class TemplateCreate(BaseModel):
    businessunit_id: str = Field(..., min_length=1, description="Owning business unit")


class TemplateUpdate(BaseModel):
    businessunit_id: str = Field(..., min_length=1, description="Owning business unit")


class TemplateOut(TemplatePositions):
    """Schema for template output (coordinates plus image references)"""
    id: int
    businessunit_id: str
    businessunit_name: Optional[str] = None
    image_path: str
    image_path2: str
    front_image_url: Optional[str] = None
    back_image_url: Optional[str] = None
    hidden_elements: Optional[List[str]] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)

    @field_serializer("created_at", "updated_at", when_used="always")
    def _ser_datetime(self, dt):
        return serialize_datetime(dt)


class TemplateList(BaseModel):
    templates: List[TemplateOut]
    business_units: List[BusinessUnitOption]
    filters: dict


class TemplateLayout(BaseModel):
    template: TemplateOut
    front_image_url: Optional[str] = None
    back_image_url: Optional[str] = None


class IdPreview(BaseModel):
    """Data needed by the client to render one ID card"""
    employee: dict
    layout: dict
    hidden_elements: List[str] = []
    template_id: Optional[int] = None
    front_image_url: Optional[str] = None
    back_image_url: Optional[str] = None
    photo_url: Optional[str] = None
    signature_url: Optional[str] = None
    qrcode_url: Optional[str] = None


class IdPreviewGroup(BaseModel):
    businessunit_id: str
    businessunit_name: Optional[str] = None
    previews: List[IdPreview]
