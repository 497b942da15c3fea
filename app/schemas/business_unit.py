"""
Business unit schemas
"""
from datetime import datetime
from typing import List, Optional
from pydantic import BaseModel, Field, ConfigDict, field_serializer, model_validator

from app.schemas.common import PageMeta, blank_to_none, serialize_datetime


class BusinessUnitCreate(BaseModel):
    """Schema for creating a business unit"""
    businessunit_id: Optional[str] = Field(None, max_length=36, description="Identifier; generated when omitted")
    businessunit_name: str = Field(..., min_length=1, max_length=255, description="Business unit name")
    businessunit_code: Optional[str] = Field(None, max_length=50, description="Short code (unique)")

    model_config = ConfigDict(str_strip_whitespace=True)

    @model_validator(mode="before")
    @classmethod
    def _blank_strings(cls, values):
        return blank_to_none(values)


class BusinessUnitUpdate(BaseModel):
    """Schema for updating a business unit"""
    businessunit_name: str = Field(..., min_length=1, max_length=255, description="Business unit name")
    businessunit_code: Optional[str] = Field(None, max_length=50, description="Short code (unique)")

    model_config = ConfigDict(str_strip_whitespace=True)

    @model_validator(mode="before")
    @classmethod
    def _blank_strings(cls, values):
        return blank_to_none(values)


class BusinessUnitOut(BaseModel):
    """Schema for business unit output"""
    businessunit_id: str
    businessunit_name: str
    businessunit_code: Optional[str] = None
    businessunit_image_path: Optional[str] = None
    logo_url: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)

    @field_serializer("created_at", "updated_at", when_used="always")
    def _ser_datetime(self, dt):
        return serialize_datetime(dt)


class BusinessUnitBulkDelete(BaseModel):
    ids: List[str] = Field(..., min_length=1, description="Business unit identifiers")


class BusinessUnitPage(BaseModel):
    business_units: List[BusinessUnitOut]
    meta: PageMeta
    filters: dict
    current_user_role: str
