"""
Employee schemas
"""
from datetime import date, datetime
from typing import List, Optional
from pydantic import BaseModel, Field, ConfigDict, field_serializer, field_validator, model_validator

from app.models.employee import EmploymentStatus, IdStatus
from app.schemas.common import PageMeta, blank_to_none, serialize_datetime


class _EmployeeFields(BaseModel):
    """Fields shared by the create and update forms"""
    employee_firstname: str = Field(..., max_length=255, description="First name")
    employee_middlename: Optional[str] = Field(None, max_length=255, description="Middle name")
    employee_lastname: str = Field(..., max_length=255, description="Last name")
    employee_name_extension: Optional[str] = Field(None, max_length=50, description="Jr., Sr., III, ...")
    address: Optional[str] = Field(None, description="Home address")
    birthday: Optional[date] = Field(None, description="Date of birth")
    position: str = Field(..., max_length=255, description="Job title printed on the ID")
    tin_no: Optional[str] = Field(None, max_length=50, description="Tax identification number")
    sss_no: Optional[str] = Field(None, max_length=50, description="Social security number")
    hdmf_no: Optional[str] = Field(None, max_length=50, description="Housing fund number")
    phic_no: Optional[str] = Field(None, max_length=50, description="Health insurance number")
    emergency_name: Optional[str] = Field(None, max_length=255, description="Emergency contact name")
    emergency_contact_number: Optional[str] = Field(None, max_length=50, description="Emergency contact number")
    emergency_address: Optional[str] = Field(None, description="Emergency contact address")
    businessunit_id: str = Field(..., description="Owning business unit")
    id_status: Optional[IdStatus] = Field(None, description="pending or printed")
    reason: Optional[str] = Field(None, description="Reason for (re)issuing the ID")

    model_config = ConfigDict(str_strip_whitespace=True)

    @model_validator(mode="before")
    @classmethod
    def _blank_strings(cls, values):
        return blank_to_none(values)


class EmployeeCreate(_EmployeeFields):
    """Schema for creating an employee"""
    employment_status: EmploymentStatus = Field(..., description="active, inactive, resigned or terminated")

    @field_validator("employment_status", mode="before")
    @classmethod
    def _normalize_status(cls, v):
        return v.strip().lower() if isinstance(v, str) else v


class EmployeeUpdate(_EmployeeFields):
    """
    Schema for updating an employee

    Only keys present in the submitted form are applied (see model_fields_set);
    employment_status is accepted as free text here.
    """
    employment_status: str = Field(..., max_length=50, description="Employment status")


class EmployeeOut(BaseModel):
    """Schema for employee output. Datetimes in the display timezone."""
    uuid: str
    id_no: str
    date_hired: Optional[date] = None
    employee_firstname: str
    employee_middlename: Optional[str] = None
    employee_lastname: str
    employee_name_extension: Optional[str] = None
    full_name: str
    address: Optional[str] = None
    birthday: Optional[date] = None
    position: str
    tin_no: Optional[str] = None
    sss_no: Optional[str] = None
    hdmf_no: Optional[str] = None
    phic_no: Optional[str] = None
    emergency_name: Optional[str] = None
    emergency_contact_number: Optional[str] = None
    emergency_address: Optional[str] = None
    businessunit_id: str
    businessunit_name: Optional[str] = None
    id_status: str
    reason: Optional[str] = None
    employment_status: str
    employee_id_counter: int
    id_last_exported_at: Optional[datetime] = None
    image_person: Optional[str] = None
    image_signature: Optional[str] = None
    image_qrcode: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)

    @field_serializer("id_last_exported_at", "created_at", "updated_at", when_used="always")
    def _ser_datetime(self, dt):
        return serialize_datetime(dt)


class EmployeeCreated(BaseModel):
    message: str
    employee: str = Field(..., description="Assigned ID number")
    uuid: str


class EmployeeBulkDelete(BaseModel):
    uuids: List[str] = Field(..., min_length=1, description="Employee UUIDs; duplicates are ignored")


class BulkDeleteResult(BaseModel):
    message: str
    deleted: int


class BusinessUnitOption(BaseModel):
    businessunit_id: str
    businessunit_name: str

    model_config = ConfigDict(from_attributes=True)


class EmployeePage(BaseModel):
    employees: List[EmployeeOut]
    meta: PageMeta
    filters: dict
    business_units: List[BusinessUnitOption]
    current_user_role: str


class IdExportOut(BaseModel):
    """Result of marking an ID card as exported"""
    uuid: str
    id_no: str
    id_status: str
    employee_id_counter: int
    id_last_exported_at: datetime
    id_expires_at: datetime

    @field_serializer("id_last_exported_at", "id_expires_at", when_used="always")
    def _ser_datetime(self, dt):
        return serialize_datetime(dt)


class IdPreviewRequest(BaseModel):
    uuids: List[str] = Field(..., min_length=1, description="Employees to preview")
