"""
User management schemas
"""
from datetime import datetime
from typing import List, Optional
from pydantic import BaseModel, EmailStr, Field, ConfigDict, field_serializer, model_validator

from app.models.user import Role
from app.schemas.common import PageMeta, serialize_datetime


class UserCreate(BaseModel):
    """Schema for creating a user"""
    name: str = Field(..., min_length=1, max_length=255, description="Display name")
    email: EmailStr = Field(..., description="Login e-mail (unique)")
    password: str = Field(..., min_length=8, max_length=72, description="Password")
    password_confirmation: str = Field(..., description="Must match password")
    role: Role = Field(default=Role.HR, description="Admin or HR")

    model_config = ConfigDict(str_strip_whitespace=True)

    @model_validator(mode="after")
    def _passwords_match(self):
        if self.password != self.password_confirmation:
            raise ValueError("The password confirmation does not match.")
        return self


class UserUpdate(BaseModel):
    """Schema for updating a user; password is optional"""
    name: str = Field(..., min_length=1, max_length=255, description="Display name")
    email: EmailStr = Field(..., description="Login e-mail (unique)")
    role: Role = Field(..., description="Admin or HR")
    password: Optional[str] = Field(None, min_length=8, max_length=72, description="New password")
    password_confirmation: Optional[str] = Field(None, description="Must match password")

    model_config = ConfigDict(str_strip_whitespace=True)

    @model_validator(mode="before")
    @classmethod
    def _blank_password(cls, values):
        if isinstance(values, dict) and not (values.get("password") or "").strip():
            values = {**values, "password": None, "password_confirmation": None}
        return values

    @model_validator(mode="after")
    def _passwords_match(self):
        if self.password is not None and self.password != self.password_confirmation:
            raise ValueError("The password confirmation does not match.")
        return self


class UserOut(BaseModel):
    """Schema for user output (never includes the password hash)"""
    id: int
    name: str
    email: str
    role: str
    email_verified_at: Optional[datetime] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)

    @field_serializer("email_verified_at", "created_at", "updated_at", when_used="always")
    def _ser_datetime(self, dt):
        return serialize_datetime(dt)


class UserPage(BaseModel):
    users: List[UserOut]
    meta: PageMeta
    filters: dict
    current_user_role: str
