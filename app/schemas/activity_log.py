"""
Activity log schemas
"""
from datetime import datetime
from typing import Any, List, Optional
from pydantic import BaseModel, ConfigDict, field_serializer

from app.schemas.common import PageMeta, serialize_datetime


class ActivityUser(BaseModel):
    id: int
    name: str

    model_config = ConfigDict(from_attributes=True)


class ActivityLogOut(BaseModel):
    id: int
    user_id: Optional[int] = None
    user: Optional[ActivityUser] = None
    action: str
    description: Optional[str] = None
    model_type: Optional[str] = None
    model_id: Optional[str] = None
    ip_address: Optional[str] = None
    user_agent: Optional[str] = None
    properties: Optional[Any] = None
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)

    @field_serializer("created_at", when_used="always")
    def _ser_datetime(self, dt):
        return serialize_datetime(dt)


class ActivityLogPage(BaseModel):
    activities: List[ActivityLogOut]
    meta: PageMeta
    filters: dict
    users: List[ActivityUser]
    action_types: List[str]


class ClearResult(BaseModel):
    message: str
    deleted: int
