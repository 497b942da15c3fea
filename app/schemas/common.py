"""
Shared schema pieces
"""
from datetime import datetime
from typing import Optional
from pydantic import BaseModel

from app.utils.datetime_utils import iso_local


class PageMeta(BaseModel):
    """Pagination metadata returned with every listing"""
    current_page: int
    last_page: int
    total: int
    per_page: int


def serialize_datetime(dt: Optional[datetime]) -> Optional[str]:
    return iso_local(dt) if dt is not None else None


def blank_to_none(values):
    """Turn empty form strings into None so optional fields clear instead of storing ''"""
    if isinstance(values, dict):
        return {
            k: (None if isinstance(v, str) and not v.strip() else v)
            for k, v in values.items()
        }
    return values
