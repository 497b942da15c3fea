"""
Dashboard schemas
"""
from typing import List, Optional
from pydantic import BaseModel


class BusinessUnitStat(BaseModel):
    businessunit_id: str
    code: Optional[str] = None
    name: str
    total_employees: int
    id_completion: int
    logo_url: Optional[str] = None


class DashboardOut(BaseModel):
    total_employees: int
    pending_ids: int
    total_ids_printed: int
    business_units: List[BusinessUnitStat]
