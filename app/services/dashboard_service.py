"""
Dashboard service - headline counts and per business unit ID progress
"""
from typing import Any, Dict

from sqlalchemy import case, func
from sqlalchemy.orm import Session

from app.constants import BUCKET_BUSINESS_UNITS
from app.models.business_unit import BusinessUnit
from app.models.employee import Employee, IdStatus
from app.services.storage_service import BlobStorage


def completion_percentage(completed: int, total: int) -> int:
    """Whole percent, halves rounded up; 0 for an empty unit"""
    if total <= 0:
        return 0
    return (completed * 200 + total) // (total * 2)


def get_dashboard(db: Session) -> Dict[str, Any]:
    """
    Compute dashboard figures

    Returns:
        total_employees, pending_ids, total_ids_printed (sum of issuance
        counters) and one entry per business unit
    """
    total_employees = db.query(func.count(Employee.uuid)).scalar() or 0
    pending_ids = (
        db.query(func.count(Employee.uuid))
        .filter(Employee.id_status == IdStatus.PENDING.value)
        .scalar()
        or 0
    )
    total_ids_printed = db.query(func.coalesce(func.sum(Employee.employee_id_counter), 0)).scalar() or 0

    completed_expr = func.sum(case((Employee.id_status != IdStatus.PENDING.value, 1), else_=0))
    rows = (
        db.query(
            BusinessUnit,
            func.count(Employee.uuid).label("total"),
            func.coalesce(completed_expr, 0).label("completed"),
        )
        .outerjoin(Employee, Employee.businessunit_id == BusinessUnit.businessunit_id)
        .group_by(BusinessUnit.businessunit_id)
        .order_by(BusinessUnit.businessunit_name)
        .all()
    )

    business_units = [
        {
            "businessunit_id": unit.businessunit_id,
            "code": unit.businessunit_code,
            "name": unit.businessunit_name,
            "total_employees": total,
            "id_completion": completion_percentage(completed, total),
            "logo_url": BlobStorage.url(BUCKET_BUSINESS_UNITS, unit.businessunit_image_path),
        }
        for unit, total, completed in rows
    ]

    return {
        "total_employees": total_employees,
        "pending_ids": pending_ids,
        "total_ids_printed": int(total_ids_printed),
        "business_units": business_units,
    }
