"""
Database models
"""
from app.models.user import User, Role
from app.models.business_unit import BusinessUnit
from app.models.employee import Employee, EmploymentStatus, IdStatus, IdSequence
from app.models.template_image import TemplateImage, LAYOUT_FIELDS, LAYOUT_REGIONS
from app.models.activity_log import ActivityLog, AuditTarget
from app.models.network_path import NetworkPath

__all__ = [
    "User",
    "Role",
    "BusinessUnit",
    "Employee",
    "EmploymentStatus",
    "IdStatus",
    "IdSequence",
    "TemplateImage",
    "LAYOUT_FIELDS",
    "LAYOUT_REGIONS",
    "ActivityLog",
    "AuditTarget",
    "NetworkPath",
]
