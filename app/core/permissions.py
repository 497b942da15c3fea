"""
Role-based access policy

Every guarded operation names a Permission; POLICY lists the roles that hold it.
Endpoints depend on require_permission(...) instead of comparing role strings.
"""
import enum
from typing import Dict, FrozenSet, Union

from app.models.user import Role, User


class Permission(str, enum.Enum):
    EMPLOYEE_VIEW = "employee.view"
    EMPLOYEE_CREATE = "employee.create"
    EMPLOYEE_UPDATE = "employee.update"
    EMPLOYEE_DELETE = "employee.delete"
    EMPLOYEE_EXPORT = "employee.export"

    BUSINESS_UNIT_VIEW = "business_unit.view"
    BUSINESS_UNIT_CREATE = "business_unit.create"
    BUSINESS_UNIT_UPDATE = "business_unit.update"
    BUSINESS_UNIT_DELETE = "business_unit.delete"

    TEMPLATE_VIEW = "template.view"
    TEMPLATE_CREATE = "template.create"
    TEMPLATE_UPDATE = "template.update"
    TEMPLATE_DELETE = "template.delete"

    USER_VIEW = "user.view"
    USER_CREATE = "user.create"
    USER_UPDATE = "user.update"
    USER_DELETE = "user.delete"
    USER_ASSIGN_ADMIN = "user.assign_admin"

    ACTIVITY_LOG_VIEW = "activity_log.view"
    ACTIVITY_LOG_CLEAR = "activity_log.clear"

    SETTINGS_MANAGE = "settings.manage"
    DASHBOARD_VIEW = "dashboard.view"


_ALL = frozenset({Role.ADMIN, Role.HR})
_ADMIN = frozenset({Role.ADMIN})

POLICY: Dict[Permission, FrozenSet[Role]] = {
    Permission.EMPLOYEE_VIEW: _ALL,
    Permission.EMPLOYEE_CREATE: _ALL,
    Permission.EMPLOYEE_UPDATE: _ALL,
    Permission.EMPLOYEE_DELETE: _ADMIN,
    Permission.EMPLOYEE_EXPORT: _ALL,

    Permission.BUSINESS_UNIT_VIEW: _ALL,
    Permission.BUSINESS_UNIT_CREATE: _ALL,
    Permission.BUSINESS_UNIT_UPDATE: _ALL,
    Permission.BUSINESS_UNIT_DELETE: _ADMIN,

    Permission.TEMPLATE_VIEW: _ALL,
    Permission.TEMPLATE_CREATE: _ALL,
    Permission.TEMPLATE_UPDATE: _ALL,
    Permission.TEMPLATE_DELETE: _ADMIN,

    Permission.USER_VIEW: _ALL,
    Permission.USER_CREATE: _ALL,
    Permission.USER_UPDATE: _ALL,
    Permission.USER_DELETE: _ADMIN,
    Permission.USER_ASSIGN_ADMIN: _ADMIN,

    Permission.ACTIVITY_LOG_VIEW: _ALL,
    Permission.ACTIVITY_LOG_CLEAR: _ADMIN,

    Permission.SETTINGS_MANAGE: _ADMIN,
    Permission.DASHBOARD_VIEW: _ALL,
}


def _as_role(role: Union[Role, str]):
    try:
        return Role(role)
    except ValueError:
        return None


def is_allowed(role: Union[Role, str], permission: Permission) -> bool:
    """True when role holds permission; unknown roles and permissions are denied."""
    resolved = _as_role(role)
    if resolved is None:
        return False
    return resolved in POLICY.get(permission, frozenset())


def can(user: User, permission: Permission) -> bool:
    return user is not None and is_allowed(user.role, permission)
