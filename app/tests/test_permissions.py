"""
Tests for the role policy table
"""
import pytest

from app.core.permissions import POLICY, Permission, can, is_allowed
from app.models.user import Role, User


def test_every_permission_has_a_policy():
    assert set(POLICY) == set(Permission)


@pytest.mark.parametrize("permission", [
    Permission.EMPLOYEE_DELETE,
    Permission.BUSINESS_UNIT_DELETE,
    Permission.TEMPLATE_DELETE,
    Permission.USER_DELETE,
    Permission.USER_ASSIGN_ADMIN,
    Permission.ACTIVITY_LOG_CLEAR,
    Permission.SETTINGS_MANAGE,
])
def test_admin_only_permissions(permission):
    assert is_allowed(Role.ADMIN, permission)
    assert not is_allowed(Role.HR, permission)


@pytest.mark.parametrize("permission", [
    Permission.EMPLOYEE_CREATE,
    Permission.EMPLOYEE_UPDATE,
    Permission.BUSINESS_UNIT_UPDATE,
    Permission.TEMPLATE_UPDATE,
    Permission.USER_CREATE,
    Permission.ACTIVITY_LOG_VIEW,
])
def test_shared_permissions(permission):
    assert is_allowed("Admin", permission)
    assert is_allowed("HR", permission)


def test_unknown_role_denied():
    assert not is_allowed("Employee", Permission.EMPLOYEE_VIEW)
    assert not can(User(name="x", email="x@company.com", password="x", role="Guest"), Permission.EMPLOYEE_VIEW)
    assert not can(None, Permission.EMPLOYEE_VIEW)
