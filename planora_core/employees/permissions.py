# planora_core/employees/permissions.py
from __future__ import annotations

from planora_core.common.permissions import ROLE_ADMIN, ROLE_EMPLOYEE, BaseRolePermission


class EmployeePermission(BaseRolePermission):
    allowed_roles_per_action = {
        "list": {ROLE_ADMIN, ROLE_EMPLOYEE},
        "retrieve": {ROLE_ADMIN, ROLE_EMPLOYEE},
        "create": {ROLE_ADMIN},
        "pending": {ROLE_ADMIN},
        "approve": {ROLE_ADMIN},
        "reject": {ROLE_ADMIN},
        "suspend": {ROLE_ADMIN},
    }
