# planora_core/iam/permissions.py
from __future__ import annotations

from planora_core.common.permissions import ROLE_ADMIN, ROLE_EMPLOYEE, ROLE_SUPER_ADMIN, BaseRolePermission


class BusinessUserPermission(BaseRolePermission):
    allowed_roles_per_action = {
        "list": {ROLE_ADMIN, ROLE_EMPLOYEE},
        "create": {ROLE_ADMIN},
        "destroy": {ROLE_ADMIN},
        "update_role": {ROLE_ADMIN},
        "pending": {ROLE_ADMIN},
        "approve": {ROLE_ADMIN},
        "reject": {ROLE_ADMIN},
        "client_status": {ROLE_ADMIN, ROLE_SUPER_ADMIN},
    }
