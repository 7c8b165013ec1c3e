# planora_core/classes/permissions.py
from __future__ import annotations

from planora_core.common.permissions import ROLE_ADMIN, ROLE_CLIENT, ROLE_EMPLOYEE, BaseRolePermission


class ClassPermission(BaseRolePermission):
    allowed_roles_per_action = {
        "list": {ROLE_ADMIN, ROLE_EMPLOYEE, ROLE_CLIENT},
        "retrieve": {ROLE_ADMIN, ROLE_EMPLOYEE, ROLE_CLIENT},
        "create": {ROLE_ADMIN, ROLE_EMPLOYEE},
        "partial_update": {ROLE_ADMIN, ROLE_EMPLOYEE},
        "deactivate": {ROLE_ADMIN},
    }
