# planora_core/catchup/permissions.py
from __future__ import annotations

from planora_core.common.permissions import ROLE_ADMIN, ROLE_CLIENT, ROLE_EMPLOYEE, BaseRolePermission


class CatchUpPermission(BaseRolePermission):
    allowed_roles_per_action = {
        "requests": {ROLE_ADMIN},
        "pending": {ROLE_ADMIN},
        "approve_client": {ROLE_ADMIN},
        "reject_client": {ROLE_ADMIN},
        "approve_cancellation": {ROLE_ADMIN},
        "reject_cancellation": {ROLE_ADMIN},
        "opportunities": {ROLE_ADMIN, ROLE_EMPLOYEE, ROLE_CLIENT},
        "book": {ROLE_ADMIN, ROLE_EMPLOYEE, ROLE_CLIENT},
    }
