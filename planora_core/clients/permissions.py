# planora_core/clients/permissions.py
from __future__ import annotations

from planora_core.common.permissions import ROLE_ADMIN, ROLE_CLIENT, ROLE_EMPLOYEE, BaseRolePermission


class ClientPermission(BaseRolePermission):
    """
    Staff manage the client roster; a client-role login manages its own
    primary + member rows.
    """

    allowed_roles_per_action = {
        "list": {ROLE_ADMIN, ROLE_EMPLOYEE},
        "retrieve": {ROLE_ADMIN, ROLE_EMPLOYEE, ROLE_CLIENT},
        "create": {ROLE_ADMIN, ROLE_EMPLOYEE},
        "deactivate": {ROLE_ADMIN},
        "members": {ROLE_CLIENT},
        "member_detail": {ROLE_CLIENT},
    }
