# planora_core/businesses/permissions.py
from __future__ import annotations

from planora_core.common.permissions import ROLE_ADMIN, ROLE_SUPER_ADMIN, BaseRolePermission


class BusinessPermission(BaseRolePermission):
    """
    Platform administration of tenants is super-admin only.
    A business admin may read its own business (checked in the view).
    """

    allowed_roles_per_action = {
        "list": {ROLE_SUPER_ADMIN},
        "retrieve": {ROLE_SUPER_ADMIN, ROLE_ADMIN},
        "create": {ROLE_SUPER_ADMIN},
        "set_status": {ROLE_SUPER_ADMIN},
        "deactivate": {ROLE_SUPER_ADMIN},
        "permanent": {ROLE_SUPER_ADMIN},
    }
