# planora_core/scheduling/permissions.py
from __future__ import annotations

from planora_core.common.permissions import ROLE_ADMIN, ROLE_CLIENT, ROLE_EMPLOYEE, BaseRolePermission

_STAFF = {ROLE_ADMIN, ROLE_EMPLOYEE}
_EVERYONE = {ROLE_ADMIN, ROLE_EMPLOYEE, ROLE_CLIENT}


class SessionPermission(BaseRolePermission):
    """
    Route-level roles only; enroll/cancel additionally require the caller to own
    the client or be staff of the session's business (checked in the service).
    Client callers of list/retrieve/catch_up only see their own sessions and
    their own approved catch-up opportunities (scoped in the view).
    """

    allowed_roles_per_action = {
        "list": _EVERYONE,
        "retrieve": _EVERYONE,
        "create": _STAFF,
        "partial_update": _STAFF,
        "destroy": _STAFF,
        "enroll": _EVERYONE,
        "cancel": _EVERYONE,
        "set_status": _STAFF,
        "enrollment_status": _STAFF,
        "catch_up": _EVERYONE,
        "mine": {ROLE_EMPLOYEE, ROLE_ADMIN},
    }
