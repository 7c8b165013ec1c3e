# planora_core/common/permissions.py

from __future__ import annotations

from rest_framework.permissions import BasePermission, SAFE_METHODS

# Platform-level roles carried on the user profile (and the token "role" claim)
ROLE_SUPER_ADMIN = "super-admin"
ROLE_ADMIN = "admin"
ROLE_EMPLOYEE = "employee"
ROLE_CLIENT = "client"

STAFF_ROLES = {ROLE_ADMIN, ROLE_EMPLOYEE}
ALL_BUSINESS_ROLES = {ROLE_ADMIN, ROLE_EMPLOYEE, ROLE_CLIENT}


class BaseRolePermission(BasePermission):
    """
    Role-based access control over the resolved IdentityContext.

    Key behavior:
    - Requires authentication.
    - Uses allowed_roles_per_action for strict RBAC; there is no implicit bypass,
      super-admin only passes where a route lists it.
    - A client-role caller without a resolvable business context is denied.
    - If the action is unknown and the request is SAFE, fall back to list/retrieve.
    """
    message = "You do not have permission to perform this action."

    # Override in subclasses: dict of action -> set of allowed roles
    allowed_roles_per_action = {
        "list": {ROLE_ADMIN, ROLE_EMPLOYEE},
        "retrieve": {ROLE_ADMIN, ROLE_EMPLOYEE},
        "create": {ROLE_ADMIN},
        "update": {ROLE_ADMIN},
        "partial_update": {ROLE_ADMIN},
        "destroy": {ROLE_ADMIN},
    }

    def _infer_action(self, request, view) -> str | None:
        action = getattr(view, "action", None)
        if action:
            return action

        kwargs = getattr(view, "kwargs", {}) or {}
        is_detail = "pk" in kwargs or "id" in kwargs

        method = request.method.upper()
        if method in ("GET", "HEAD", "OPTIONS"):
            return "retrieve" if is_detail else "list"
        if method == "POST":
            return "create"
        if method == "PUT":
            return "update"
        if method == "PATCH":
            return "partial_update"
        if method == "DELETE":
            return "destroy"
        return None

    def has_permission(self, request, view) -> bool:
        from planora_core.iam.context import get_identity

        user = request.user
        if not user or not getattr(user, "is_authenticated", False):
            return False

        identity = get_identity(request)
        if identity is None:
            return False

        action = self._infer_action(request, view)
        allowed = self.allowed_roles_per_action.get(action)

        if allowed is None and request.method in SAFE_METHODS:
            kwargs = getattr(view, "kwargs", {}) or {}
            is_detail = "pk" in kwargs or "id" in kwargs
            read_action = "retrieve" if is_detail else "list"
            allowed = self.allowed_roles_per_action.get(read_action)

        # Unknown action => deny by default
        if allowed is None or identity.role not in allowed:
            self.message = f"Access denied: insufficient role. Your role: {identity.role}"
            return False

        if identity.role == ROLE_CLIENT and identity.business_id is None:
            self.message = "Access denied: No business context. Please ensure you're associated with a business."
            return False

        return True

    def has_object_permission(self, request, view, obj) -> bool:
        return self.has_permission(request, view)


class AnyBusinessMemberPermission(BaseRolePermission):
    """Read-only endpoints open to every business role (+ super-admin)."""
    allowed_roles_per_action = {
        "list": {ROLE_SUPER_ADMIN, *ALL_BUSINESS_ROLES},
        "retrieve": {ROLE_SUPER_ADMIN, *ALL_BUSINESS_ROLES},
    }
