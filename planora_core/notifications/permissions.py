from planora_core.common.permissions import ROLE_ADMIN, ROLE_EMPLOYEE, BaseRolePermission


class NotificationPermission(BaseRolePermission):
    allowed_roles_per_action = {
        "list": {ROLE_ADMIN, ROLE_EMPLOYEE},
        "read": {ROLE_ADMIN, ROLE_EMPLOYEE},
    }
