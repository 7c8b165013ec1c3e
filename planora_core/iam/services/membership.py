# planora_core/iam/services/membership.py
"""
Business Association Manager.

The single place UserBusiness rows are created, reactivated, deactivated and
re-roled, and the single place permission defaults are derived from a role.
"""
from __future__ import annotations

import logging
from typing import Iterable, Optional
from uuid import UUID

from django.contrib.auth import get_user_model
from django.db import transaction
from django.db.models import QuerySet
from django.utils import timezone
from rest_framework.exceptions import NotFound, PermissionDenied, ValidationError

from planora_core.businesses.models import Business
from planora_core.common.api.exceptions import ConflictError
from planora_core.iam.models import BusinessRole, ClientStatus, UserBusiness, UserProfile
from planora_core.iam.services.profiles import get_or_create_profile

logger = logging.getLogger(__name__)


_ROLE_PERMISSIONS: dict[str, dict[str, bool]] = {
    BusinessRole.ADMIN: {
        "can_manage_clients": True,
        "can_manage_instructors": True,
        "can_manage_classes": True,
        "can_manage_sessions": True,
        "can_view_reports": True,
    },
    BusinessRole.INSTRUCTOR: {
        "can_manage_clients": False,
        "can_manage_instructors": False,
        "can_manage_classes": True,
        "can_manage_sessions": True,
        "can_view_reports": False,
    },
    BusinessRole.EMPLOYEE: {
        "can_manage_clients": False,
        "can_manage_instructors": False,
        "can_manage_classes": True,
        "can_manage_sessions": True,
        "can_view_reports": False,
    },
    BusinessRole.CLIENT: {
        "can_manage_clients": False,
        "can_manage_instructors": False,
        "can_manage_classes": False,
        "can_manage_sessions": False,
        "can_view_reports": False,
    },
}


def default_permissions_for(role: str) -> dict[str, bool]:
    if role not in _ROLE_PERMISSIONS:
        raise ValidationError({"role": f"Invalid role. Allowed: {list(BusinessRole.values)}"})
    return dict(_ROLE_PERMISSIONS[role])


def default_is_active_for(role: str) -> bool:
    # Clients join pending (admin approval); staff roles are active immediately.
    return role != BusinessRole.CLIENT


def _get_user(user_id: int):
    try:
        return get_user_model().objects.get(id=user_id)
    except get_user_model().DoesNotExist:
        raise NotFound("User not found")


def _get_business(business_id: UUID) -> Business:
    try:
        return Business.objects.get(id=business_id)
    except Business.DoesNotExist:
        raise NotFound("Business not found")


# -------------------------
# Mutations
# -------------------------
@transaction.atomic
def add_user_to_business(
    *,
    user_id: int,
    business_id: UUID,
    role: str,
    is_active: Optional[bool] = None,
) -> UserBusiness:
    """
    Create or reactivate the (user, business) association.

    - Active association already present -> Conflict.
    - Inactive (pending) association present -> reactivated in place with the new role.
    - Activation defaults: client starts inactive unless overridden; other roles active.
    """
    perms = default_permissions_for(role)
    _get_user(user_id)
    _get_business(business_id)

    active = default_is_active_for(role) if is_active is None else bool(is_active)

    existing = UserBusiness.objects.select_for_update().filter(user_id=user_id, business_id=business_id).first()
    if existing is not None:
        if existing.is_active:
            raise ConflictError("User is already associated with this business")

        existing.role = role
        existing.is_active = active
        for flag, value in perms.items():
            setattr(existing, flag, value)
        update_fields = ["role", "is_active", *perms.keys(), "updated_at"]
        if active:
            existing.joined_at = timezone.now()
            update_fields.append("joined_at")
        existing.save(update_fields=update_fields)
        logger.info("reactivated association user=%s business=%s role=%s active=%s", user_id, business_id, role, active)
        return existing

    return UserBusiness.objects.create(
        user_id=user_id,
        business_id=business_id,
        role=role,
        is_active=active,
        **perms,
    )


@transaction.atomic
def remove_user_from_business(*, user_id: int, business_id: UUID) -> UserBusiness:
    """
    Deactivate the active association; clears the user's current-business
    pointer when it referenced this business.
    """
    ub = UserBusiness.objects.select_for_update().filter(
        user_id=user_id, business_id=business_id, is_active=True
    ).first()
    if ub is None:
        raise NotFound("User is not associated with this business")

    ub.is_active = False
    ub.save(update_fields=["is_active", "updated_at"])

    UserProfile.objects.filter(user_id=user_id, current_business_id=business_id).update(current_business=None)
    return ub


@transaction.atomic
def switch_user_business(*, user_id: int, business_id: UUID) -> UserBusiness:
    ub = UserBusiness.objects.select_related("business").filter(
        user_id=user_id, business_id=business_id, is_active=True
    ).first()
    if ub is None:
        raise PermissionDenied("User does not have access to this business")

    profile = get_or_create_profile(_get_user(user_id))
    if profile.current_business_id != ub.business_id:
        profile.current_business_id = ub.business_id
        profile.save(update_fields=["current_business", "updated_at"])
    return ub


@transaction.atomic
def update_user_role_in_business(*, user_id: int, business_id: UUID, role: str) -> UserBusiness:
    perms = default_permissions_for(role)

    ub = UserBusiness.objects.select_for_update().filter(
        user_id=user_id, business_id=business_id, is_active=True
    ).first()
    if ub is None:
        raise NotFound("User is not associated with this business")

    if ub.role == role:
        return ub

    ub.role = role
    for name, value in perms.items():
        setattr(ub, name, value)
    ub.save(update_fields=["role", *perms.keys(), "updated_at"])
    return ub


@transaction.atomic
def approve_join_request(*, business_id: UUID, user_id: int, role: Optional[str] = None) -> UserBusiness:
    pending = UserBusiness.objects.select_for_update().filter(
        user_id=user_id, business_id=business_id, is_active=False
    ).first()
    if pending is None:
        raise NotFound("Pending request not found")

    update_fields = ["is_active", "joined_at", "updated_at"]
    if role and role != pending.role:
        perms = default_permissions_for(role)
        pending.role = role
        for name, value in perms.items():
            setattr(pending, name, value)
        update_fields += ["role", *perms.keys()]

    pending.is_active = True
    pending.joined_at = timezone.now()
    pending.save(update_fields=update_fields)

    if pending.role == BusinessRole.CLIENT:
        UserProfile.objects.filter(user_id=user_id).update(client_status=ClientStatus.APPROVED)

    return pending


@transaction.atomic
def reject_join_request(*, business_id: UUID, user_id: int) -> None:
    deleted, _ = UserBusiness.objects.filter(user_id=user_id, business_id=business_id, is_active=False).delete()
    if not deleted:
        raise NotFound("Pending request not found")


@transaction.atomic
def set_client_status(*, business_id: UUID, user_id: int, status: str) -> dict:
    """
    Approve or suspend a client user; the client association follows
    (approved -> active, suspended -> inactive).
    """
    if status not in (ClientStatus.APPROVED, ClientStatus.SUSPENDED):
        raise ValidationError({"client_status": "Valid client status (approved/suspended) is required"})

    user = _get_user(user_id)
    ub = UserBusiness.objects.select_for_update().filter(
        user_id=user_id, business_id=business_id, role=BusinessRole.CLIENT
    ).first()
    if ub is None:
        raise NotFound("Client not found")

    profile = get_or_create_profile(user)
    profile.client_status = status
    profile.save(update_fields=["client_status", "updated_at"])

    should_be_active = status == ClientStatus.APPROVED
    if ub.is_active != should_be_active:
        ub.is_active = should_be_active
        ub.save(update_fields=["is_active", "updated_at"])

    return {
        "user_id": user.id,
        "email": user.email,
        "client_status": profile.client_status,
        "business_access": ub.is_active,
    }


# -------------------------
# Reads
# -------------------------
def list_user_businesses(user_id: int) -> list[dict]:
    qs = (
        UserBusiness.objects.select_related("business")
        .filter(user_id=user_id, is_active=True)
        .order_by("joined_at", "created_at")
    )

    items: list[dict] = []
    for ub in qs:
        b = ub.business
        items.append(
            {
                "association_id": str(ub.id),
                "business_id": str(b.id),
                "business_name": b.name,
                "business_email": b.email,
                "business_type": b.business_type,
                "business_status": b.status,
                "role": ub.role,
                "permissions": ub.permissions,
                "joined_at": ub.joined_at.isoformat() if ub.joined_at else None,
            }
        )
    return items


def list_business_users(business_id: UUID) -> QuerySet[UserBusiness]:
    return (
        UserBusiness.objects.select_related("user", "user__planora_profile")
        .filter(business_id=business_id, is_active=True)
        .order_by("joined_at")
    )


def list_pending_requests(business_id: UUID) -> QuerySet[UserBusiness]:
    return (
        UserBusiness.objects.select_related("user")
        .filter(business_id=business_id, is_active=False)
        .order_by("-created_at")
    )


def is_active_member(*, user_id: int, business_id: UUID, roles: Optional[Iterable[str]] = None) -> bool:
    qs = UserBusiness.objects.filter(user_id=user_id, business_id=business_id, is_active=True)
    if roles is not None:
        qs = qs.filter(role__in=list(roles))
    return qs.exists()
