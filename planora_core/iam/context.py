# planora_core/iam/context.py
"""
Canonical identity context.

Built once per request by the authentication layer (JWT or fixture provider),
cached on the request as request.identity, and handed explicitly to services.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Optional
from uuid import UUID

from rest_framework.exceptions import ValidationError

from planora_core.iam.models import UserBusiness, UserRole
from planora_core.iam.services.profiles import get_or_create_profile

logger = logging.getLogger(__name__)

HDR_BUSINESS = "X-Business-ID"

BUSINESS_CONTEXT_REQUIRED_MSG = "Business context required"


@dataclass(frozen=True)
class BusinessAssociation:
    association_id: UUID
    business_id: UUID
    business_name: str
    role: str
    permissions: dict = field(default_factory=dict, compare=False)


@dataclass(frozen=True)
class IdentityContext:
    user_id: int
    email: str
    role: str
    business_id: Optional[UUID] = None
    current_business_id: Optional[UUID] = None
    associations: tuple[BusinessAssociation, ...] = ()
    current_association: Optional[BusinessAssociation] = None
    is_fixture: bool = False

    @property
    def is_super_admin(self) -> bool:
        return self.role == UserRole.SUPER_ADMIN

    @property
    def is_staff(self) -> bool:
        return self.role in (UserRole.ADMIN, UserRole.EMPLOYEE)

    @property
    def is_client(self) -> bool:
        return self.role == UserRole.CLIENT

    def association_for(self, business_id: UUID) -> Optional[BusinessAssociation]:
        for assoc in self.associations:
            if assoc.business_id == business_id:
                return assoc
        return None

    def is_staff_of(self, business_id: UUID) -> bool:
        return self.is_staff and self.association_for(business_id) is not None

    def require_business_id(self) -> UUID:
        if self.business_id is None:
            raise ValidationError({"detail": BUSINESS_CONTEXT_REQUIRED_MSG})
        return self.business_id

    def as_dict(self) -> dict:
        return {
            "user_id": self.user_id,
            "email": self.email,
            "role": self.role,
            "business_id": str(self.business_id) if self.business_id else None,
            "current_business_id": str(self.current_business_id) if self.current_business_id else None,
            "business_associations": [
                {
                    "association_id": str(a.association_id),
                    "business_id": str(a.business_id),
                    "business_name": a.business_name,
                    "role": a.role,
                    "permissions": a.permissions,
                }
                for a in self.associations
            ],
            "current_business": (
                {
                    "business_id": str(self.current_association.business_id),
                    "business_name": self.current_association.business_name,
                    "role": self.current_association.role,
                }
                if self.current_association
                else None
            ),
            "is_fixture": self.is_fixture,
        }


def _parse_uuid(value: str, header_name: str) -> UUID:
    try:
        return UUID(str(value))
    except (TypeError, ValueError):
        raise ValidationError({header_name: "Invalid UUID"})


def business_id_from_headers(request) -> Optional[UUID]:
    raw = request.headers.get(HDR_BUSINESS) if hasattr(request, "headers") else None
    if not raw:
        raw = getattr(request, "META", {}).get("HTTP_X_BUSINESS_ID")
    if not raw:
        return None
    return _parse_uuid(raw, HDR_BUSINESS)


def resolve_identity_context(
    user,
    *,
    requested_business_id: Optional[UUID] = None,
    is_fixture: bool = False,
) -> IdentityContext:
    """
    Resolve {role, business context, associations} for an authenticated user.

    - super-admin: no business context required; an explicit header is honoured as-is.
    - others: only ACTIVE associations count. The requested header wins, then the stored
      current business. If neither matches and at least one active association exists,
      the first one becomes the default and is persisted onto the profile.
    """
    profile = get_or_create_profile(user)
    email = getattr(user, "email", "") or ""

    if profile.role == UserRole.SUPER_ADMIN:
        return IdentityContext(
            user_id=user.id,
            email=email,
            role=profile.role,
            business_id=requested_business_id,
            current_business_id=profile.current_business_id,
            is_fixture=is_fixture,
        )

    rows = (
        UserBusiness.objects.select_related("business")
        .filter(user_id=user.id, is_active=True)
        .order_by("joined_at", "created_at")
    )
    associations = tuple(
        BusinessAssociation(
            association_id=ub.id,
            business_id=ub.business_id,
            business_name=ub.business.name,
            role=ub.role,
            permissions=ub.permissions,
        )
        for ub in rows
    )
    by_business = {a.business_id: a for a in associations}

    current = None
    for candidate in (requested_business_id, profile.current_business_id):
        if candidate is not None and candidate in by_business:
            current = by_business[candidate]
            break

    if requested_business_id is not None and (current is None or current.business_id != requested_business_id):
        logger.warning(
            "user %s requested business %s without an active association", user.id, requested_business_id
        )

    current_business_id = profile.current_business_id
    if current is None and associations:
        current = associations[0]
        profile.current_business_id = current.business_id
        profile.save(update_fields=["current_business", "updated_at"])
        current_business_id = current.business_id
        logger.info("user %s defaulted to business %s", user.id, current.business_id)

    return IdentityContext(
        user_id=user.id,
        email=email,
        role=profile.role,
        business_id=current.business_id if current else None,
        current_business_id=current_business_id,
        associations=associations,
        current_association=current,
        is_fixture=is_fixture,
    )


def get_identity(request) -> Optional[IdentityContext]:
    """
    Returns the request's IdentityContext, resolving it lazily when the
    authentication layer did not (force_authenticate in tests, session auth).
    """
    identity = getattr(request, "identity", None)
    if isinstance(identity, IdentityContext):
        return identity

    user = getattr(request, "user", None)
    if not user or not getattr(user, "is_authenticated", False):
        return None

    identity = resolve_identity_context(user, requested_business_id=business_id_from_headers(request))
    request.identity = identity
    return identity
