# planora_core/clients/services.py
"""
Client/Member Graph.

One login owns at most one primary Client per business plus any number of
members. Every write that can change "who is primary" locks the user's client
rows for that business first; the partial unique constraint backs it up.
"""
from __future__ import annotations

import logging
from typing import Any, Optional
from uuid import UUID

from django.core.exceptions import ValidationError as DjangoValidationError
from django.db import IntegrityError, transaction
from django.db.models import Q
from django.utils import timezone
from rest_framework.exceptions import NotFound, PermissionDenied, ValidationError

from planora_core.businesses.selectors import get_business
from planora_core.clients.models import MEMBER_RELATIONSHIPS, Client, Relationship
from planora_core.common.api.exceptions import ConflictError

logger = logging.getLogger(__name__)

# Never writable through update_member.
IMMUTABLE_MEMBER_FIELDS = ("is_primary", "added_by", "added_by_id", "user", "user_id", "business", "business_id")

_PROFILE_FIELDS = (
    "first_name",
    "last_name",
    "phone",
    "date_of_birth",
    "emergency_contact",
    "medical_info",
    "address",
    "preferences",
)

_MEMBER_UPDATABLE = (*_PROFILE_FIELDS, "relationship")


def _require_names(data: dict) -> None:
    if not (data.get("first_name") or "").strip() or not (data.get("last_name") or "").strip():
        raise ValidationError({"detail": "First name and last name are required"})


def _profile_fields(data: dict) -> dict[str, Any]:
    return {k: data[k] for k in _PROFILE_FIELDS if k in data and data[k] is not None}


def _lock_user_clients(*, user_id: int, business_id: UUID) -> list[Client]:
    return list(
        Client.objects.select_for_update()
        .filter(user_id=user_id, business_id=business_id)
        .order_by("created_at", "id")
    )


class ClientService:
    @staticmethod
    @transaction.atomic
    def create_client(
        *,
        business_id: UUID,
        user_id: int,
        is_primary: Optional[bool] = None,
        relationship: Optional[str] = None,
        created_by_staff: bool = False,
        **data,
    ) -> Client:
        """
        Create a client row for (user, business).

        Without an explicit is_primary the row becomes the primary (relationship=self)
        when the pair has none yet, otherwise a non-primary member.
        Staff creation refuses users that already have a client record here.
        """
        get_business(business_id=business_id)
        _require_names(data)

        rows = _lock_user_clients(user_id=user_id, business_id=business_id)
        if created_by_staff and rows:
            raise ConflictError("User is already a client for this business")

        has_primary = any(c.is_primary for c in rows)

        if is_primary is None:
            is_primary = not has_primary
        elif is_primary and has_primary:
            raise ConflictError("A primary client already exists for this user in this business")

        if is_primary:
            relationship = Relationship.SELF
        else:
            relationship = relationship or Relationship.OTHER
            if relationship not in MEMBER_RELATIONSHIPS:
                raise ValidationError({"relationship": f"Invalid relationship. Allowed: {list(MEMBER_RELATIONSHIPS)}"})

        try:
            with transaction.atomic():
                client = Client.objects.create(
                    business_id=business_id,
                    user_id=user_id,
                    is_primary=is_primary,
                    relationship=relationship,
                    **_profile_fields(data),
                )
        except IntegrityError:
            raise ConflictError("A primary client already exists for this user in this business")

        logger.info("client %s created user=%s business=%s primary=%s", client.id, user_id, business_id, is_primary)
        return client

    @staticmethod
    def _resolve_primary_for_update(*, user_id: int, business_id: UUID) -> Optional[Client]:
        """
        Returns the user's primary client, repairing legacy data on the way:
        - no primary but active rows: the oldest active row is promoted;
        - only inactive rows: the oldest is reactivated and promoted.
        Caller must hold the row locks.
        """
        rows = _lock_user_clients(user_id=user_id, business_id=business_id)
        primary = next((c for c in rows if c.is_primary), None)
        if primary is not None:
            return primary

        active = [c for c in rows if c.is_active]
        candidate = active[0] if active else (rows[0] if rows else None)
        if candidate is None:
            return None

        candidate.is_primary = True
        candidate.relationship = Relationship.SELF
        candidate.is_active = True
        candidate.save(update_fields=["is_primary", "relationship", "is_active", "updated_at"])
        logger.warning("promoted client %s to primary for user=%s business=%s", candidate.id, user_id, business_id)
        return candidate

    @staticmethod
    @transaction.atomic
    def add_member(*, business_id: UUID, user_id: int, data: dict) -> Client:
        primary = ClientService._resolve_primary_for_update(user_id=user_id, business_id=business_id)
        if primary is None:
            raise PermissionDenied("Client account not found. Please ensure you have completed registration.")
        if not primary.is_active:
            raise PermissionDenied("Only account owners can add members.")

        _require_names(data)

        relationship = data.get("relationship") or Relationship.OTHER
        if relationship not in MEMBER_RELATIONSHIPS:
            raise ValidationError({"relationship": f"Invalid relationship. Allowed: {list(MEMBER_RELATIONSHIPS)}"})

        fields = _profile_fields(data)
        # inherited from the account owner when not supplied
        fields.setdefault("phone", primary.phone)
        if not fields.get("emergency_contact"):
            fields["emergency_contact"] = primary.emergency_contact
        if not fields.get("address"):
            fields["address"] = primary.address

        member = Client.objects.create(
            business_id=business_id,
            user_id=user_id,
            is_primary=False,
            added_by_id=user_id,
            relationship=relationship,
            **fields,
        )
        logger.info("member %s added by user=%s business=%s", member.id, user_id, business_id)
        return member

    @staticmethod
    def _lock_member(*, business_id: UUID, member_id: UUID) -> Client:
        try:
            member = Client.objects.select_for_update().get(id=member_id)
        except (Client.DoesNotExist, ValueError, DjangoValidationError):
            raise NotFound("Member not found")
        if member.business_id != business_id:
            raise NotFound("Member not found")
        return member

    @staticmethod
    @transaction.atomic
    def update_member(*, business_id: UUID, user_id: int, member_id: UUID, data: dict) -> Client:
        member = ClientService._lock_member(business_id=business_id, member_id=member_id)
        if member.user_id != user_id:
            raise PermissionDenied("Access denied. This member does not belong to your account.")

        payload = {k: v for k, v in data.items() if k not in IMMUTABLE_MEMBER_FIELDS}

        if "relationship" in payload:
            allowed = (Relationship.SELF,) if member.is_primary else MEMBER_RELATIONSHIPS
            if payload["relationship"] not in allowed:
                raise ValidationError({"relationship": f"Invalid relationship. Allowed: {list(allowed)}"})

        changed: list[str] = []
        for name in _MEMBER_UPDATABLE:
            if name in payload:
                setattr(member, name, payload[name])
                changed.append(name)

        if changed:
            member.last_activity = timezone.now()
            member.save(update_fields=[*changed, "last_activity", "updated_at"])
        return member

    @staticmethod
    @transaction.atomic
    def remove_member(*, business_id: UUID, user_id: int, member_id: UUID) -> Client:
        """
        Soft-delete a member. Refused (400) for the primary, for members owned by
        another login, and while the member holds future scheduled/confirmed sessions.
        """
        from planora_core.scheduling.models import EnrollmentStatus, SessionEnrollment, SessionStatus

        member = ClientService._lock_member(business_id=business_id, member_id=member_id)

        if member.is_primary:
            raise ValidationError({"detail": "Cannot delete primary account owner"})
        if member.user_id != user_id:
            raise ValidationError({"detail": "This member does not belong to your account."})

        today = timezone.localdate()
        active_sessions = (
            SessionEnrollment.objects.filter(
                client_id=member.id,
                status__in=(EnrollmentStatus.ENROLLED, EnrollmentStatus.CONFIRMED),
                session__status__in=(SessionStatus.SCHEDULED, SessionStatus.CONFIRMED),
            )
            .filter(Q(session__date__gte=today) | Q(session__date__isnull=True, session__is_recurring=True))
            .values("session_id")
            .distinct()
            .count()
        )
        if active_sessions:
            raise ValidationError(
                {
                    "detail": (
                        f"Cannot delete member with {active_sessions} active session(s). "
                        "Please cancel all sessions first."
                    ),
                    "active_sessions_count": active_sessions,
                }
            )

        if member.is_active:
            member.is_active = False
            member.save(update_fields=["is_active", "updated_at"])
        logger.info("member %s removed by user=%s", member.id, user_id)
        return member

    @staticmethod
    @transaction.atomic
    def deactivate_client(*, business_id: UUID, client_id: UUID) -> Client:
        c = Client.objects.select_for_update().filter(id=client_id, business_id=business_id).first()
        if c is None:
            raise NotFound("Client not found")
        if c.is_active:
            c.is_active = False
            c.save(update_fields=["is_active", "updated_at"])
        return c
