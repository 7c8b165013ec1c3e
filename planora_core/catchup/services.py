# planora_core/catchup/services.py
"""
Catch-up Credit Tracker.

Two independent gates:
- Client.catch_up_approval_status: coarse admin switch; must be "approved" before
  a client sees or books any catch-up.
- Notification(type=cancellation).catch_up_approval_status: per cancelled session;
  an approved, unconsumed one is one credit.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional
from uuid import UUID

from django.db import transaction
from django.utils import timezone
from rest_framework.exceptions import NotFound, PermissionDenied, ValidationError

from planora_core.clients.models import Client, ClientCatchUpStatus
from planora_core.common.events import publish
from planora_core.iam.context import IdentityContext
from planora_core.notifications.models import CatchUpApprovalStatus, Notification, NotificationType
from planora_core.notifications.services import NotificationService
from planora_core.scheduling.models import Session, SessionEnrollment
from planora_core.scheduling.recurrence import projected_date
from planora_core.scheduling.services import SessionService, assert_can_act_for_client

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CatchUpBooking:
    enrollment: SessionEnrollment
    credit: Notification


def _describe(session: Optional[Session]) -> str:
    if session is None:
        return "a session"
    when = session.date or projected_date(session)
    title = session.class_offering.title if session.class_offering_id else "class"
    return f"{title} on {when.isoformat()}" if when else title


def _lock_client(*, business_id: UUID, client_id: UUID) -> Client:
    c = Client.objects.select_for_update().filter(id=client_id, business_id=business_id).first()
    if c is None:
        raise NotFound("Client not found")
    return c


def _lock_cancellation(*, business_id: UUID, notification_id: UUID) -> Notification:
    n = (
        Notification.objects.select_for_update()
        .filter(id=notification_id, business_id=business_id, type=NotificationType.CANCELLATION)
        .first()
    )
    if n is None:
        raise NotFound("Cancellation notification not found")
    return n


class CatchUpService:
    # ---------------------------------------------------------------------
    # Event reactions
    # ---------------------------------------------------------------------
    @staticmethod
    @transaction.atomic
    def record_cancellation(*, business_id: UUID, session_id: UUID, client_id: UUID) -> Notification:
        client = _lock_client(business_id=business_id, client_id=client_id)
        session = Session.objects.select_related("class_offering").filter(id=session_id).first()

        notification = NotificationService.record(
            business_id=business_id,
            type=NotificationType.CANCELLATION,
            message=f"{client.full_name} cancelled {_describe(session)}",
            client_id=client.id,
            session_id=session.id if session else None,
        )

        client.cancellation_count += 1
        client.has_cancelled_before = True
        client.last_activity = timezone.now()
        fields = ["cancellation_count", "has_cancelled_before", "last_activity", "updated_at"]
        if client.catch_up_approval_status is None:
            client.catch_up_approval_status = ClientCatchUpStatus.PENDING
            fields.append("catch_up_approval_status")
        client.save(update_fields=fields)
        return notification

    @staticmethod
    def record_booking(*, business_id: UUID, session_id: UUID, client_id: UUID, is_catch_up: bool) -> Notification:
        client = Client.objects.filter(id=client_id).first()
        session = Session.objects.select_related("class_offering").filter(id=session_id).first()
        who = client.full_name if client else "A client"
        kind = "a catch-up for" if is_catch_up else ""
        message = " ".join(part for part in (who, "booked", kind, _describe(session)) if part)
        return NotificationService.record(
            business_id=business_id,
            type=NotificationType.BOOKING,
            message=message,
            client_id=client.id if client else None,
            session_id=session.id if session else None,
        )

    # ---------------------------------------------------------------------
    # Client-level gate
    # ---------------------------------------------------------------------
    @staticmethod
    @transaction.atomic
    def approve_client(*, business_id: UUID, client_id: UUID, actor_user_id: int) -> Client:
        client = _lock_client(business_id=business_id, client_id=client_id)
        if not client.has_cancelled_before:
            raise ValidationError({"detail": "Client has not cancelled any sessions yet"})

        client.catch_up_approval_status = ClientCatchUpStatus.APPROVED
        client.catch_up_approved_by_id = actor_user_id
        client.catch_up_approved_at = timezone.now()
        client.save(update_fields=["catch_up_approval_status", "catch_up_approved_by", "catch_up_approved_at", "updated_at"])
        logger.info("catch-up access approved for client %s by %s", client.id, actor_user_id)
        return client

    @staticmethod
    @transaction.atomic
    def reject_client(*, business_id: UUID, client_id: UUID, actor_user_id: int) -> Client:
        client = _lock_client(business_id=business_id, client_id=client_id)
        client.catch_up_approval_status = ClientCatchUpStatus.REJECTED
        client.catch_up_approved_by_id = actor_user_id
        client.catch_up_approved_at = timezone.now()
        client.save(update_fields=["catch_up_approval_status", "catch_up_approved_by", "catch_up_approved_at", "updated_at"])
        logger.info("catch-up access rejected for client %s by %s", client.id, actor_user_id)
        return client

    # ---------------------------------------------------------------------
    # Per-cancellation gate
    # ---------------------------------------------------------------------
    @staticmethod
    def _decide(*, business_id: UUID, notification_id: UUID, actor_user_id: int, status: str) -> Notification:
        n = _lock_cancellation(business_id=business_id, notification_id=notification_id)
        if n.consumed_at is not None:
            raise ValidationError({"detail": "This catch-up credit has already been used"})

        n.catch_up_approval_status = status
        n.catch_up_approved_by_id = actor_user_id
        n.catch_up_approved_at = timezone.now()
        n.save(update_fields=["catch_up_approval_status", "catch_up_approved_by", "catch_up_approved_at", "updated_at"])
        return n

    @staticmethod
    @transaction.atomic
    def approve_cancellation(*, business_id: UUID, notification_id: UUID, actor_user_id: int) -> Notification:
        return CatchUpService._decide(
            business_id=business_id,
            notification_id=notification_id,
            actor_user_id=actor_user_id,
            status=CatchUpApprovalStatus.APPROVED,
        )

    @staticmethod
    @transaction.atomic
    def reject_cancellation(*, business_id: UUID, notification_id: UUID, actor_user_id: int) -> Notification:
        return CatchUpService._decide(
            business_id=business_id,
            notification_id=notification_id,
            actor_user_id=actor_user_id,
            status=CatchUpApprovalStatus.REJECTED,
        )

    # ---------------------------------------------------------------------
    # Spending a credit
    # ---------------------------------------------------------------------
    @staticmethod
    @transaction.atomic
    def book_catch_up(*, identity: IdentityContext, session_id: UUID, client_id: UUID) -> CatchUpBooking:
        """
        Book a freed seat with one credit: requires the client-level approval and
        consumes the oldest approved, unconsumed cancellation credit.
        """
        session = SessionService._lock_session(session_id=session_id)
        client = SessionService._get_client(business_id=session.business_id, client_id=client_id)
        assert_can_act_for_client(identity, session=session, client=client)

        if client.catch_up_approval_status != ClientCatchUpStatus.APPROVED:
            raise PermissionDenied("Catch-up access has not been approved for this client")

        credit = (
            Notification.objects.select_for_update()
            .filter(
                business_id=session.business_id,
                client_id=client.id,
                type=NotificationType.CANCELLATION,
                catch_up_approval_status=CatchUpApprovalStatus.APPROVED,
                consumed_at__isnull=True,
            )
            .order_by("created_at", "id")
            .first()
        )
        if credit is None:
            raise ValidationError({"detail": "No approved catch-up credit available"})

        enrollment = SessionService.add_catch_up_enrollment(session=session, client=client)

        credit.consumed_at = timezone.now()
        credit.consumed_by_session = session
        credit.save(update_fields=["consumed_at", "consumed_by_session", "updated_at"])
        logger.info("client %s spent credit %s on session %s", client.id, credit.id, session.id)

        publish(
            "enrollment.created",
            {
                "business_id": str(session.business_id),
                "session_id": str(session.id),
                "client_id": str(client.id),
                "actor_user_id": identity.user_id,
                "is_catch_up": True,
            },
        )
        return CatchUpBooking(enrollment=enrollment, credit=credit)
