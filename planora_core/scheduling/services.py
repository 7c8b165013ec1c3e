# planora_core/scheduling/services.py
"""
Session Engine.

Every roster/waitlist mutation runs in one transaction that first locks the
Session row (select_for_update) and finishes by bumping Session.version, so
concurrent enroll/cancel calls on one session are serialized and capacity and
FIFO order cannot be corrupted.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional
from uuid import UUID

from django.core.exceptions import ValidationError as DjangoValidationError
from django.db import transaction
from django.utils import timezone
from rest_framework.exceptions import NotFound, PermissionDenied, ValidationError

from planora_core.classes.models import ClassOffering
from planora_core.clients.models import Client
from planora_core.common.api.exceptions import ConflictError
from planora_core.common.events import publish
from planora_core.employees.models import Employee
from planora_core.employees.selectors import employee_for_user
from planora_core.iam.context import IdentityContext
from planora_core.scheduling.constants import (
    ENROLLMENT_TRANSITIONS,
    OPEN_SESSION_STATUSES,
    SESSION_TRANSITIONS,
    EnrollmentStatus,
    RecurrenceFrequency,
    SessionStatus,
)
from planora_core.scheduling.models import Session, SessionEnrollment, WaitlistEntry

logger = logging.getLogger(__name__)

ENROLLED = "enrolled"
WAITLISTED = "waitlisted"

_SESSION_FIELDS = (
    "class_offering_id",
    "instructor_id",
    "date",
    "start_time",
    "end_time",
    "day_of_week",
    "is_recurring",
    "recurrence_frequency",
    "recurrence_end_date",
    "notes",
)


@dataclass(frozen=True)
class EnrollmentOutcome:
    result: str  # ENROLLED | WAITLISTED
    session: Session
    enrollment: Optional[SessionEnrollment] = None
    waitlist_entry: Optional[WaitlistEntry] = None
    waitlist_position: Optional[int] = None

    @property
    def is_waitlisted(self) -> bool:
        return self.result == WAITLISTED


@dataclass(frozen=True)
class CancellationOutcome:
    session: Session
    cancelled_client_id: UUID
    promoted: Optional[SessionEnrollment] = None


def assert_can_act_for_client(identity: IdentityContext, *, session: Session, client: Client) -> None:
    """The client's own login, or staff with an active association to the session's business."""
    if client.user_id == identity.user_id:
        return
    if identity.is_staff_of(session.business_id):
        return
    raise PermissionDenied("Access denied")


class SessionService:
    # ---------------------------------------------------------------------
    # Helpers
    # ---------------------------------------------------------------------
    @staticmethod
    def _lock_session(*, session_id: UUID, business_id: Optional[UUID] = None) -> Session:
        qs = Session.objects.select_for_update().select_related("class_offering")
        if business_id is not None:
            qs = qs.filter(business_id=business_id)
        try:
            return qs.get(id=session_id)
        except (Session.DoesNotExist, ValueError, DjangoValidationError):
            raise NotFound("Session not found")

    @staticmethod
    def _get_client(*, business_id: UUID, client_id: UUID, active_only: bool = True) -> Client:
        qs = Client.objects.filter(id=client_id, business_id=business_id)
        if active_only:
            qs = qs.filter(is_active=True)
        try:
            client = qs.first()
        except (ValueError, DjangoValidationError):
            client = None
        if client is None:
            raise NotFound("Client not found")
        return client

    @staticmethod
    def _bump(session: Session, *fields: str) -> None:
        session.version += 1
        session.save(update_fields=[*fields, "version", "updated_at"])

    @staticmethod
    def _append_enrollment(*, session: Session, client: Client, is_catch_up: bool) -> SessionEnrollment:
        """Caller holds the session lock and has checked capacity."""
        return SessionEnrollment.objects.create(
            session=session,
            client=client,
            status=EnrollmentStatus.ENROLLED,
            is_catch_up=is_catch_up,
        )

    @staticmethod
    def _promote_waitlist(session: Session) -> list[SessionEnrollment]:
        """
        Fill free seats from the waitlist head, strictly FIFO. Caller holds the
        session lock. Closed sessions never take promotions.
        """
        if session.status not in OPEN_SESSION_STATUSES:
            return []

        capacity = session.class_offering.max_capacity
        promoted: list[SessionEnrollment] = []
        for head in session.waitlist.select_related("client").order_by("added_date", "id"):
            if session.enrollments.filter(client_id=head.client_id).exists():
                # stale entry: the client already holds a seat
                head.delete()
                continue
            if session.enrollments.count() >= capacity:
                break
            promoted.append(SessionService._append_enrollment(session=session, client=head.client, is_catch_up=True))
            head.delete()
            logger.info("session %s: promoted waitlisted client %s", session.id, head.client_id)
        return promoted

    @staticmethod
    def _publish_promotions(session: Session, promoted: list[SessionEnrollment], actor_user_id: Optional[int]) -> None:
        for enrollment in promoted:
            publish(
                "enrollment.created",
                {
                    "business_id": str(session.business_id),
                    "session_id": str(session.id),
                    "client_id": str(enrollment.client_id),
                    "actor_user_id": actor_user_id,
                    "is_catch_up": True,
                },
            )

    @staticmethod
    def _validate_shape(values: dict) -> None:
        if not values.get("date") and not values.get("day_of_week"):
            raise ValidationError({"detail": "A session needs a date or a day_of_week."})
        if values.get("is_recurring") and not values.get("day_of_week"):
            raise ValidationError({"day_of_week": "Recurring sessions require a day_of_week."})

        start, end = values.get("start_time"), values.get("end_time")
        if start is None or end is None:
            raise ValidationError({"detail": "start_time and end_time are required."})
        if end <= start:
            raise ValidationError({"end_time": "end_time must be after start_time."})

        end_date = values.get("recurrence_end_date")
        if end_date and values.get("date") and end_date < values["date"]:
            raise ValidationError({"recurrence_end_date": "recurrence_end_date cannot be before date."})

    @staticmethod
    def _resolve_class(*, business_id: UUID, class_offering_id) -> ClassOffering:
        c = ClassOffering.objects.filter(id=class_offering_id, business_id=business_id, is_active=True).first()
        if c is None:
            raise ValidationError({"class_offering_id": "Invalid class for this business"})
        return c

    @staticmethod
    def _resolve_instructor(*, business_id: UUID, instructor_id, actor_user_id: Optional[int]) -> Employee:
        if not instructor_id:
            e = employee_for_user(business_id=business_id, user_id=actor_user_id) if actor_user_id else None
            if e is None:
                raise ValidationError({"instructor_id": "Instructor not found for this business"})
            return e

        e = Employee.objects.filter(id=instructor_id, business_id=business_id, is_active=True).first()
        if e is None:
            raise ValidationError({"instructor_id": "Invalid instructor for this business"})
        return e

    # ---------------------------------------------------------------------
    # Session lifecycle
    # ---------------------------------------------------------------------
    @staticmethod
    @transaction.atomic
    def create_session(*, business_id: UUID, actor_user_id: Optional[int], data: dict) -> Session:
        values = {k: data.get(k) for k in _SESSION_FIELDS}
        values["is_recurring"] = bool(values.get("is_recurring"))

        SessionService._validate_shape(values)
        klass = SessionService._resolve_class(business_id=business_id, class_offering_id=values["class_offering_id"])
        instructor = SessionService._resolve_instructor(
            business_id=business_id,
            instructor_id=values.get("instructor_id"),
            actor_user_id=actor_user_id,
        )

        if values["is_recurring"] and not values.get("recurrence_frequency"):
            values["recurrence_frequency"] = RecurrenceFrequency.WEEKLY

        session = Session.objects.create(
            business_id=business_id,
            class_offering=klass,
            instructor=instructor,
            date=values.get("date"),
            start_time=values["start_time"],
            end_time=values["end_time"],
            day_of_week=values.get("day_of_week") or "",
            is_recurring=values["is_recurring"],
            recurrence_frequency=values.get("recurrence_frequency") or "",
            recurrence_end_date=values.get("recurrence_end_date"),
            notes=values.get("notes") or "",
        )
        logger.info("session %s created business=%s class=%s", session.id, business_id, klass.id)
        return session

    @staticmethod
    @transaction.atomic
    def update_session(*, business_id: UUID, session_id: UUID, actor_user_id: Optional[int], data: dict) -> Session:
        session = SessionService._lock_session(session_id=session_id, business_id=business_id)

        changes = {k: data[k] for k in _SESSION_FIELDS if k in data}
        if not changes:
            return session

        merged = {k: getattr(session, k) for k in _SESSION_FIELDS}
        merged.update(changes)
        merged["is_recurring"] = bool(merged.get("is_recurring"))
        SessionService._validate_shape(merged)

        if "class_offering_id" in changes and changes["class_offering_id"] != session.class_offering_id:
            klass = SessionService._resolve_class(business_id=business_id, class_offering_id=changes["class_offering_id"])
            if session.enrollments.count() > klass.max_capacity:
                raise ConflictError("The new class capacity is below the current enrollment count.")
            session.class_offering = klass

        if "instructor_id" in changes:
            session.instructor = SessionService._resolve_instructor(
                business_id=business_id,
                instructor_id=changes["instructor_id"],
                actor_user_id=actor_user_id,
            )

        for name in ("date", "start_time", "end_time", "recurrence_end_date"):
            if name in changes:
                setattr(session, name, changes[name])
        for name in ("day_of_week", "recurrence_frequency", "notes"):
            if name in changes:
                setattr(session, name, changes[name] or "")
        if "is_recurring" in changes:
            session.is_recurring = bool(changes["is_recurring"])

        field_names = [k.removesuffix("_id") if k.endswith("_id") else k for k in changes]
        SessionService._bump(session, *field_names)
        return session

    @staticmethod
    @transaction.atomic
    def set_session_status(*, business_id: UUID, session_id: UUID, status: str) -> Session:
        if status not in SessionStatus.values:
            raise ValidationError({"status": f"Invalid status. Allowed: {list(SessionStatus.values)}"})

        session = SessionService._lock_session(session_id=session_id, business_id=business_id)
        if session.status == status:
            return session

        if status not in SESSION_TRANSITIONS[session.status]:
            raise ValidationError({"status": f"Cannot change session status from {session.status} to {status}."})

        previous = session.status
        session.status = status
        fields = ["status"]
        if status not in OPEN_SESSION_STATUSES and session.is_available_for_catch_up:
            session.is_available_for_catch_up = False
            fields.append("is_available_for_catch_up")
        SessionService._bump(session, *fields)

        logger.info("session %s status %s -> %s", session.id, previous, status)
        return session

    @staticmethod
    @transaction.atomic
    def delete_session(*, business_id: UUID, session_id: UUID) -> None:
        session = SessionService._lock_session(session_id=session_id, business_id=business_id)
        if session.enrollments.exists():
            raise ConflictError(
                "Cannot delete session with enrolled clients. Please cancel all enrollments first."
            )
        logger.info("session %s deleted", session.id)
        session.delete()

    # ---------------------------------------------------------------------
    # Roster
    # ---------------------------------------------------------------------
    @staticmethod
    @transaction.atomic
    def enroll_client(*, identity: IdentityContext, session_id: UUID, client_id: UUID) -> EnrollmentOutcome:
        """
        Enroll, or waitlist when the session is full. Capacity is never exceeded
        by a direct enrollment; the waitlisted result is still a success.
        """
        session = SessionService._lock_session(session_id=session_id)
        client = SessionService._get_client(business_id=session.business_id, client_id=client_id)
        assert_can_act_for_client(identity, session=session, client=client)

        if session.status not in OPEN_SESSION_STATUSES:
            raise ValidationError({"detail": f"Cannot enroll in a {session.status} session."})
        if session.enrollments.filter(client_id=client.id).exists():
            raise ConflictError("Client is already enrolled in this class")
        if session.waitlist.filter(client_id=client.id).exists():
            raise ConflictError("Client is already on the waitlist for this class")

        capacity = session.class_offering.max_capacity
        enrolled_count = session.enrollments.count()

        # a free seat still belongs to whoever is already waiting
        if enrolled_count >= capacity or session.waitlist.exists():
            entry = WaitlistEntry.objects.create(session=session, client=client)
            SessionService._bump(session)
            position = session.waitlist.count()
            logger.info("client %s waitlisted on session %s (position %s)", client.id, session.id, position)
            return EnrollmentOutcome(
                result=WAITLISTED,
                session=session,
                waitlist_entry=entry,
                waitlist_position=position,
            )

        enrollment = SessionService._append_enrollment(session=session, client=client, is_catch_up=False)
        fields: list[str] = []
        if enrolled_count + 1 >= capacity and session.is_available_for_catch_up:
            session.is_available_for_catch_up = False
            fields.append("is_available_for_catch_up")
        SessionService._bump(session, *fields)

        publish(
            "enrollment.created",
            {
                "business_id": str(session.business_id),
                "session_id": str(session.id),
                "client_id": str(client.id),
                "actor_user_id": identity.user_id,
                "is_catch_up": False,
            },
        )
        return EnrollmentOutcome(result=ENROLLED, session=session, enrollment=enrollment)

    @staticmethod
    @transaction.atomic
    def cancel_enrollment(*, identity: IdentityContext, session_id: UUID, client_id: UUID) -> CancellationOutcome:
        """
        Remove the client's roster slot, then hand the freed seat to the head of
        the waitlist (as a catch-up enrollment). Only with an empty waitlist does
        the seat stay advertised as available for catch-up. A session that is no
        longer open neither advertises nor promotes.
        """
        session = SessionService._lock_session(session_id=session_id)
        client = SessionService._get_client(
            business_id=session.business_id,
            client_id=client_id,
            active_only=False,
        )
        assert_can_act_for_client(identity, session=session, client=client)

        enrollment = session.enrollments.filter(client_id=client.id).first()
        if enrollment is None:
            raise ValidationError({"detail": "Client is not enrolled in this class"})

        enrollment.delete()

        promoted = SessionService._promote_waitlist(session)
        fields: list[str] = []
        if session.status in OPEN_SESSION_STATUSES:
            session.is_available_for_catch_up = (
                not session.waitlist.exists()
                and session.enrollments.count() < session.class_offering.max_capacity
            )
            fields.append("is_available_for_catch_up")

        SessionService._bump(session, *fields)
        logger.info("session %s: client %s cancelled", session.id, client.id)

        publish(
            "enrollment.cancelled",
            {
                "business_id": str(session.business_id),
                "session_id": str(session.id),
                "client_id": str(client.id),
                "actor_user_id": identity.user_id,
                "promoted_client_id": str(promoted[0].client_id) if promoted else None,
            },
        )
        SessionService._publish_promotions(session, promoted, identity.user_id)

        return CancellationOutcome(
            session=session,
            cancelled_client_id=client.id,
            promoted=promoted[0] if promoted else None,
        )

    @staticmethod
    @transaction.atomic
    def fill_from_waitlist(*, session_id: UUID, actor_user_id: Optional[int] = None) -> list[SessionEnrollment]:
        """Promote waiting clients into seats that opened without a cancellation (e.g. a capacity increase)."""
        session = SessionService._lock_session(session_id=session_id)
        promoted = SessionService._promote_waitlist(session)
        if not promoted:
            return []

        fields: list[str] = []
        if session.is_available_for_catch_up and session.enrollments.count() >= session.class_offering.max_capacity:
            session.is_available_for_catch_up = False
            fields.append("is_available_for_catch_up")
        SessionService._bump(session, *fields)

        SessionService._publish_promotions(session, promoted, actor_user_id)
        return promoted

    @staticmethod
    @transaction.atomic
    def add_catch_up_enrollment(*, session: Session, client: Client) -> SessionEnrollment:
        """
        Place a catch-up booking into a session already locked by the caller.
        The booking takes the advertised freed seat.
        """
        if session.status not in OPEN_SESSION_STATUSES:
            raise ValidationError({"detail": f"Cannot book a catch-up in a {session.status} session."})
        if not session.is_available_for_catch_up:
            raise ConflictError("Session is not available for catch-up")
        if session.enrollments.filter(client_id=client.id).exists():
            raise ConflictError("Client is already enrolled in this class")
        if session.waitlist.exclude(client_id=client.id).exists():
            raise ConflictError("Waitlisted clients take freed seats first")

        enrolled_count = session.enrollments.count()
        if enrolled_count >= session.class_offering.max_capacity:
            raise ConflictError("Session is full")

        # the booking replaces the client's own place in the queue
        session.waitlist.filter(client_id=client.id).delete()
        enrollment = SessionService._append_enrollment(session=session, client=client, is_catch_up=True)
        # a seat stays advertised only while one is still free
        session.is_available_for_catch_up = enrolled_count + 1 < session.class_offering.max_capacity
        SessionService._bump(session, "is_available_for_catch_up")
        return enrollment

    @staticmethod
    @transaction.atomic
    def set_enrollment_status(*, business_id: UUID, session_id: UUID, client_id: UUID, status: str) -> SessionEnrollment:
        if status not in EnrollmentStatus.values:
            raise ValidationError({"status": f"Invalid status. Allowed: {list(EnrollmentStatus.values)}"})

        session = SessionService._lock_session(session_id=session_id, business_id=business_id)
        enrollment = session.enrollments.filter(client_id=client_id).first()
        if enrollment is None:
            raise ValidationError({"detail": "Client is not enrolled in this class"})

        if enrollment.status == status:
            return enrollment
        if status not in ENROLLMENT_TRANSITIONS[enrollment.status]:
            raise ValidationError(
                {"status": f"Cannot change enrollment status from {enrollment.status} to {status}."}
            )

        enrollment.status = status
        enrollment.save(update_fields=["status"])
        SessionService._bump(session)

        Client.objects.filter(id=enrollment.client_id).update(last_activity=timezone.now())
        return enrollment
