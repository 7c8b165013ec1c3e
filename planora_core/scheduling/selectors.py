# planora_core/scheduling/selectors.py
from __future__ import annotations

from typing import Optional
from uuid import UUID

from django.core.exceptions import ValidationError as DjangoValidationError
from django.db.models import Count, Prefetch, Q, QuerySet
from django.utils import timezone
from rest_framework.exceptions import NotFound, ValidationError

from planora_core.scheduling.constants import OPEN_SESSION_STATUSES
from planora_core.scheduling.filters import SessionFilter
from planora_core.scheduling.models import Session, SessionEnrollment, WaitlistEntry


def _base_qs() -> QuerySet[Session]:
    return (
        Session.objects.select_related("class_offering", "instructor")
        .prefetch_related(
            Prefetch("enrollments", queryset=SessionEnrollment.objects.select_related("client").order_by("id")),
            Prefetch("waitlist", queryset=WaitlistEntry.objects.select_related("client").order_by("added_date", "id")),
        )
        .annotate(enrolled_count=Count("enrollments", distinct=True))
    )


def list_sessions(*, business_id: UUID, params=None) -> QuerySet[Session]:
    qs = _base_qs().filter(business_id=business_id)

    f = SessionFilter(params or {}, queryset=qs)
    if not f.is_valid():
        raise ValidationError(f.errors)
    return f.qs.order_by("date", "start_time")


def get_session(*, business_id: UUID, session_id: UUID) -> Session:
    try:
        return _base_qs().get(id=session_id, business_id=business_id)
    except (Session.DoesNotExist, ValueError, DjangoValidationError):
        raise NotFound("Session not found")


def upcoming_open_sessions(*, business_id: UUID) -> QuerySet[Session]:
    today = timezone.localdate()
    return _base_qs().filter(
        Q(date__gte=today) | Q(date__isnull=True, is_recurring=True),
        business_id=business_id,
        status__in=OPEN_SESSION_STATUSES,
    )


def catch_up_sessions(*, business_id: UUID, exclude_client_ids: Optional[list] = None) -> QuerySet[Session]:
    """Upcoming open sessions advertising a freed seat."""
    qs = upcoming_open_sessions(business_id=business_id).filter(is_available_for_catch_up=True)
    if exclude_client_ids:
        qs = qs.exclude(enrollments__client_id__in=exclude_client_ids)
    return qs.order_by("date", "start_time")


def sessions_for_instructor(*, business_id: UUID, employee_id: UUID) -> QuerySet[Session]:
    return _base_qs().filter(business_id=business_id, instructor_id=employee_id).order_by("date", "start_time")


def sessions_for_client_user(*, business_id: UUID, user_id: int, params=None) -> QuerySet[Session]:
    """Sessions where one of the user's own client records holds a seat or a waitlist place."""
    own = Q(enrollments__client__user_id=user_id) | Q(waitlist__client__user_id=user_id)
    ids = Session.objects.filter(own, business_id=business_id).values("id")
    return list_sessions(business_id=business_id, params=params).filter(id__in=ids)
