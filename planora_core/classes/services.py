# planora_core/classes/services.py
from __future__ import annotations

import logging
from typing import Optional
from uuid import UUID

from django.db import transaction
from django.db.models import Count
from rest_framework.exceptions import NotFound, ValidationError

from planora_core.businesses.selectors import get_business
from planora_core.classes.models import ClassOffering, ClassType
from planora_core.common.api.exceptions import ConflictError
from planora_core.employees.models import Employee

logger = logging.getLogger(__name__)

_UPDATABLE = ("title", "description", "class_type", "duration_minutes", "max_capacity", "instructor_id")


def _validate_instructor(*, business_id: UUID, instructor_id: Optional[UUID]) -> None:
    if instructor_id is None:
        return
    if not Employee.objects.filter(id=instructor_id, business_id=business_id).exists():
        raise ValidationError({"instructor_id": "Instructor does not belong to this business."})


def _validate_capacity(value) -> int:
    try:
        capacity = int(value)
    except (TypeError, ValueError):
        raise ValidationError({"max_capacity": "A positive integer is required."})
    if capacity < 1:
        raise ValidationError({"max_capacity": "A positive integer is required."})
    return capacity


def _fill_waitlists(*, class_id: UUID) -> None:
    """New seats go to the clients already waiting on this class's open sessions."""
    from planora_core.scheduling.constants import OPEN_SESSION_STATUSES
    from planora_core.scheduling.models import Session
    from planora_core.scheduling.services import SessionService

    session_ids = (
        Session.objects.filter(class_offering_id=class_id, status__in=OPEN_SESSION_STATUSES, waitlist__isnull=False)
        .distinct()
        .values_list("id", flat=True)
    )
    for session_id in list(session_ids):
        promoted = SessionService.fill_from_waitlist(session_id=session_id)
        if promoted:
            logger.info("class %s: %s waitlisted client(s) promoted on session %s", class_id, len(promoted), session_id)


class ClassService:
    @staticmethod
    @transaction.atomic
    def create(
        *,
        business_id: UUID,
        title: str,
        max_capacity: int,
        class_type: str = ClassType.GROUP,
        instructor_id: Optional[UUID] = None,
        description: str = "",
        duration_minutes: int = 30,
    ) -> ClassOffering:
        get_business(business_id=business_id)

        title = (title or "").strip()
        if not title:
            raise ValidationError({"title": "This field is required."})
        if class_type not in ClassType.values:
            raise ValidationError({"class_type": f"Invalid class type. Allowed: {list(ClassType.values)}"})
        _validate_instructor(business_id=business_id, instructor_id=instructor_id)

        return ClassOffering.objects.create(
            business_id=business_id,
            title=title,
            description=description or "",
            class_type=class_type,
            duration_minutes=duration_minutes,
            max_capacity=_validate_capacity(max_capacity),
            instructor_id=instructor_id,
        )

    @staticmethod
    @transaction.atomic
    def update(*, business_id: UUID, class_id: UUID, data: dict) -> ClassOffering:
        from planora_core.scheduling.models import Session

        c = ClassOffering.objects.select_for_update().filter(id=class_id, business_id=business_id).first()
        if c is None:
            raise NotFound("Class not found")

        changes = {k: data[k] for k in _UPDATABLE if k in data}
        if "class_type" in changes and changes["class_type"] not in ClassType.values:
            raise ValidationError({"class_type": f"Invalid class type. Allowed: {list(ClassType.values)}"})
        if "instructor_id" in changes:
            _validate_instructor(business_id=business_id, instructor_id=changes["instructor_id"])

        if "max_capacity" in changes:
            changes["max_capacity"] = _validate_capacity(changes["max_capacity"])
            busiest = (
                Session.objects.filter(class_offering_id=c.id)
                .annotate(n=Count("enrollments"))
                .order_by("-n")
                .values_list("n", flat=True)
                .first()
            ) or 0
            if changes["max_capacity"] < busiest:
                raise ConflictError(
                    f"Capacity cannot drop below the {busiest} client(s) already enrolled in a session of this class."
                )

        previous_capacity = c.max_capacity
        for name, value in changes.items():
            setattr(c, name, value)
        if changes:
            c.save(update_fields=[*changes.keys(), "updated_at"])

        if c.max_capacity > previous_capacity:
            _fill_waitlists(class_id=c.id)
        return c

    @staticmethod
    @transaction.atomic
    def deactivate(*, business_id: UUID, class_id: UUID) -> ClassOffering:
        c = ClassOffering.objects.select_for_update().filter(id=class_id, business_id=business_id).first()
        if c is None:
            raise NotFound("Class not found")
        if c.is_active:
            c.is_active = False
            c.save(update_fields=["is_active", "updated_at"])
        return c
