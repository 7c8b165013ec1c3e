# planora_core/scheduling/models.py
from __future__ import annotations

from django.db import models
from django.utils import timezone

from planora_core.common.models import BusinessScopedModel
from planora_core.scheduling.constants import (
    DayOfWeek,
    EnrollmentStatus,
    RecurrenceFrequency,
    SessionStatus,
)


class Session(BusinessScopedModel):
    """
    A scheduled occurrence of a ClassOffering: dated (date set) or recurring
    (day_of_week + is_recurring).

    The roster (SessionEnrollment) and the waitlist (WaitlistEntry) are child
    tables; both are only written by SessionService while this row is locked,
    and every such write bumps version.
    """

    class_offering = models.ForeignKey(
        "classes.ClassOffering",
        on_delete=models.RESTRICT,
        related_name="sessions",
    )
    instructor = models.ForeignKey(
        "employees.Employee",
        null=True,
        blank=True,
        on_delete=models.SET_NULL,
        related_name="sessions",
    )

    date = models.DateField(null=True, blank=True)
    start_time = models.TimeField()
    end_time = models.TimeField()

    day_of_week = models.CharField(max_length=10, choices=DayOfWeek.choices, blank=True)
    is_recurring = models.BooleanField(default=False)
    recurrence_frequency = models.CharField(max_length=16, choices=RecurrenceFrequency.choices, blank=True)
    recurrence_end_date = models.DateField(null=True, blank=True)

    status = models.CharField(
        max_length=16,
        choices=SessionStatus.choices,
        default=SessionStatus.SCHEDULED,
        db_index=True,
    )
    notes = models.TextField(blank=True)

    # True only while a seat freed by a cancellation remains unfilled.
    is_available_for_catch_up = models.BooleanField(default=False)

    version = models.PositiveIntegerField(default=0)

    class Meta:
        db_table = "scheduling_session"
        indexes = [
            models.Index(fields=["business", "date"]),
            models.Index(fields=["instructor", "date"]),
            models.Index(fields=["class_offering", "date"]),
            models.Index(fields=["business", "is_available_for_catch_up"]),
        ]

    def __str__(self) -> str:
        when = self.date.isoformat() if self.date else (self.day_of_week or "unscheduled")
        return f"{self.class_offering_id} @ {when} {self.start_time}"


class SessionEnrollment(models.Model):
    """One roster slot. Insertion order (id) is the roster order."""

    session = models.ForeignKey(Session, on_delete=models.CASCADE, related_name="enrollments")
    client = models.ForeignKey("clients.Client", on_delete=models.CASCADE, related_name="enrollments")

    enrollment_date = models.DateTimeField(default=timezone.now)
    status = models.CharField(
        max_length=16,
        choices=EnrollmentStatus.choices,
        default=EnrollmentStatus.ENROLLED,
    )
    is_catch_up = models.BooleanField(default=False)

    class Meta:
        db_table = "scheduling_session_enrollment"
        ordering = ["id"]
        constraints = [
            models.UniqueConstraint(fields=["session", "client"], name="uq_session_enrollment_client"),
        ]

    def __str__(self) -> str:
        return f"{self.client_id} in {self.session_id} ({self.status})"


class WaitlistEntry(models.Model):
    """FIFO by (added_date, id)."""

    session = models.ForeignKey(Session, on_delete=models.CASCADE, related_name="waitlist")
    client = models.ForeignKey("clients.Client", on_delete=models.CASCADE, related_name="waitlist_entries")

    added_date = models.DateTimeField(default=timezone.now)

    class Meta:
        db_table = "scheduling_waitlist_entry"
        ordering = ["added_date", "id"]
        constraints = [
            models.UniqueConstraint(fields=["session", "client"], name="uq_waitlist_client"),
        ]

    def __str__(self) -> str:
        return f"{self.client_id} waiting on {self.session_id}"
