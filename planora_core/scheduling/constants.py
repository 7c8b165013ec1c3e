# planora_core/scheduling/constants.py
from django.db import models


class SessionStatus(models.TextChoices):
    SCHEDULED = "scheduled", "Scheduled"
    CONFIRMED = "confirmed", "Confirmed"
    CANCELLED = "cancelled", "Cancelled"
    COMPLETED = "completed", "Completed"
    NO_SHOW = "no-show", "No-show"


class EnrollmentStatus(models.TextChoices):
    ENROLLED = "enrolled", "Enrolled"
    CONFIRMED = "confirmed", "Confirmed"
    CANCELLED = "cancelled", "Cancelled"
    NO_SHOW = "no-show", "No-show"
    COMPLETED = "completed", "Completed"


class DayOfWeek(models.TextChoices):
    MONDAY = "monday", "Monday"
    TUESDAY = "tuesday", "Tuesday"
    WEDNESDAY = "wednesday", "Wednesday"
    THURSDAY = "thursday", "Thursday"
    FRIDAY = "friday", "Friday"
    SATURDAY = "saturday", "Saturday"
    SUNDAY = "sunday", "Sunday"


class RecurrenceFrequency(models.TextChoices):
    WEEKLY = "weekly", "Weekly"
    BI_WEEKLY = "bi-weekly", "Bi-weekly"
    MONTHLY = "monthly", "Monthly"


# Statuses in which a session still takes bookings / counts as upcoming.
OPEN_SESSION_STATUSES = (SessionStatus.SCHEDULED, SessionStatus.CONFIRMED)

SESSION_TRANSITIONS: dict[str, frozenset[str]] = {
    SessionStatus.SCHEDULED: frozenset({SessionStatus.CONFIRMED, SessionStatus.CANCELLED}),
    SessionStatus.CONFIRMED: frozenset({SessionStatus.CANCELLED, SessionStatus.COMPLETED, SessionStatus.NO_SHOW}),
    SessionStatus.CANCELLED: frozenset(),
    SessionStatus.COMPLETED: frozenset(),
    SessionStatus.NO_SHOW: frozenset(),
}

# Cancelling a roster slot goes through cancel_enrollment (it frees the seat).
ENROLLMENT_TRANSITIONS: dict[str, frozenset[str]] = {
    EnrollmentStatus.ENROLLED: frozenset(
        {EnrollmentStatus.CONFIRMED, EnrollmentStatus.COMPLETED, EnrollmentStatus.NO_SHOW}
    ),
    EnrollmentStatus.CONFIRMED: frozenset({EnrollmentStatus.COMPLETED, EnrollmentStatus.NO_SHOW}),
    EnrollmentStatus.CANCELLED: frozenset(),
    EnrollmentStatus.COMPLETED: frozenset(),
    EnrollmentStatus.NO_SHOW: frozenset(),
}
