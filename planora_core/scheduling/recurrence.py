# planora_core/scheduling/recurrence.py
"""
Date projection for recurring sessions.

A session without an explicit date but with a day_of_week projects onto the
next occurrence of that weekday, today included.
"""
from __future__ import annotations

import logging
from datetime import date, timedelta
from typing import Optional

from django.utils import timezone

from planora_core.scheduling.constants import DayOfWeek

logger = logging.getLogger(__name__)

# Index matches date.weekday() (monday == 0).
WEEKDAYS: tuple[str, ...] = (
    DayOfWeek.MONDAY,
    DayOfWeek.TUESDAY,
    DayOfWeek.WEDNESDAY,
    DayOfWeek.THURSDAY,
    DayOfWeek.FRIDAY,
    DayOfWeek.SATURDAY,
    DayOfWeek.SUNDAY,
)


def days_until(target_weekday: int, current_weekday: int) -> int:
    """0 means today; never 7."""
    return (target_weekday - current_weekday + 7) % 7


def next_occurrence(day_of_week: str, *, today: Optional[date] = None) -> date:
    today = today or timezone.localdate()
    try:
        target = WEEKDAYS.index(str(day_of_week).lower())
    except ValueError:
        raise ValueError(f"Unknown day_of_week: {day_of_week!r}")
    return today + timedelta(days=days_until(target, today.weekday()))


def is_unschedulable(session) -> bool:
    return session.date is None and not session.day_of_week


def projected_date(session, *, today: Optional[date] = None) -> Optional[date]:
    """
    The concrete date a session happens on:
    - dated session -> its date
    - day_of_week session -> next occurrence (None once recurrence_end_date has passed)
    - recurring without day_of_week -> None (unschedulable, logged)
    """
    if session.date is not None:
        return session.date

    if not session.day_of_week:
        if session.is_recurring:
            logger.warning("recurring session %s has no day_of_week; cannot project a date", session.pk)
        return None

    occurrence = next_occurrence(session.day_of_week, today=today)
    end = getattr(session, "recurrence_end_date", None)
    if end is not None and occurrence > end:
        return None
    return occurrence
