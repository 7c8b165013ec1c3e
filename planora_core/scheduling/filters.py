# planora_core/scheduling/filters.py
from __future__ import annotations

import django_filters

from planora_core.scheduling.constants import SessionStatus
from planora_core.scheduling.models import Session


class SessionFilter(django_filters.FilterSet):
    start_date = django_filters.DateFilter(field_name="date", lookup_expr="gte")
    end_date = django_filters.DateFilter(field_name="date", lookup_expr="lte")
    instructor = django_filters.UUIDFilter(field_name="instructor_id")
    class_offering = django_filters.UUIDFilter(field_name="class_offering_id")
    status = django_filters.ChoiceFilter(choices=SessionStatus.choices)
    is_recurring = django_filters.BooleanFilter()

    class Meta:
        model = Session
        fields = ["start_date", "end_date", "instructor", "class_offering", "status", "is_recurring"]
