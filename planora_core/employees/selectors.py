# planora_core/employees/selectors.py
from __future__ import annotations

from typing import Optional
from uuid import UUID

from django.core.exceptions import ValidationError as DjangoValidationError
from django.db.models import QuerySet
from rest_framework.exceptions import NotFound

from planora_core.employees.models import Employee, EmployeeStatus


def list_employees(*, business_id: UUID, params=None) -> QuerySet[Employee]:
    params = params or {}
    qs = Employee.objects.filter(business_id=business_id).select_related("user")

    status = params.get("status")
    if status:
        qs = qs.filter(status=status)

    if params.get("active") in ("1", "true", "True"):
        qs = qs.filter(is_active=True)

    return qs.order_by("last_name", "first_name")


def list_pending_employees(*, business_id: UUID) -> QuerySet[Employee]:
    return (
        Employee.objects.filter(business_id=business_id, status=EmployeeStatus.PENDING)
        .select_related("user")
        .order_by("-created_at")
    )


def get_employee(*, business_id: UUID, employee_id: UUID) -> Employee:
    try:
        return Employee.objects.select_related("user").get(id=employee_id, business_id=business_id)
    except (Employee.DoesNotExist, ValueError, DjangoValidationError):
        raise NotFound("Employee not found")


def employee_for_user(*, business_id: UUID, user_id: int) -> Optional[Employee]:
    return Employee.objects.filter(business_id=business_id, user_id=user_id, is_active=True).first()
