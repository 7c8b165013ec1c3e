# planora_core/employees/services.py
from __future__ import annotations

import logging
from typing import Optional
from uuid import UUID

from django.db import transaction
from django.utils import timezone
from rest_framework.exceptions import NotFound, ValidationError

from planora_core.businesses.selectors import get_business
from planora_core.common.api.exceptions import ConflictError
from planora_core.employees.models import Employee, EmployeeStatus
from planora_core.notifications import email as notifier

logger = logging.getLogger(__name__)

DEFAULT_REJECTION_REASON = "No reason provided"


class EmployeeService:
    @staticmethod
    @transaction.atomic
    def create(
        *,
        business_id: UUID,
        user_id: int,
        first_name: str,
        last_name: str,
        status: str = EmployeeStatus.PENDING,
        **extra,
    ) -> Employee:
        get_business(business_id=business_id)

        if not (first_name or "").strip():
            raise ValidationError({"first_name": "This field is required."})
        if not (last_name or "").strip():
            raise ValidationError({"last_name": "This field is required."})
        if Employee.objects.filter(business_id=business_id, user_id=user_id).exists():
            raise ConflictError("Employee record already exists for this user")

        allowed_extra = {"phone", "bio", "specializations", "hourly_rate", "hire_date"}
        fields = {k: v for k, v in extra.items() if k in allowed_extra and v is not None}

        return Employee.objects.create(
            business_id=business_id,
            user_id=user_id,
            first_name=first_name.strip(),
            last_name=last_name.strip(),
            status=status,
            **fields,
        )

    @staticmethod
    def _lock_with_status(*, business_id: UUID, employee_id: UUID, status: str, not_found: str) -> Employee:
        e = (
            Employee.objects.select_for_update()
            .select_related("user")
            .filter(id=employee_id, business_id=business_id, status=status)
            .first()
        )
        if e is None:
            raise NotFound(not_found)
        return e

    @staticmethod
    @transaction.atomic
    def approve(*, business_id: UUID, employee_id: UUID, actor_user_id: int) -> Employee:
        e = EmployeeService._lock_with_status(
            business_id=business_id,
            employee_id=employee_id,
            status=EmployeeStatus.PENDING,
            not_found="Pending employee not found",
        )
        e.status = EmployeeStatus.APPROVED
        e.approved_by_id = actor_user_id
        e.approved_at = timezone.now()
        e.rejection_reason = ""
        e.save(update_fields=["status", "approved_by", "approved_at", "rejection_reason", "updated_at"])

        notifier.send_employee_status_email(e.user.email, get_business(business_id=business_id).name, e.status)
        logger.info("employee %s approved by %s", e.id, actor_user_id)
        return e

    @staticmethod
    @transaction.atomic
    def reject(
        *,
        business_id: UUID,
        employee_id: UUID,
        actor_user_id: int,
        reason: Optional[str] = None,
    ) -> Employee:
        e = EmployeeService._lock_with_status(
            business_id=business_id,
            employee_id=employee_id,
            status=EmployeeStatus.PENDING,
            not_found="Pending employee not found",
        )
        e.status = EmployeeStatus.REJECTED
        e.approved_by_id = actor_user_id
        e.approved_at = timezone.now()
        e.rejection_reason = (reason or "").strip() or DEFAULT_REJECTION_REASON
        e.save(update_fields=["status", "approved_by", "approved_at", "rejection_reason", "updated_at"])

        notifier.send_employee_status_email(
            e.user.email, get_business(business_id=business_id).name, e.status, e.rejection_reason
        )
        logger.info("employee %s rejected by %s", e.id, actor_user_id)
        return e

    @staticmethod
    @transaction.atomic
    def suspend(*, business_id: UUID, employee_id: UUID, actor_user_id: int) -> Employee:
        e = EmployeeService._lock_with_status(
            business_id=business_id,
            employee_id=employee_id,
            status=EmployeeStatus.APPROVED,
            not_found="Approved employee not found",
        )
        e.status = EmployeeStatus.SUSPENDED
        e.save(update_fields=["status", "updated_at"])
        logger.info("employee %s suspended by %s", e.id, actor_user_id)
        return e
