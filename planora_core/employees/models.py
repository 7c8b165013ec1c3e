# planora_core/employees/models.py
from __future__ import annotations

from django.conf import settings
from django.db import models

from planora_core.common.models import BusinessScopedModel


class EmployeeStatus(models.TextChoices):
    PENDING = "pending", "Pending"
    APPROVED = "approved", "Approved"
    REJECTED = "rejected", "Rejected"
    SUSPENDED = "suspended", "Suspended"


class Employee(BusinessScopedModel):
    """
    A person providing services (instructor/staff) within one business.
    status gates dashboard access; only approved employees may teach.
    """

    user = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name="employee_records")

    first_name = models.CharField(max_length=120)
    last_name = models.CharField(max_length=120)
    phone = models.CharField(max_length=32, blank=True)
    bio = models.TextField(blank=True)
    specializations = models.JSONField(default=list, blank=True)
    hourly_rate = models.DecimalField(max_digits=8, decimal_places=2, null=True, blank=True)
    hire_date = models.DateField(null=True, blank=True)

    is_active = models.BooleanField(default=True)
    status = models.CharField(
        max_length=16,
        choices=EmployeeStatus.choices,
        default=EmployeeStatus.PENDING,
        db_index=True,
    )
    approved_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        null=True,
        blank=True,
        on_delete=models.SET_NULL,
        related_name="+",
    )
    approved_at = models.DateTimeField(null=True, blank=True)
    rejection_reason = models.CharField(max_length=500, blank=True)

    class Meta:
        db_table = "employees_employee"
        constraints = [
            models.UniqueConstraint(fields=["user", "business"], name="uq_employee_user_business"),
        ]
        indexes = [
            models.Index(fields=["business", "status"]),
        ]

    def __str__(self) -> str:
        return f"{self.first_name} {self.last_name} ({self.status})"

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()
