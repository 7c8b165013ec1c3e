# planora_core/classes/models.py
from __future__ import annotations

from django.core.validators import MinValueValidator
from django.db import models

from planora_core.common.models import BusinessScopedModel


class ClassType(models.TextChoices):
    PRIVATE = "private", "Private"
    GROUP = "group", "Group"


class ClassOffering(BusinessScopedModel):
    """A bookable offering; max_capacity bounds every session of it."""

    instructor = models.ForeignKey(
        "employees.Employee",
        null=True,
        blank=True,
        on_delete=models.SET_NULL,
        related_name="default_classes",
    )

    title = models.CharField(max_length=200)
    description = models.TextField(blank=True)
    class_type = models.CharField(max_length=16, choices=ClassType.choices, default=ClassType.GROUP)
    duration_minutes = models.PositiveIntegerField(default=30)
    max_capacity = models.PositiveIntegerField(default=1, validators=[MinValueValidator(1)])
    is_active = models.BooleanField(default=True)

    class Meta:
        db_table = "classes_class_offering"
        indexes = [
            models.Index(fields=["business", "is_active"]),
        ]

    def __str__(self) -> str:
        return f"{self.title} ({self.class_type}, cap {self.max_capacity})"
