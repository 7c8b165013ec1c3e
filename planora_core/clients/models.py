# planora_core/clients/models.py
from __future__ import annotations

from django.conf import settings
from django.db import models
from django.db.models import Q
from django.utils import timezone

from planora_core.common.models import BusinessScopedModel


class Relationship(models.TextChoices):
    SELF = "self", "Self"
    CHILD = "child", "Child"
    SPOUSE = "spouse", "Spouse"
    DEPENDENT = "dependent", "Dependent"
    OTHER = "other", "Other"


MEMBER_RELATIONSHIPS = (
    Relationship.CHILD,
    Relationship.SPOUSE,
    Relationship.DEPENDENT,
    Relationship.OTHER,
)


class ClientCatchUpStatus(models.TextChoices):
    PENDING = "pending", "Pending"
    APPROVED = "approved", "Approved"
    REJECTED = "rejected", "Rejected"


class Client(BusinessScopedModel):
    """
    A person receiving services, scoped to (user, business).

    One login may own several Client rows within a business: exactly one primary
    (the account owner, relationship=self) plus any number of members (dependents)
    with is_primary=False. Removal is a soft is_active flip.
    """

    user = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name="client_records")

    is_primary = models.BooleanField(default=False)
    relationship = models.CharField(max_length=16, choices=Relationship.choices, default=Relationship.SELF)
    added_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        null=True,
        blank=True,
        on_delete=models.SET_NULL,
        related_name="+",
    )

    first_name = models.CharField(max_length=120)
    last_name = models.CharField(max_length=120)
    phone = models.CharField(max_length=32, blank=True)
    date_of_birth = models.DateField(null=True, blank=True)

    emergency_contact = models.JSONField(default=dict, blank=True)
    medical_info = models.JSONField(default=dict, blank=True)
    address = models.JSONField(default=dict, blank=True)
    preferences = models.JSONField(default=dict, blank=True)

    is_active = models.BooleanField(default=True)
    joined_date = models.DateTimeField(default=timezone.now)
    last_activity = models.DateTimeField(default=timezone.now)

    cancellation_count = models.PositiveIntegerField(default=0)
    has_cancelled_before = models.BooleanField(default=False)
    catch_up_approval_status = models.CharField(
        max_length=16,
        choices=ClientCatchUpStatus.choices,
        null=True,
        blank=True,
    )
    catch_up_approved_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        null=True,
        blank=True,
        on_delete=models.SET_NULL,
        related_name="+",
    )
    catch_up_approved_at = models.DateTimeField(null=True, blank=True)

    class Meta:
        db_table = "clients_client"
        constraints = [
            models.UniqueConstraint(
                fields=["user", "business"],
                condition=Q(is_primary=True),
                name="uq_client_single_primary",
            ),
        ]
        indexes = [
            models.Index(fields=["business", "is_active"]),
            models.Index(fields=["user", "business"]),
        ]

    def __str__(self) -> str:
        kind = "primary" if self.is_primary else self.relationship
        return f"{self.first_name} {self.last_name} ({kind})"

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()
