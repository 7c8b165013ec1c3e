# planora_core/notifications/models.py
from __future__ import annotations

from django.conf import settings
from django.db import models

from planora_core.common.models import BusinessScopedModel


class NotificationType(models.TextChoices):
    CANCELLATION = "cancellation", "Cancellation"
    BOOKING = "booking", "Booking"
    REGISTRATION = "registration", "Registration"
    NOTE = "note", "Note"
    CATCH_UP_APPROVAL_REQUEST = "catch-up-approval-request", "Catch-up approval request"


class CatchUpApprovalStatus(models.TextChoices):
    PENDING = "pending", "Pending"
    APPROVED = "approved", "Approved"
    REJECTED = "rejected", "Rejected"


class Notification(BusinessScopedModel):
    """
    Append-only record of domain events within a business.

    For type=cancellation this is the only durable cancellation history and carries
    its own catch-up approval lifecycle (independent of the Client-level switch).
    consumed_at / consumed_by_session mark a credit that has been spent on a booking.
    """

    type = models.CharField(max_length=32, choices=NotificationType.choices, db_index=True)
    message = models.CharField(max_length=500)

    client = models.ForeignKey(
        "clients.Client",
        null=True,
        blank=True,
        on_delete=models.SET_NULL,
        related_name="notifications",
    )
    session = models.ForeignKey(
        "scheduling.Session",
        null=True,
        blank=True,
        on_delete=models.SET_NULL,
        related_name="notifications",
    )

    is_read = models.BooleanField(default=False)

    catch_up_approval_status = models.CharField(
        max_length=16,
        choices=CatchUpApprovalStatus.choices,
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

    consumed_at = models.DateTimeField(null=True, blank=True)
    consumed_by_session = models.ForeignKey(
        "scheduling.Session",
        null=True,
        blank=True,
        on_delete=models.SET_NULL,
        related_name="consumed_credits",
    )

    class Meta:
        db_table = "notifications_notification"
        ordering = ["-created_at"]
        indexes = [
            models.Index(fields=["business", "created_at"]),
            models.Index(fields=["business", "is_read"]),
            models.Index(fields=["business", "type", "catch_up_approval_status"]),
        ]

    def __str__(self) -> str:
        return f"{self.type}: {self.message[:40]}"

    @property
    def is_credit_available(self) -> bool:
        return (
            self.type == NotificationType.CANCELLATION
            and self.catch_up_approval_status == CatchUpApprovalStatus.APPROVED
            and self.consumed_at is None
        )
