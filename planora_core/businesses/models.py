# planora_core/businesses/models.py
import uuid
from django.conf import settings
from django.db import models


class BusinessStatus(models.TextChoices):
    PENDING = "pending", "Pending"
    ACTIVE = "active", "Active"
    SUSPENDED = "suspended", "Suspended"


class SubscriptionTier(models.TextChoices):
    BASIC = "basic", "Basic"
    PREMIUM = "premium", "Premium"
    ENTERPRISE = "enterprise", "Enterprise"


def default_business_settings() -> dict:
    return {
        "timezone": "America/New_York",
        "default_class_duration": 30,
        "allow_online_booking": True,
        "require_approval": False,
    }


class Business(models.Model):
    """
    Tenant root. Every scoped row hangs off a Business and is removed
    with it (cascade delete is the only hard delete in the system).

    status is the approval lifecycle (super-admin driven);
    is_active is the orthogonal deactivation flag.
    """

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    name = models.CharField(max_length=255)
    email = models.EmailField(unique=True)
    phone = models.CharField(max_length=32, blank=True)
    address = models.CharField(max_length=255, blank=True)
    business_type = models.CharField(max_length=64)
    description = models.TextField(blank=True)
    website = models.URLField(blank=True)

    admin_user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        null=True,
        blank=True,
        on_delete=models.SET_NULL,
        related_name="administered_businesses",
    )

    status = models.CharField(
        max_length=16,
        choices=BusinessStatus.choices,
        default=BusinessStatus.PENDING,
        db_index=True,
    )
    is_active = models.BooleanField(default=True)

    subscription_tier = models.CharField(
        max_length=16,
        choices=SubscriptionTier.choices,
        default=SubscriptionTier.BASIC,
    )
    settings = models.JSONField(default=default_business_settings, blank=True)

    created_at = models.DateTimeField(auto_now_add=True, db_index=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = "businesses_business"
        indexes = [
            models.Index(fields=["status"]),
            models.Index(fields=["is_active"]),
            models.Index(fields=["created_at"]),
        ]

    def __str__(self) -> str:
        return f"{self.name} ({self.status})"
