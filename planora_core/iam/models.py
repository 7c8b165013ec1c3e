# planora_core/iam/models.py
import uuid
from django.conf import settings
from django.db import models
from django.utils import timezone

from planora_core.common.models import TimeStampedModel


class UserRole(models.TextChoices):
    SUPER_ADMIN = "super-admin", "Super admin"
    ADMIN = "admin", "Admin"
    EMPLOYEE = "employee", "Employee"
    CLIENT = "client", "Client"


class ClientStatus(models.TextChoices):
    PENDING = "pending", "Pending"
    APPROVED = "approved", "Approved"
    SUSPENDED = "suspended", "Suspended"


class BusinessRole(models.TextChoices):
    ADMIN = "admin", "Admin"
    INSTRUCTOR = "instructor", "Instructor"
    EMPLOYEE = "employee", "Employee"
    CLIENT = "client", "Client"


class UserProfile(models.Model):
    """
    Planora user profile anchored to Django's AUTH_USER_MODEL.

    role is the platform role (token claim); client_status only matters for clients.
    business is the legacy single-business pointer; current_business is the
    active tenant context maintained by the gate and switch_user_business.
    """
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    user = models.OneToOneField(settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name="planora_profile")
    role = models.CharField(max_length=16, choices=UserRole.choices, default=UserRole.CLIENT, db_index=True)
    client_status = models.CharField(max_length=16, choices=ClientStatus.choices, null=True, blank=True)

    business = models.ForeignKey(
        "businesses.Business",
        null=True,
        blank=True,
        on_delete=models.SET_NULL,
        related_name="legacy_profiles",
    )
    current_business = models.ForeignKey(
        "businesses.Business",
        null=True,
        blank=True,
        on_delete=models.SET_NULL,
        related_name="+",
    )

    phone = models.CharField(max_length=32, blank=True)

    created_at = models.DateTimeField(auto_now_add=True, db_index=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = "iam_user_profile"
        indexes = [
            models.Index(fields=["role"]),
        ]

    def __str__(self) -> str:
        return f"{self.user.get_username()} ({self.role})"


class UserBusiness(TimeStampedModel):
    """
    User <-> Business association with a per-business role.
    is_active doubles as the approval flag: inactive = pending join request.
    At most one row per (user, business); re-requests reactivate the row.
    Permission flags are derived from role by the association manager.
    """
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    user = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name="business_associations")
    business = models.ForeignKey("businesses.Business", on_delete=models.CASCADE, related_name="user_associations")

    role = models.CharField(max_length=16, choices=BusinessRole.choices)
    is_active = models.BooleanField(default=True)
    joined_at = models.DateTimeField(default=timezone.now)

    can_manage_clients = models.BooleanField(default=False)
    can_manage_instructors = models.BooleanField(default=False)
    can_manage_classes = models.BooleanField(default=False)
    can_manage_sessions = models.BooleanField(default=False)
    can_view_reports = models.BooleanField(default=False)

    PERMISSION_FIELDS = (
        "can_manage_clients",
        "can_manage_instructors",
        "can_manage_classes",
        "can_manage_sessions",
        "can_view_reports",
    )

    class Meta:
        db_table = "iam_user_business"
        constraints = [
            models.UniqueConstraint(fields=["user", "business"], name="uq_user_business"),
        ]
        indexes = [
            models.Index(fields=["user", "is_active"]),
            models.Index(fields=["business", "is_active"]),
        ]

    def __str__(self) -> str:
        state = "active" if self.is_active else "pending"
        return f"{self.user_id}@{self.business_id} {self.role} ({state})"

    @property
    def permissions(self) -> dict[str, bool]:
        return {name: bool(getattr(self, name)) for name in self.PERMISSION_FIELDS}
