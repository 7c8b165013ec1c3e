# planora_core/businesses/services.py
from __future__ import annotations

import logging
from typing import Optional
from uuid import UUID

from django.contrib.auth import get_user_model
from django.db import transaction
from rest_framework.exceptions import ValidationError

from planora_core.businesses.models import Business, BusinessStatus
from planora_core.businesses.selectors import get_business
from planora_core.notifications import email as notifier

logger = logging.getLogger(__name__)


class BusinessService:
    """
    All Business mutations live here (write-model boundary).
    Status transitions are super-admin actions; the view layer enforces the role.
    """

    @staticmethod
    @transaction.atomic
    def create(
        *,
        name: str,
        email: str,
        business_type: str,
        admin_user_id: Optional[int] = None,
        status: str = BusinessStatus.PENDING,
        **extra,
    ) -> Business:
        name = (name or "").strip()
        email = (email or "").strip().lower()
        business_type = (business_type or "").strip()

        if not name:
            raise ValidationError({"name": "This field is required."})
        if not email:
            raise ValidationError({"email": "This field is required."})
        if not business_type:
            raise ValidationError({"business_type": "This field is required."})
        if status not in BusinessStatus.values:
            raise ValidationError({"status": f"Invalid status. Allowed: {list(BusinessStatus.values)}"})
        if Business.objects.filter(email__iexact=email).exists():
            raise ValidationError({"email": "A business with this email already exists."})

        allowed_extra = {"phone", "address", "description", "website", "subscription_tier", "settings"}
        fields = {k: v for k, v in extra.items() if k in allowed_extra and v is not None}

        return Business.objects.create(
            name=name,
            email=email,
            business_type=business_type,
            admin_user_id=admin_user_id,
            status=status,
            **fields,
        )

    @staticmethod
    def status_message(*, previous: str, new: str) -> str:
        if new == BusinessStatus.ACTIVE and previous == BusinessStatus.PENDING:
            return "Business activated successfully"
        if new == BusinessStatus.ACTIVE and previous == BusinessStatus.SUSPENDED:
            return "Business reactivated successfully"
        if new == BusinessStatus.SUSPENDED:
            return "Business suspended successfully"
        if new == BusinessStatus.PENDING:
            return "Business status set to pending"
        return "Business updated successfully"

    @staticmethod
    @transaction.atomic
    def set_status(*, business_id: UUID, status: str, notes: Optional[str] = None) -> Business:
        if status not in BusinessStatus.values:
            raise ValidationError({"status": f"Invalid status. Allowed: {list(BusinessStatus.values)}"})

        get_business(business_id=business_id)
        b = Business.objects.select_for_update().get(id=business_id)
        previous = b.status

        # idempotent no-op
        if previous == status and b.is_active:
            return b

        b.status = status
        # status changes always revive the row; is_active=False is reserved for deactivation
        b.is_active = True
        b.save(update_fields=["status", "is_active", "updated_at"])

        if status == BusinessStatus.ACTIVE and previous == BusinessStatus.PENDING:
            notifier.send_business_activation_email(b.email, b.name)
        elif status == BusinessStatus.ACTIVE and previous == BusinessStatus.SUSPENDED:
            notifier.send_business_reactivation_email(b.email, b.name)
        elif status == BusinessStatus.SUSPENDED and previous == BusinessStatus.PENDING:
            notifier.send_business_rejection_email(
                b.email, b.name, notes or "Business application was not approved"
            )

        logger.info("business %s status %s -> %s", b.id, previous, status)
        return b

    @staticmethod
    def activate(*, business_id: UUID) -> Business:
        return BusinessService.set_status(business_id=business_id, status=BusinessStatus.ACTIVE)

    @staticmethod
    def suspend(*, business_id: UUID, notes: Optional[str] = None) -> Business:
        return BusinessService.set_status(business_id=business_id, status=BusinessStatus.SUSPENDED, notes=notes)

    @staticmethod
    @transaction.atomic
    def deactivate(*, business_id: UUID) -> Business:
        """
        Soft removal: flips is_active and locks out users whose legacy
        single-business pointer still targets this business.
        """
        from planora_core.iam.models import UserProfile

        get_business(business_id=business_id)
        b = Business.objects.select_for_update().get(id=business_id)
        if b.is_active:
            b.is_active = False
            b.save(update_fields=["is_active", "updated_at"])

        user_ids = UserProfile.objects.filter(business_id=b.id).values_list("user_id", flat=True)
        get_user_model().objects.filter(id__in=list(user_ids)).update(is_active=False)
        return b

    @staticmethod
    @transaction.atomic
    def permanently_delete(*, business_id: UUID) -> dict[str, int]:
        """
        Hard delete of a business and everything scoped to it.
        Users are never deleted (they may belong to other businesses); those whose
        legacy pointer targets this business are deactivated.
        """
        from planora_core.notifications.models import Notification
        from planora_core.classes.models import ClassOffering
        from planora_core.clients.models import Client
        from planora_core.employees.models import Employee
        from planora_core.iam.models import UserBusiness, UserProfile
        from planora_core.scheduling.models import Session

        b = get_business(business_id=business_id)

        counts = {
            "sessions": Session.objects.filter(business_id=b.id).count(),
            "classes": ClassOffering.objects.filter(business_id=b.id).count(),
            "clients": Client.objects.filter(business_id=b.id).count(),
            "employees": Employee.objects.filter(business_id=b.id).count(),
            "user_businesses": UserBusiness.objects.filter(business_id=b.id).count(),
            "notifications": Notification.objects.filter(business_id=b.id).count(),
        }

        legacy_user_ids = list(UserProfile.objects.filter(business_id=b.id).values_list("user_id", flat=True))
        counts["deactivated_users"] = get_user_model().objects.filter(id__in=legacy_user_ids).update(is_active=False)

        logger.warning("permanently deleting business %s (%s): %s", b.id, b.name, counts)
        b.delete()
        return counts
