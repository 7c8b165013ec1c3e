# planora_core/notifications/services.py
from __future__ import annotations

from typing import Optional
from uuid import UUID

from django.db import transaction
from rest_framework.exceptions import NotFound

from planora_core.notifications.models import CatchUpApprovalStatus, Notification, NotificationType


class NotificationService:
    """
    Notifications are append-only: rows are created and flagged (read, catch-up
    decision, consumed), never edited in content or deleted outside the business cascade.
    """

    @staticmethod
    def record(
        *,
        business_id: UUID,
        type: str,
        message: str,
        client_id: Optional[UUID] = None,
        session_id: Optional[UUID] = None,
    ) -> Notification:
        catch_up_status = CatchUpApprovalStatus.PENDING if type == NotificationType.CANCELLATION else None
        return Notification.objects.create(
            business_id=business_id,
            type=type,
            message=message[:500],
            client_id=client_id,
            session_id=session_id,
            catch_up_approval_status=catch_up_status,
        )

    @staticmethod
    @transaction.atomic
    def mark_read(*, business_id: UUID, notification_id: UUID) -> Notification:
        try:
            n = Notification.objects.select_for_update().get(id=notification_id, business_id=business_id)
        except Notification.DoesNotExist:
            raise NotFound("Notification not found")

        if not n.is_read:
            n.is_read = True
            n.save(update_fields=["is_read", "updated_at"])
        return n
