from __future__ import annotations

from uuid import UUID

from django.db.models import QuerySet

from planora_core.notifications.models import Notification


def list_notifications(*, business_id: UUID, params=None) -> QuerySet[Notification]:
    params = params or {}
    qs = Notification.objects.filter(business_id=business_id).select_related("client", "session")

    ntype = params.get("type")
    if ntype:
        qs = qs.filter(type=ntype)

    unread = params.get("unread")
    if unread in ("1", "true", "True"):
        qs = qs.filter(is_read=False)

    return qs.order_by("-created_at")
