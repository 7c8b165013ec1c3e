# planora_core/catchup/selectors.py
from __future__ import annotations

from uuid import UUID

from django.conf import settings
from django.db.models import QuerySet

from planora_core.clients.models import Client, ClientCatchUpStatus
from planora_core.notifications.models import CatchUpApprovalStatus, Notification, NotificationType
from planora_core.scheduling.models import Session
from planora_core.scheduling.selectors import catch_up_sessions


def available_credits(*, business_id: UUID, client_id: UUID) -> QuerySet[Notification]:
    return Notification.objects.filter(
        business_id=business_id,
        client_id=client_id,
        type=NotificationType.CANCELLATION,
        catch_up_approval_status=CatchUpApprovalStatus.APPROVED,
        consumed_at__isnull=True,
    ).order_by("created_at", "id")


def credit_count(*, business_id: UUID, client_id: UUID) -> int:
    return available_credits(business_id=business_id, client_id=client_id).count()


def list_catch_up_opportunities(*, client: Client) -> list[Session]:
    """Nothing until the client-level switch is approved, whatever the per-cancellation state."""
    if client.catch_up_approval_status != ClientCatchUpStatus.APPROVED:
        return []
    limit = getattr(settings, "PLANORA_CATCH_UP_OPPORTUNITY_LIMIT", 10)
    return list(catch_up_sessions(business_id=client.business_id, exclude_client_ids=[client.id])[:limit])


def catch_up_opportunities_for_user(*, business_id: UUID, user_id: int) -> list[Session]:
    """Union of the opportunities of the user's own client records; each record is gated on its own."""
    seen: dict[UUID, Session] = {}
    for client in Client.objects.filter(user_id=user_id, business_id=business_id, is_active=True).order_by("created_at"):
        for s in list_catch_up_opportunities(client=client):
            seen.setdefault(s.id, s)
    return sorted(seen.values(), key=lambda s: (s.date is None, s.date, s.start_time))


def list_pending_catch_up_approvals(*, business_id: UUID) -> QuerySet[Notification]:
    return (
        Notification.objects.filter(
            business_id=business_id,
            type=NotificationType.CANCELLATION,
            catch_up_approval_status=CatchUpApprovalStatus.PENDING,
        )
        .select_related("client", "session", "session__class_offering")
        .order_by("-created_at")
    )


def list_catch_up_requests(*, business_id: UUID, per_client: int = 5) -> list[dict]:
    """Clients that have cancelled before, each with their latest cancellations."""
    clients = (
        Client.objects.filter(business_id=business_id, has_cancelled_before=True)
        .select_related("user")
        .order_by("-last_activity")
    )

    items: list[dict] = []
    for c in clients:
        cancellations = (
            Notification.objects.filter(business_id=business_id, client_id=c.id, type=NotificationType.CANCELLATION)
            .select_related("session", "session__class_offering", "session__instructor")
            .order_by("-created_at")[:per_client]
        )
        items.append(
            {
                "client_id": str(c.id),
                "client_name": c.full_name,
                "email": c.user.email,
                "cancellation_count": c.cancellation_count,
                "catch_up_approval_status": c.catch_up_approval_status,
                "catch_up_approved_at": c.catch_up_approved_at,
                "available_credits": credit_count(business_id=business_id, client_id=c.id),
                "cancelled_sessions": [_cancellation_item(n) for n in cancellations],
            }
        )
    return items


def _cancellation_item(n: Notification) -> dict:
    s = n.session
    return {
        "notification_id": str(n.id),
        "session_id": str(s.id) if s else None,
        "class_title": s.class_offering.title if s else None,
        "instructor": s.instructor.full_name if s and s.instructor else None,
        "date": s.date if s else None,
        "start_time": s.start_time if s else None,
        "catch_up_approval_status": n.catch_up_approval_status,
        "consumed_at": n.consumed_at,
        "cancelled_at": n.created_at,
    }
