import pytest
from rest_framework.exceptions import NotFound

from planora_core.conftest import jwt_client
from planora_core.notifications.models import NotificationType
from planora_core.notifications.services import NotificationService

pytestmark = pytest.mark.django_db


def test_only_cancellations_carry_catch_up_status(business):
    cancellation = NotificationService.record(business_id=business.id, type=NotificationType.CANCELLATION, message="x")
    booking = NotificationService.record(business_id=business.id, type=NotificationType.BOOKING, message="y")

    assert cancellation.catch_up_approval_status == "pending"
    assert booking.catch_up_approval_status is None
    assert cancellation.is_credit_available is False


def test_mark_read_is_business_scoped(business, other_business):
    n = NotificationService.record(business_id=business.id, type=NotificationType.NOTE, message="hello")

    with pytest.raises(NotFound):
        NotificationService.mark_read(business_id=other_business.id, notification_id=n.id)

    assert NotificationService.mark_read(business_id=business.id, notification_id=n.id).is_read is True


def test_feed_filters_unread(admin_user, business):
    first = NotificationService.record(business_id=business.id, type=NotificationType.NOTE, message="one")
    NotificationService.record(business_id=business.id, type=NotificationType.NOTE, message="two")
    c = jwt_client(admin_user, business)

    assert c.post(f"/api/v1/notifications/{first.id}/read/").status_code == 200

    res = c.get("/api/v1/notifications/?unread=1")
    assert res.status_code == 200
    assert [n["message"] for n in res.json()["results"]] == ["two"]


def test_feed_is_paginated(admin_user, business):
    for i in range(3):
        NotificationService.record(business_id=business.id, type=NotificationType.NOTE, message=f"n{i}")

    body = jwt_client(admin_user, business).get("/api/v1/notifications/?page_size=2").json()
    assert body["count"] == 3
    assert body["page"] == 1
    assert len(body["results"]) == 2
    assert body["next"] is not None
