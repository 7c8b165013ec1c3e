import datetime as dt

import pytest
from django.utils import timezone
from rest_framework.exceptions import NotFound, PermissionDenied, ValidationError

from planora_core.catchup.selectors import credit_count, list_catch_up_opportunities
from planora_core.catchup.services import CatchUpService
from planora_core.conftest import jwt_client
from planora_core.notifications.models import Notification, NotificationType
from planora_core.scheduling.models import Session
from planora_core.scheduling.services import SessionService

pytestmark = pytest.mark.django_db


@pytest.fixture
def staff(identity_for, employee_user, business, instructor):
    return identity_for(employee_user, business)


@pytest.fixture
def cancelled_credit(staff, session, client_record):
    """client_record enrolled in `session` and then cancelled: one pending credit."""
    SessionService.enroll_client(identity=staff, session_id=session.id, client_id=client_record.id)
    SessionService.cancel_enrollment(identity=staff, session_id=session.id, client_id=client_record.id)
    client_record.refresh_from_db()
    return Notification.objects.get(type=NotificationType.CANCELLATION, client=client_record)


@pytest.fixture
def freed_session(staff, business, class_offering, instructor, make_clients):
    """A later session of the same class with one seat given back."""
    s = Session.objects.create(
        business=business,
        class_offering=class_offering,
        instructor=instructor,
        date=timezone.localdate() + dt.timedelta(days=7),
        start_time=dt.time(10, 0),
        end_time=dt.time(10, 30),
    )
    a, b = make_clients(2)
    SessionService.enroll_client(identity=staff, session_id=s.id, client_id=a.id)
    SessionService.enroll_client(identity=staff, session_id=s.id, client_id=b.id)
    SessionService.cancel_enrollment(identity=staff, session_id=s.id, client_id=a.id)
    s.refresh_from_db()
    assert s.is_available_for_catch_up
    return s


def _approve_both(business, client, credit, admin_user):
    CatchUpService.approve_client(business_id=business.id, client_id=client.id, actor_user_id=admin_user.id)
    CatchUpService.approve_cancellation(business_id=business.id, notification_id=credit.id, actor_user_id=admin_user.id)


# ---------------------------------------------------------------------
# Event reactions
# ---------------------------------------------------------------------
def test_enrollment_records_booking_notification(staff, session, client_record):
    SessionService.enroll_client(identity=staff, session_id=session.id, client_id=client_record.id)

    n = Notification.objects.get(type=NotificationType.BOOKING, client=client_record)
    assert n.session_id == session.id
    assert n.catch_up_approval_status is None


def test_each_cancellation_counts(staff, session, client_record):
    for _ in range(2):
        SessionService.enroll_client(identity=staff, session_id=session.id, client_id=client_record.id)
        SessionService.cancel_enrollment(identity=staff, session_id=session.id, client_id=client_record.id)

    client_record.refresh_from_db()
    assert client_record.cancellation_count == 2
    assert Notification.objects.filter(type=NotificationType.CANCELLATION, client=client_record).count() == 2


# ---------------------------------------------------------------------
# Gates
# ---------------------------------------------------------------------
def test_client_approval_requires_a_prior_cancellation(client_record, business, admin_user):
    with pytest.raises(ValidationError):
        CatchUpService.approve_client(business_id=business.id, client_id=client_record.id, actor_user_id=admin_user.id)


def test_only_cancellation_notifications_can_be_approved(staff, session, client_record, business, admin_user):
    SessionService.enroll_client(identity=staff, session_id=session.id, client_id=client_record.id)
    booking = Notification.objects.get(type=NotificationType.BOOKING, client=client_record)

    with pytest.raises(NotFound):
        CatchUpService.approve_cancellation(business_id=business.id, notification_id=booking.id, actor_user_id=admin_user.id)


def test_credit_without_client_approval_grants_nothing(cancelled_credit, client_record, business, admin_user, freed_session, identity_for, client_user):
    CatchUpService.approve_cancellation(
        business_id=business.id, notification_id=cancelled_credit.id, actor_user_id=admin_user.id
    )
    assert credit_count(business_id=business.id, client_id=client_record.id) == 1

    client_record.refresh_from_db()
    assert list_catch_up_opportunities(client=client_record) == []

    with pytest.raises(PermissionDenied):
        CatchUpService.book_catch_up(
            identity=identity_for(client_user, business), session_id=freed_session.id, client_id=client_record.id
        )


def test_client_approval_without_credit_cannot_book(cancelled_credit, client_record, business, admin_user, freed_session, identity_for, client_user):
    CatchUpService.approve_client(business_id=business.id, client_id=client_record.id, actor_user_id=admin_user.id)
    client_record.refresh_from_db()

    assert freed_session.id in [s.id for s in list_catch_up_opportunities(client=client_record)]
    with pytest.raises(ValidationError):
        CatchUpService.book_catch_up(
            identity=identity_for(client_user, business), session_id=freed_session.id, client_id=client_record.id
        )


# ---------------------------------------------------------------------
# Booking
# ---------------------------------------------------------------------
def test_booking_consumes_one_credit(cancelled_credit, client_record, business, admin_user, freed_session, identity_for, client_user):
    _approve_both(business, client_record, cancelled_credit, admin_user)

    booking = CatchUpService.book_catch_up(
        identity=identity_for(client_user, business), session_id=freed_session.id, client_id=client_record.id
    )

    assert booking.enrollment.is_catch_up is True
    assert booking.credit.id == cancelled_credit.id

    cancelled_credit.refresh_from_db()
    assert cancelled_credit.consumed_at is not None
    assert cancelled_credit.consumed_by_session_id == freed_session.id
    assert credit_count(business_id=business.id, client_id=client_record.id) == 0

    freed_session.refresh_from_db()
    assert freed_session.is_available_for_catch_up is False
    assert freed_session.enrollments.count() == 2


def test_spent_credit_cannot_be_decided_again(cancelled_credit, client_record, business, admin_user, freed_session, identity_for, client_user):
    _approve_both(business, client_record, cancelled_credit, admin_user)
    CatchUpService.book_catch_up(
        identity=identity_for(client_user, business), session_id=freed_session.id, client_id=client_record.id
    )

    with pytest.raises(ValidationError):
        CatchUpService.reject_cancellation(
            business_id=business.id, notification_id=cancelled_credit.id, actor_user_id=admin_user.id
        )


def test_session_without_freed_seat_cannot_be_booked(cancelled_credit, client_record, business, admin_user, identity_for, client_user, class_offering, instructor):
    from planora_core.common.api.exceptions import ConflictError

    _approve_both(business, client_record, cancelled_credit, admin_user)
    fresh = Session.objects.create(
        business=business,
        class_offering=class_offering,
        instructor=instructor,
        date=timezone.localdate() + dt.timedelta(days=10),
        start_time=dt.time(11, 0),
        end_time=dt.time(11, 30),
    )

    with pytest.raises(ConflictError):
        CatchUpService.book_catch_up(identity=identity_for(client_user, business), session_id=fresh.id, client_id=client_record.id)
    assert credit_count(business_id=business.id, client_id=client_record.id) == 1


# ---------------------------------------------------------------------
# API
# ---------------------------------------------------------------------
def test_admin_reviews_and_client_books_over_api(cancelled_credit, client_record, business, admin_user, client_user, freed_session):
    admin = jwt_client(admin_user, business)

    res = admin.get("/api/v1/catch-up/requests/")
    assert res.status_code == 200
    assert str(client_record.id) in [r["client_id"] for r in res.json()["results"]]

    res = admin.get("/api/v1/catch-up/pending/")
    assert str(cancelled_credit.id) in [n["id"] for n in res.json()]

    assert admin.post(f"/api/v1/catch-up/clients/{client_record.id}/approve/").status_code == 200
    assert admin.post(f"/api/v1/catch-up/cancellations/{cancelled_credit.id}/approve/").status_code == 200

    me = jwt_client(client_user, business)
    res = me.get(f"/api/v1/catch-up/opportunities/?client_id={client_record.id}")
    assert res.status_code == 200
    body = res.json()
    assert body["credits"] == 1
    assert str(freed_session.id) in [s["id"] for s in body["opportunities"]]

    res = me.post(
        "/api/v1/catch-up/book/",
        {"session_id": str(freed_session.id), "client_id": str(client_record.id)},
        format="json",
    )
    assert res.status_code == 201
    assert res.json()["enrollment"]["is_catch_up"] is True


def test_client_cannot_review_catch_up(client_user, business, client_record):
    res = jwt_client(client_user, business).post(f"/api/v1/catch-up/clients/{client_record.id}/approve/")
    assert res.status_code == 403


def test_other_client_cannot_view_opportunities(client_record, other_client_user, other_client_record, business):
    res = jwt_client(other_client_user, business).get(f"/api/v1/catch-up/opportunities/?client_id={client_record.id}")
    assert res.status_code == 403


def test_session_catch_up_list_respects_client_gate(cancelled_credit, client_record, client_user, business, admin_user, freed_session):
    me = jwt_client(client_user, business)

    res = me.get("/api/v1/sessions/catch-up/")
    assert res.status_code == 200
    assert res.json() == {"count": 0, "results": []}

    CatchUpService.approve_client(business_id=business.id, client_id=client_record.id, actor_user_id=admin_user.id)

    body = me.get("/api/v1/sessions/catch-up/").json()
    listed = {s["id"]: s for s in body["results"]}
    assert str(freed_session.id) in listed
    # other clients' names never reach a client login
    assert listed[str(freed_session.id)]["enrolled_clients"] == []
    assert listed[str(freed_session.id)]["enrolled_count"] == 1


def test_staff_catch_up_list_is_not_gated(cancelled_credit, employee_user, business, freed_session):
    body = jwt_client(employee_user, business).get("/api/v1/sessions/catch-up/").json()
    assert str(freed_session.id) in [s["id"] for s in body["results"]]
