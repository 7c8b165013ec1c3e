import pytest

from planora_core.conftest import jwt_client

pytestmark = pytest.mark.django_db


def test_enroll_then_waitlist_over_api(employee_user, business, session, make_clients):
    c = jwt_client(employee_user, business)
    a, b, extra = make_clients(3)

    for client in (a, b):
        res = c.post(f"/api/v1/sessions/{session.id}/enroll/", {"client_id": str(client.id)}, format="json")
        assert res.status_code == 200
        assert res.json()["result"] == "enrolled"

    res = c.post(f"/api/v1/sessions/{session.id}/enroll/", {"client_id": str(extra.id)}, format="json")
    assert res.status_code == 200
    body = res.json()
    assert body["result"] == "waitlisted"
    assert body["waitlist_position"] == 1
    assert [w["client_id"] for w in body["session"]["waitlist"]] == [str(extra.id)]
    assert len(body["session"]["enrolled_clients"]) == 2


def test_duplicate_enroll_is_409(client_user, business, session, client_record):
    c = jwt_client(client_user, business)
    url = f"/api/v1/sessions/{session.id}/enroll/"

    assert c.post(url, {"client_id": str(client_record.id)}, format="json").status_code == 200
    res = c.post(url, {"client_id": str(client_record.id)}, format="json")
    assert res.status_code == 409
    assert res.json()["error"]["message"] == "Client is already enrolled in this class"


def test_client_cannot_enroll_someone_else(client_user, business, session, other_client_record):
    res = jwt_client(client_user, business).post(
        f"/api/v1/sessions/{session.id}/enroll/", {"client_id": str(other_client_record.id)}, format="json"
    )
    assert res.status_code == 403


def test_cancel_reports_promoted_client(employee_user, business, session, make_clients):
    c = jwt_client(employee_user, business)
    a, b, waiting = make_clients(3)
    for client in (a, b, waiting):
        c.post(f"/api/v1/sessions/{session.id}/enroll/", {"client_id": str(client.id)}, format="json")

    res = c.post(f"/api/v1/sessions/{session.id}/cancel/", {"client_id": str(a.id)}, format="json")
    assert res.status_code == 200
    assert res.json()["promoted_client_id"] == str(waiting.id)


def test_delete_with_enrollments_is_409(employee_user, business, session, make_clients):
    c = jwt_client(employee_user, business)
    c.post(f"/api/v1/sessions/{session.id}/enroll/", {"client_id": str(make_clients(1)[0].id)}, format="json")

    res = c.delete(f"/api/v1/sessions/{session.id}/")
    assert res.status_code == 409


def test_client_cannot_create_sessions(client_user, business, class_offering):
    res = jwt_client(client_user, business).post(
        "/api/v1/sessions/",
        {"class_offering_id": str(class_offering.id), "date": "2026-11-02", "start_time": "08:00", "end_time": "09:00"},
        format="json",
    )
    assert res.status_code == 403


def test_sessions_are_scoped_to_business(employee_user, business, session, other_business):
    from planora_core.conftest import make_user

    outsider = make_user("outsider", role="employee", business=other_business)
    res = jwt_client(outsider, other_business).get(f"/api/v1/sessions/{session.id}/")
    assert res.status_code == 404

    res = jwt_client(employee_user, business).get("/api/v1/sessions/")
    assert [s["id"] for s in res.json()] == [str(session.id)]


def test_list_rejects_bad_filter(employee_user, business):
    res = jwt_client(employee_user, business).get("/api/v1/sessions/?start_date=not-a-date")
    assert res.status_code == 400


def test_client_sees_only_own_sessions_and_own_roster_entries(
    employee_user, client_user, business, session, client_record, other_client_record, class_offering, instructor
):
    import datetime as dt

    from planora_core.scheduling.models import Session

    staff = jwt_client(employee_user, business)
    for client in (client_record, other_client_record):
        staff.post(f"/api/v1/sessions/{session.id}/enroll/", {"client_id": str(client.id)}, format="json")
    unrelated = Session.objects.create(
        business=business,
        class_offering=class_offering,
        instructor=instructor,
        date=session.date + dt.timedelta(days=1),
        start_time=dt.time(11, 0),
        end_time=dt.time(11, 30),
    )

    me = jwt_client(client_user, business)
    res = me.get("/api/v1/sessions/")
    assert res.status_code == 200
    rows = res.json()
    assert [s["id"] for s in rows] == [str(session.id)]
    assert [e["client_id"] for e in rows[0]["enrolled_clients"]] == [str(client_record.id)]
    assert rows[0]["enrolled_count"] == 2
    assert rows[0]["waitlist"] == []

    assert me.get(f"/api/v1/sessions/{session.id}/").status_code == 200
    assert me.get(f"/api/v1/sessions/{unrelated.id}/").status_code == 404


def test_staff_list_keeps_full_roster(employee_user, business, session, client_record, other_client_record):
    staff = jwt_client(employee_user, business)
    for client in (client_record, other_client_record):
        staff.post(f"/api/v1/sessions/{session.id}/enroll/", {"client_id": str(client.id)}, format="json")

    rows = staff.get("/api/v1/sessions/").json()
    assert len(rows[0]["enrolled_clients"]) == 2
