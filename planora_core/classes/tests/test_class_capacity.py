import pytest
from rest_framework.exceptions import ValidationError

from planora_core.classes.services import ClassService
from planora_core.common.api.exceptions import ConflictError
from planora_core.conftest import jwt_client
from planora_core.scheduling.models import SessionEnrollment

pytestmark = pytest.mark.django_db


def test_capacity_cannot_drop_below_current_roster(class_offering, session, make_clients, business):
    for c in make_clients(2):
        SessionEnrollment.objects.create(session=session, client=c)

    with pytest.raises(ConflictError):
        ClassService.update(business_id=business.id, class_id=class_offering.id, data={"max_capacity": 1})

    c = ClassService.update(business_id=business.id, class_id=class_offering.id, data={"max_capacity": 5})
    assert c.max_capacity == 5


def test_capacity_must_be_positive(business, instructor):
    with pytest.raises(ValidationError):
        ClassService.create(business_id=business.id, title="Zero", max_capacity=0, instructor_id=instructor.id)


def test_instructor_must_belong_to_business(business, other_business):
    from planora_core.conftest import make_user
    from planora_core.employees.models import Employee

    foreign = Employee.objects.create(
        business=other_business, user=make_user("away"), first_name="Far", last_name="Away"
    )
    with pytest.raises(ValidationError):
        ClassService.create(business_id=business.id, title="Mixed", max_capacity=3, instructor_id=foreign.id)


def test_employee_creates_class_over_api(employee_user, business, instructor):
    res = jwt_client(employee_user, business).post(
        "/api/v1/classes/",
        {"title": "Adult Lap Swim", "max_capacity": 8, "instructor_id": str(instructor.id)},
        format="json",
    )
    assert res.status_code == 201
    assert res.json()["max_capacity"] == 8


def test_raising_capacity_seats_waiting_clients_first(class_offering, session, make_clients, business, identity_for, employee_user):
    from planora_core.scheduling.models import WaitlistEntry
    from planora_core.scheduling.services import SessionService

    staff = identity_for(employee_user, business)
    a, b, c, d = make_clients(4)
    for client in (a, b, c):
        SessionService.enroll_client(identity=staff, session_id=session.id, client_id=client.id)

    ClassService.update(business_id=business.id, class_id=class_offering.id, data={"max_capacity": 3})

    seated = SessionEnrollment.objects.get(session=session, client=c)
    assert seated.is_catch_up is True
    assert not WaitlistEntry.objects.filter(session=session).exists()

    outcome = SessionService.enroll_client(identity=staff, session_id=session.id, client_id=d.id)
    assert outcome.is_waitlisted
