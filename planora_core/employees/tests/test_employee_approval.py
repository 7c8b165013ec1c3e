import pytest
from django.core import mail
from rest_framework.exceptions import NotFound

from planora_core.common.api.exceptions import ConflictError
from planora_core.conftest import jwt_client, make_user
from planora_core.employees.models import EmployeeStatus
from planora_core.employees.services import DEFAULT_REJECTION_REASON, EmployeeService

pytestmark = pytest.mark.django_db


@pytest.fixture
def applicant(business):
    user = make_user("applicant", role="employee", business=business)
    return EmployeeService.create(business_id=business.id, user_id=user.id, first_name="Jo", last_name="Lane")


def test_create_starts_pending_and_rejects_duplicates(applicant, business):
    assert applicant.status == EmployeeStatus.PENDING
    with pytest.raises(ConflictError):
        EmployeeService.create(business_id=business.id, user_id=applicant.user_id, first_name="Jo", last_name="Lane")


def test_approve_records_actor_and_emails(applicant, business, admin_user):
    e = EmployeeService.approve(business_id=business.id, employee_id=applicant.id, actor_user_id=admin_user.id)

    assert e.status == EmployeeStatus.APPROVED
    assert e.approved_by_id == admin_user.id
    assert e.approved_at is not None
    assert len(mail.outbox) == 1


def test_reject_defaults_reason(applicant, business, admin_user):
    e = EmployeeService.reject(business_id=business.id, employee_id=applicant.id, actor_user_id=admin_user.id)

    assert e.status == EmployeeStatus.REJECTED
    assert e.rejection_reason == DEFAULT_REJECTION_REASON
    assert DEFAULT_REJECTION_REASON in mail.outbox[0].body


def test_only_pending_can_be_decided(applicant, business, admin_user):
    EmployeeService.approve(business_id=business.id, employee_id=applicant.id, actor_user_id=admin_user.id)
    with pytest.raises(NotFound):
        EmployeeService.reject(business_id=business.id, employee_id=applicant.id, actor_user_id=admin_user.id)


def test_suspend_requires_approved(applicant, business, admin_user):
    with pytest.raises(NotFound):
        EmployeeService.suspend(business_id=business.id, employee_id=applicant.id, actor_user_id=admin_user.id)

    EmployeeService.approve(business_id=business.id, employee_id=applicant.id, actor_user_id=admin_user.id)
    e = EmployeeService.suspend(business_id=business.id, employee_id=applicant.id, actor_user_id=admin_user.id)
    assert e.status == EmployeeStatus.SUSPENDED


def test_admin_rejects_over_api_with_reason(applicant, admin_user, business):
    res = jwt_client(admin_user, business).post(
        f"/api/v1/employees/{applicant.id}/reject/", {"reason": "No certification"}, format="json"
    )
    assert res.status_code == 200
    assert res.json()["rejection_reason"] == "No certification"


def test_pending_list_is_admin_only(applicant, employee_user, admin_user, business):
    assert jwt_client(employee_user, business).get("/api/v1/employees/pending/").status_code == 403

    res = jwt_client(admin_user, business).get("/api/v1/employees/pending/")
    assert [row["id"] for row in res.json()] == [str(applicant.id)]
