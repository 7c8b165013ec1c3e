import pytest
from django.contrib.auth import get_user_model
from django.core import mail
from rest_framework.exceptions import ValidationError

from planora_core.businesses.models import Business, BusinessStatus
from planora_core.businesses.services import BusinessService
from planora_core.conftest import jwt_client, make_user
from planora_core.iam.models import UserBusiness, UserProfile

pytestmark = pytest.mark.django_db


@pytest.fixture
def pending_business(db):
    return BusinessService.create(name="New Dojo", email="Dojo@Example.com ", business_type="martial-arts")


def test_create_normalizes_email_and_starts_pending(pending_business):
    assert pending_business.email == "dojo@example.com"
    assert pending_business.status == BusinessStatus.PENDING
    assert pending_business.settings["default_class_duration"] == 30


def test_duplicate_email_is_rejected(pending_business):
    with pytest.raises(ValidationError):
        BusinessService.create(name="Copy", email="DOJO@example.com", business_type="x")


def test_activation_sends_email(pending_business):
    b = BusinessService.activate(business_id=pending_business.id)

    assert b.status == BusinessStatus.ACTIVE
    assert len(mail.outbox) == 1
    assert mail.outbox[0].to == ["dojo@example.com"]


def test_rejecting_pending_application_sends_reason(pending_business):
    BusinessService.suspend(business_id=pending_business.id, notes="Incomplete paperwork")

    assert len(mail.outbox) == 1
    assert "Incomplete paperwork" in mail.outbox[0].body


def test_reactivation_sends_reactivation_email(business):
    BusinessService.suspend(business_id=business.id)
    assert mail.outbox == []

    BusinessService.activate(business_id=business.id)
    assert len(mail.outbox) == 1
    assert "reactivated" in mail.outbox[0].subject


def test_same_status_is_noop_without_email(business):
    BusinessService.set_status(business_id=business.id, status=BusinessStatus.ACTIVE)
    assert mail.outbox == []


def test_status_messages():
    assert BusinessService.status_message(previous="pending", new="active") == "Business activated successfully"
    assert BusinessService.status_message(previous="suspended", new="active") == "Business reactivated successfully"
    assert BusinessService.status_message(previous="active", new="suspended") == "Business suspended successfully"


def test_deactivate_locks_out_legacy_users(business):
    legacy = make_user("legacy")
    UserProfile.objects.filter(user=legacy).update(business=business)

    b = BusinessService.deactivate(business_id=business.id)

    assert b.is_active is False
    legacy.refresh_from_db()
    assert legacy.is_active is False


def test_permanent_delete_cascades_and_reports_counts(business, session, client_record, admin_user):
    counts = BusinessService.permanently_delete(business_id=business.id)

    assert counts["sessions"] == 1
    assert counts["classes"] == 1
    assert counts["clients"] == 1
    assert counts["employees"] == 1
    assert counts["user_businesses"] == 3  # admin, coach, parent

    assert not Business.objects.filter(id=business.id).exists()
    assert not UserBusiness.objects.filter(business_id=business.id).exists()
    # users survive the tenant
    assert get_user_model().objects.filter(id=admin_user.id).exists()


# ---------------------------------------------------------------------
# API
# ---------------------------------------------------------------------
def test_super_admin_approves_business_over_api(super_admin, pending_business):
    res = jwt_client(super_admin).post(
        f"/api/v1/businesses/{pending_business.id}/status/", {"status": "active"}, format="json"
    )
    assert res.status_code == 200
    body = res.json()
    assert body["message"] == "Business activated successfully"
    assert body["business"]["status"] == "active"


def test_business_admin_cannot_change_status(admin_user, business):
    res = jwt_client(admin_user, business).post(
        f"/api/v1/businesses/{business.id}/status/", {"status": "suspended"}, format="json"
    )
    assert res.status_code == 403


def test_admin_cannot_see_foreign_business(admin_user, business, other_business):
    c = jwt_client(admin_user, business)
    assert c.get(f"/api/v1/businesses/{business.id}/").status_code == 200
    assert c.get(f"/api/v1/businesses/{other_business.id}/").status_code == 404
