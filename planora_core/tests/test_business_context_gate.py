import pytest
from rest_framework.test import APIClient

from planora_core.conftest import business_headers, jwt_client, make_user
from planora_core.iam.models import BusinessRole, UserProfile, UserRole

pytestmark = pytest.mark.django_db


def test_invalid_token_is_401(business):
    c = APIClient()
    c.credentials(HTTP_AUTHORIZATION="Bearer not-a-real-token")
    res = c.get("/api/v1/sessions/")
    assert res.status_code == 401
    assert res.json()["error"]["code"] == "not_authenticated"


def test_inactive_user_is_401(client_user, business):
    c = jwt_client(client_user, business)
    client_user.is_active = False
    client_user.save(update_fields=["is_active"])

    res = c.get("/api/v1/sessions/")
    assert res.status_code == 401


def test_role_not_allowed_on_route_is_403(client_user, business):
    res = jwt_client(client_user, business).post("/api/v1/classes/", {"title": "x", "max_capacity": 3}, format="json")
    assert res.status_code == 403
    body = res.json()
    assert body["error"]["code"] == "permission_denied"
    assert "insufficient role" in body["error"]["message"]


def test_client_without_business_context_is_403(db):
    loner = make_user("loner", role=UserRole.CLIENT)
    res = jwt_client(loner).get("/api/v1/sessions/")
    assert res.status_code == 403
    assert "No business context" in res.json()["error"]["message"]


def test_pending_association_does_not_count(business):
    pending = make_user("waiting", role=UserRole.CLIENT, business=business, is_active=False)
    res = jwt_client(pending, business).get("/api/v1/sessions/")
    assert res.status_code == 403


def test_first_active_association_becomes_persisted_default(client_user, business):
    assert UserProfile.objects.get(user=client_user).current_business_id is None

    res = jwt_client(client_user).get("/api/v1/sessions/")
    assert res.status_code == 200

    assert UserProfile.objects.get(user=client_user).current_business_id == business.id


def test_header_selects_among_active_associations(business, other_business):
    from planora_core.iam.models import UserBusiness

    staff = make_user("multi", role=UserRole.EMPLOYEE, business=business)
    UserBusiness.objects.create(user=staff, business=other_business, role=BusinessRole.EMPLOYEE, is_active=True)

    body = jwt_client(staff, other_business).get("/api/v1/me/").json()
    assert body["identity"]["business_id"] == str(other_business.id)

    body = jwt_client(staff, business).get("/api/v1/me/").json()
    assert body["identity"]["business_id"] == str(business.id)


def test_header_for_foreign_business_falls_back_to_own(client_user, business, other_business):
    body = jwt_client(client_user, other_business).get("/api/v1/me/").json()
    assert body["identity"]["business_id"] == str(business.id)


def test_super_admin_needs_no_business_context(super_admin, business):
    res = jwt_client(super_admin).get("/api/v1/businesses/")
    assert res.status_code == 200


def test_super_admin_has_no_implicit_bypass(super_admin, business):
    res = jwt_client(super_admin, business).get("/api/v1/sessions/")
    assert res.status_code == 403


def test_malformed_business_header_is_400(client_user):
    c = jwt_client(client_user)
    res = c.get("/api/v1/sessions/", HTTP_X_BUSINESS_ID="bogus")
    assert res.status_code == 400
    assert res.json()["error"]["details"] == {"X-Business-ID": "Invalid UUID"}


def test_cookie_token_is_accepted(client_user, business, settings):
    from planora_core.iam.tokens import issue_tokens_for

    c = APIClient()
    c.cookies[settings.SIMPLE_JWT["AUTH_COOKIE"]] = issue_tokens_for(client_user)["access"]
    res = c.get("/api/v1/me/", **business_headers(business))
    assert res.status_code == 200
    assert res.json()["identity"]["user_id"] == client_user.id
