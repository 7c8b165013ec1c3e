import pytest
from rest_framework.test import APIClient

pytestmark = pytest.mark.django_db


def test_fixture_header_authenticates_existing_user(client_user, business):
    res = APIClient().get("/api/v1/me/", HTTP_X_FIXTURE_USER=client_user.username)
    assert res.status_code == 200

    identity = res.json()["identity"]
    assert identity["user_id"] == client_user.id
    assert identity["is_fixture"] is True
    assert identity["business_id"] == str(business.id)


def test_fixture_header_matches_email_case_insensitively(client_user):
    res = APIClient().get("/api/v1/me/", HTTP_X_FIXTURE_USER=client_user.email.upper())
    assert res.status_code == 200


def test_fixture_identity_still_goes_through_role_checks(client_user, business):
    res = APIClient().post(
        "/api/v1/classes/",
        {"title": "x", "max_capacity": 1},
        format="json",
        HTTP_X_FIXTURE_USER=client_user.username,
    )
    assert res.status_code == 403


def test_unknown_fixture_user_is_401(db):
    res = APIClient().get("/api/v1/me/", HTTP_X_FIXTURE_USER="ghost")
    assert res.status_code == 401


def test_fixture_header_ignored_when_disabled(client_user, settings):
    settings.FIXTURE_IDENTITY_ENABLED = False
    res = APIClient().get("/api/v1/me/", HTTP_X_FIXTURE_USER=client_user.username)
    assert res.status_code == 401


def test_fixture_header_ignored_in_prod(client_user, settings):
    settings.DJANGO_ENV = "prod"
    res = APIClient().get("/api/v1/me/", HTTP_X_FIXTURE_USER=client_user.username)
    assert res.status_code == 401
