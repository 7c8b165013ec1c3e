import json

import pytest
from django.test import RequestFactory
from rest_framework.exceptions import ValidationError

from planora_core.common.api.exceptions import ConflictError, api_exception_handler
from planora_core.common.middleware import BusinessContextHeaderMiddleware


def test_middleware_malformed_business_header_returns_error_envelope():
    rf = RequestFactory()
    req = rf.get("/api/v1/sessions/", HTTP_X_BUSINESS_ID="not-a-uuid")

    mw = BusinessContextHeaderMiddleware(get_response=lambda r: None)
    resp = mw.process_request(req)

    assert resp is not None
    assert resp.status_code == 400

    body = json.loads(resp.content.decode("utf-8"))
    assert body["error"]["code"] == "validation_error"
    assert "X-Business-ID" in body["error"]["message"]
    assert body["error"]["request_id"] == req.request_id


def test_middleware_ignores_docs_and_missing_header():
    rf = RequestFactory()
    mw = BusinessContextHeaderMiddleware(get_response=lambda r: None)

    assert mw.process_request(rf.get("/api/docs/", HTTP_X_BUSINESS_ID="nope")) is None
    assert mw.process_request(rf.get("/api/v1/sessions/")) is None


def test_conflict_flows_through_handler_as_409():
    req = RequestFactory().post("/api/v1/sessions/")
    resp = api_exception_handler(ConflictError("Client is already enrolled in this class"), {"request": req})

    assert resp.status_code == 409
    assert resp.data["error"]["code"] == "conflict"
    assert resp.data["error"]["message"] == "Client is already enrolled in this class"
    assert resp.data["error"]["details"] is None


def test_validation_detail_keeps_extra_keys_as_details():
    req = RequestFactory().delete("/api/v1/clients/members/x/")
    exc = ValidationError({"detail": "Cannot delete member", "active_sessions_count": 2})

    resp = api_exception_handler(exc, {"request": req})

    assert resp.status_code == 400
    assert resp.data["error"]["message"] == "Cannot delete member"
    assert "active_sessions_count" in resp.data["error"]["details"]


@pytest.mark.django_db
def test_unauthenticated_api_call_uses_envelope():
    from rest_framework.test import APIClient

    res = APIClient().get("/api/v1/sessions/")
    assert res.status_code == 401
    assert res.json()["error"]["code"] == "not_authenticated"


def test_restricted_delete_is_reported_as_conflict():
    from django.db.models import RestrictedError

    req = RequestFactory().delete("/api/v1/classes/x/")
    resp = api_exception_handler(RestrictedError("still used", set()), {"request": req})

    assert resp.status_code == 409
    assert resp.data["error"]["code"] == "conflict"
