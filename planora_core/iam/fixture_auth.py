# planora_core/iam/fixture_auth.py
"""
Header-selected identity for local development and tests.

Registered only by config/settings/local.py (opt-in) and config/settings/test.py.
It authenticates an EXISTING active user and then goes through the exact same
context resolution and role checks as a JWT caller.
"""
from __future__ import annotations

import logging

from django.conf import settings
from django.contrib.auth import get_user_model
from django.db.models import Q
from rest_framework.authentication import BaseAuthentication
from rest_framework.exceptions import AuthenticationFailed

from planora_core.iam.context import business_id_from_headers, resolve_identity_context

logger = logging.getLogger(__name__)

HDR_FIXTURE_USER = "X-Fixture-User"


def fixture_identity_enabled() -> bool:
    if getattr(settings, "DJANGO_ENV", "local") == "prod":
        return False
    return bool(getattr(settings, "FIXTURE_IDENTITY_ENABLED", False))


class FixtureIdentityAuthentication(BaseAuthentication):
    def authenticate(self, request):
        if not fixture_identity_enabled():
            return None

        raw = request.headers.get(HDR_FIXTURE_USER)
        if not raw:
            return None

        User = get_user_model()
        user = User.objects.filter(Q(username=raw) | Q(email__iexact=raw)).order_by("id").first()
        if user is None or not user.is_active:
            raise AuthenticationFailed("Fixture user not found or inactive.")

        logger.warning("fixture identity in use for user %s", user.id)
        request.identity = resolve_identity_context(
            user,
            requested_business_id=business_id_from_headers(request),
            is_fixture=True,
        )
        return user, None

    def authenticate_header(self, request):
        return HDR_FIXTURE_USER
