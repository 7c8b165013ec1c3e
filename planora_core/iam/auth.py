# planora_core/iam/auth.py

from __future__ import annotations

from django.conf import settings
from rest_framework_simplejwt.authentication import JWTAuthentication

from planora_core.iam.context import business_id_from_headers, resolve_identity_context


class BusinessContextJWTAuthentication(JWTAuthentication):
    """
    Authenticate using:
      1) Authorization: Bearer <access>
      2) HttpOnly cookie containing access token

    Invalid/expired tokens and inactive users fail with 401 (simplejwt).
    After the user is known, resolves the IdentityContext (role, active business
    associations, current business) once and attaches it as request.identity.
    """

    def authenticate(self, request):
        header = self.get_header(request)
        if header:
            auth_result = super().authenticate(request)
            if auth_result is None:
                return None
            user, token = auth_result
        else:
            cookie_name = settings.SIMPLE_JWT.get("AUTH_COOKIE", "pl_access")
            raw_token = request.COOKIES.get(cookie_name)
            if not raw_token:
                return None

            token = self.get_validated_token(raw_token)
            user = self.get_user(token)

        request.identity = resolve_identity_context(
            user,
            requested_business_id=business_id_from_headers(request),
        )
        return user, token
