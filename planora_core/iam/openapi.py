# planora_core/iam/openapi.py
from drf_spectacular.extensions import OpenApiAuthenticationExtension

from planora_core.iam.fixture_auth import HDR_FIXTURE_USER


class BusinessContextJWTAuthenticationScheme(OpenApiAuthenticationExtension):
    target_class = "planora_core.iam.auth.BusinessContextJWTAuthentication"
    name = "BearerOrCookieJWT"

    def get_security_definition(self, auto_schema):
        return {
            "type": "http",
            "scheme": "bearer",
            "bearerFormat": "JWT",
            "description": (
                "Access token via `Authorization: Bearer <token>` or the HttpOnly `pl_access` cookie. "
                "The token carries the user id and platform role. "
                "Optional `X-Business-ID` selects among the caller's active businesses."
            ),
        }


class FixtureIdentityAuthenticationScheme(OpenApiAuthenticationExtension):
    """Only present in schemas generated by local/test settings."""

    target_class = "planora_core.iam.fixture_auth.FixtureIdentityAuthentication"
    name = "FixtureUser"

    def get_security_definition(self, auto_schema):
        return {
            "type": "apiKey",
            "in": "header",
            "name": HDR_FIXTURE_USER,
            "description": "Username or email of an existing active user (non-production only).",
        }
