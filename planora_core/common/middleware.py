# planora_core/common/middleware.py
from __future__ import annotations

from typing import Optional
from uuid import UUID

from django.http import JsonResponse
from django.utils.deprecation import MiddlewareMixin

from planora_core.common.api.exceptions import build_error_envelope, ensure_request_id

INVALID_BUSINESS_HEADER_MSG = "Invalid X-Business-ID header. Provide a valid business UUID."


def _parse_uuid(value: str) -> Optional[UUID]:
    try:
        return UUID(str(value))
    except (TypeError, ValueError):
        return None


class BusinessContextHeaderMiddleware(MiddlewareMixin):
    """
    Request-level hygiene for API calls.

    Behavior:
      - Assigns request.request_id and echoes it back as X-Request-ID.
      - For /api/v1/* and /api/* (alias): a malformed X-Business-ID header -> 400 envelope.
      - Docs/schema/admin endpoints are ignored.
      - Membership is NOT checked here (request.user is not the JWT user yet);
        the JWT gate resolves the business context against active associations.
    """

    BUSINESS_META_KEYS = ("HTTP_X_BUSINESS_ID",)

    ENFORCED_PREFIXES = ("/api/v1/", "/api/")

    PUBLIC_PATH_PREFIXES = (
        "/admin/",
        "/api/docs/",
        "/api/schema/",
    )

    def _is_api_path(self, path: str) -> bool:
        return any(path.startswith(p) for p in self.ENFORCED_PREFIXES)

    def _starts_with_any(self, path: str, prefixes: tuple[str, ...]) -> bool:
        return any(path.startswith(p) for p in prefixes)

    def _get_meta_first(self, request, keys: tuple[str, ...]) -> Optional[str]:
        for k in keys:
            v = request.META.get(k)
            if v:
                return v
        return None

    def _json_error(self, request, *, status_code: int, code: str, message: str, details=None) -> JsonResponse:
        return JsonResponse(
            build_error_envelope(
                request=request,
                code=code,
                message=message,
                details=details,
            ),
            status=status_code,
        )

    def process_request(self, request):
        ensure_request_id(request)

        path = getattr(request, "path", "") or ""

        if self._starts_with_any(path, self.PUBLIC_PATH_PREFIXES):
            return None

        if not self._is_api_path(path):
            return None

        business_raw = self._get_meta_first(request, self.BUSINESS_META_KEYS)
        if business_raw and _parse_uuid(business_raw) is None:
            return self._json_error(
                request,
                status_code=400,
                code="validation_error",
                message=INVALID_BUSINESS_HEADER_MSG,
                details={"X-Business-ID": "Invalid UUID"},
            )
        return None

    def process_response(self, request, response):
        rid = getattr(request, "request_id", None)
        if rid and not response.has_header("X-Request-ID"):
            response["X-Request-ID"] = rid
        return response
