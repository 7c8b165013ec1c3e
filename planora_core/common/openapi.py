# planora_core/common/openapi.py
from __future__ import annotations

from drf_spectacular.openapi import AutoSchema
from drf_spectacular.types import OpenApiTypes
from drf_spectacular.utils import OpenApiParameter


class PlanoraAutoSchema(AutoSchema):
    """
    Global OpenAPI improvements:

    - Adds the optional X-Business-ID header to business-scoped endpoints
    - Skips it for auth endpoints and schema/docs endpoints
    """

    BUSINESS_HEADER = OpenApiParameter(
        name="X-Business-ID",
        type=OpenApiTypes.UUID,
        location=OpenApiParameter.HEADER,
        required=False,
        description=(
            "Selects the active business among the caller's active associations. "
            "Falls back to the stored current business, then the first active association."
        ),
    )

    def _is_unscoped_endpoint(self) -> bool:
        view = getattr(self, "view", None)
        if view is None:
            return False

        view_class_name = view.__class__.__name__
        if view_class_name in {"SpectacularAPIView", "SpectacularSwaggerView"}:
            return True

        module = view.__class__.__module__ or ""
        if module.startswith("planora_core.iam.api.auth"):
            return True

        return False

    def get_override_parameters(self):
        params = list(super().get_override_parameters() or [])

        if not self._is_unscoped_endpoint():
            existing = {p.name.lower() for p in params}
            if self.BUSINESS_HEADER.name.lower() not in existing:
                params.append(self.BUSINESS_HEADER)

        return params
