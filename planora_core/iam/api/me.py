# planora_core/iam/api/me.py

from __future__ import annotations

from drf_spectacular.utils import extend_schema
from rest_framework import status
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from planora_core.iam.api.schema_serializers import (
    MeResponseSerializer,
    SwitchBusinessRequestSerializer,
    SwitchBusinessResponseSerializer,
)
from planora_core.iam.context import get_identity, resolve_identity_context
from planora_core.iam.services.membership import list_user_businesses, switch_user_business


class MeView(APIView):
    permission_classes = [IsAuthenticated]

    @extend_schema(responses={200: MeResponseSerializer}, tags=["IAM"])
    def get(self, request):
        """
        Returns the caller's identity context + active business associations.
        X-Business-ID is optional here; an unknown business simply falls back
        to the stored/default context.
        """
        identity = get_identity(request)
        return Response(
            {
                "identity": identity.as_dict(),
                "businesses": list_user_businesses(identity.user_id),
            },
            status=status.HTTP_200_OK,
        )


class SwitchBusinessView(APIView):
    permission_classes = [IsAuthenticated]

    @extend_schema(
        request=SwitchBusinessRequestSerializer,
        responses={200: SwitchBusinessResponseSerializer},
        tags=["IAM"],
    )
    def post(self, request):
        s = SwitchBusinessRequestSerializer(data=request.data)
        s.is_valid(raise_exception=True)

        ub = switch_user_business(user_id=request.user.id, business_id=s.validated_data["business_id"])
        request.identity = resolve_identity_context(request.user)

        return Response(
            {
                "message": "Business switched successfully",
                "current_business": {
                    "business_id": str(ub.business_id),
                    "business_name": ub.business.name,
                    "role": ub.role,
                },
            },
            status=status.HTTP_200_OK,
        )
