# planora_core/businesses/api/views.py
from __future__ import annotations

from rest_framework import status, viewsets
from rest_framework.decorators import action
from rest_framework.exceptions import NotFound
from rest_framework.response import Response

from planora_core.businesses.api.serializers import (
    BusinessCreateSerializer,
    BusinessSerializer,
    BusinessStatusSerializer,
)
from planora_core.businesses.permissions import BusinessPermission
from planora_core.businesses.selectors import business_qs, get_business
from planora_core.businesses.services import BusinessService
from planora_core.common.api.pagination import paginate
from planora_core.iam.context import get_identity


class BusinessViewSet(viewsets.ViewSet):
    permission_classes = [BusinessPermission]
    lookup_value_regex = r"[0-9a-fA-F-]{36}"

    def list(self, request):
        qs = business_qs().order_by("-created_at")

        status_filter = request.query_params.get("status")
        if status_filter:
            qs = qs.filter(status=status_filter)

        return paginate(request, qs, BusinessSerializer)

    def retrieve(self, request, pk=None):
        identity = get_identity(request)
        b = get_business(business_id=pk)
        if not identity.is_super_admin and identity.association_for(b.id) is None:
            # Do not leak existence of other tenants
            raise NotFound("Business not found")
        return Response(BusinessSerializer(b).data)

    def create(self, request):
        s = BusinessCreateSerializer(data=request.data)
        s.is_valid(raise_exception=True)

        b = BusinessService.create(**s.validated_data)
        return Response(BusinessSerializer(b).data, status=status.HTTP_201_CREATED)

    @action(detail=True, methods=["post"], url_path="status")
    def set_status(self, request, pk=None):
        s = BusinessStatusSerializer(data=request.data)
        s.is_valid(raise_exception=True)

        previous = get_business(business_id=pk).status
        b = BusinessService.set_status(
            business_id=pk,
            status=s.validated_data["status"],
            notes=s.validated_data.get("notes") or None,
        )
        return Response(
            {
                "message": BusinessService.status_message(previous=previous, new=b.status),
                "business": BusinessSerializer(b).data,
            },
            status=status.HTTP_200_OK,
        )

    @action(detail=True, methods=["post"])
    def deactivate(self, request, pk=None):
        b = BusinessService.deactivate(business_id=pk)
        return Response(BusinessSerializer(b).data, status=status.HTTP_200_OK)

    @action(detail=True, methods=["delete"])
    def permanent(self, request, pk=None):
        counts = BusinessService.permanently_delete(business_id=pk)
        return Response(
            {"message": "Business and all related data permanently deleted", "deleted": counts},
            status=status.HTTP_200_OK,
        )
