# planora_core/classes/api/views.py
from __future__ import annotations

from rest_framework import status, viewsets
from rest_framework.decorators import action
from rest_framework.response import Response

from planora_core.classes.api.serializers import ClassOfferingSerializer, ClassOfferingWriteSerializer
from planora_core.classes.permissions import ClassPermission
from planora_core.classes.selectors import get_class, list_classes
from planora_core.classes.services import ClassService
from planora_core.iam.context import get_identity


class ClassOfferingViewSet(viewsets.ViewSet):
    permission_classes = [ClassPermission]
    lookup_value_regex = r"[0-9a-fA-F-]{36}"

    def list(self, request):
        business_id = get_identity(request).require_business_id()
        qs = list_classes(business_id=business_id, params=request.query_params)
        return Response(ClassOfferingSerializer(qs, many=True).data)

    def retrieve(self, request, pk=None):
        business_id = get_identity(request).require_business_id()
        return Response(ClassOfferingSerializer(get_class(business_id=business_id, class_id=pk)).data)

    def create(self, request):
        business_id = get_identity(request).require_business_id()
        s = ClassOfferingWriteSerializer(data=request.data)
        s.is_valid(raise_exception=True)

        c = ClassService.create(business_id=business_id, **s.validated_data)
        return Response(ClassOfferingSerializer(c).data, status=status.HTTP_201_CREATED)

    def partial_update(self, request, pk=None):
        business_id = get_identity(request).require_business_id()
        s = ClassOfferingWriteSerializer(data=request.data, partial=True)
        s.is_valid(raise_exception=True)

        c = ClassService.update(business_id=business_id, class_id=pk, data=s.validated_data)
        return Response(ClassOfferingSerializer(c).data, status=status.HTTP_200_OK)

    @action(detail=True, methods=["post"])
    def deactivate(self, request, pk=None):
        business_id = get_identity(request).require_business_id()
        c = ClassService.deactivate(business_id=business_id, class_id=pk)
        return Response(ClassOfferingSerializer(c).data, status=status.HTTP_200_OK)
