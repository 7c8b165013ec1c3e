# planora_core/employees/api/views.py
from __future__ import annotations

from rest_framework import status, viewsets
from rest_framework.decorators import action
from rest_framework.response import Response

from planora_core.employees.api.serializers import (
    EmployeeCreateSerializer,
    EmployeeRejectSerializer,
    EmployeeSerializer,
)
from planora_core.employees.permissions import EmployeePermission
from planora_core.employees.selectors import get_employee, list_employees, list_pending_employees
from planora_core.employees.services import EmployeeService
from planora_core.iam.context import get_identity


class EmployeeViewSet(viewsets.ViewSet):
    permission_classes = [EmployeePermission]
    lookup_value_regex = r"[0-9a-fA-F-]{36}"

    def list(self, request):
        business_id = get_identity(request).require_business_id()
        qs = list_employees(business_id=business_id, params=request.query_params)
        return Response(EmployeeSerializer(qs, many=True).data)

    def retrieve(self, request, pk=None):
        business_id = get_identity(request).require_business_id()
        return Response(EmployeeSerializer(get_employee(business_id=business_id, employee_id=pk)).data)

    def create(self, request):
        business_id = get_identity(request).require_business_id()
        s = EmployeeCreateSerializer(data=request.data)
        s.is_valid(raise_exception=True)

        e = EmployeeService.create(business_id=business_id, **s.validated_data)
        return Response(EmployeeSerializer(e).data, status=status.HTTP_201_CREATED)

    @action(detail=False, methods=["get"])
    def pending(self, request):
        business_id = get_identity(request).require_business_id()
        return Response(EmployeeSerializer(list_pending_employees(business_id=business_id), many=True).data)

    @action(detail=True, methods=["post"])
    def approve(self, request, pk=None):
        identity = get_identity(request)
        e = EmployeeService.approve(
            business_id=identity.require_business_id(),
            employee_id=pk,
            actor_user_id=identity.user_id,
        )
        return Response(EmployeeSerializer(e).data, status=status.HTTP_200_OK)

    @action(detail=True, methods=["post"])
    def reject(self, request, pk=None):
        identity = get_identity(request)
        s = EmployeeRejectSerializer(data=request.data)
        s.is_valid(raise_exception=True)

        e = EmployeeService.reject(
            business_id=identity.require_business_id(),
            employee_id=pk,
            actor_user_id=identity.user_id,
            reason=s.validated_data.get("reason"),
        )
        return Response(EmployeeSerializer(e).data, status=status.HTTP_200_OK)

    @action(detail=True, methods=["post"])
    def suspend(self, request, pk=None):
        identity = get_identity(request)
        e = EmployeeService.suspend(
            business_id=identity.require_business_id(),
            employee_id=pk,
            actor_user_id=identity.user_id,
        )
        return Response(EmployeeSerializer(e).data, status=status.HTTP_200_OK)
