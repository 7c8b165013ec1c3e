# planora_core/iam/api/associations.py
from __future__ import annotations

from rest_framework import status, viewsets
from rest_framework.decorators import action
from rest_framework.response import Response

from planora_core.iam.api.serializers import (
    AddUserSerializer,
    ApproveRequestSerializer,
    ClientStatusSerializer,
    UpdateRoleSerializer,
    UserBusinessSerializer,
)
from planora_core.iam.context import get_identity
from planora_core.iam.permissions import BusinessUserPermission
from planora_core.iam.services import membership


class BusinessUserViewSet(viewsets.ViewSet):
    """
    Users associated with the caller's current business.
    pk is the Django user id.
    """

    permission_classes = [BusinessUserPermission]
    lookup_value_regex = r"\d+"

    def _business_id(self, request):
        return get_identity(request).require_business_id()

    def list(self, request):
        qs = membership.list_business_users(self._business_id(request))
        return Response(UserBusinessSerializer(qs, many=True).data)

    def create(self, request):
        s = AddUserSerializer(data=request.data)
        s.is_valid(raise_exception=True)

        ub = membership.add_user_to_business(
            user_id=s.validated_data["user_id"],
            business_id=self._business_id(request),
            role=s.validated_data["role"],
            is_active=s.validated_data.get("is_active"),
        )
        return Response(UserBusinessSerializer(ub).data, status=status.HTTP_201_CREATED)

    def destroy(self, request, pk=None):
        ub = membership.remove_user_from_business(user_id=int(pk), business_id=self._business_id(request))
        return Response(UserBusinessSerializer(ub).data, status=status.HTTP_200_OK)

    @action(detail=True, methods=["post"], url_path="role")
    def update_role(self, request, pk=None):
        s = UpdateRoleSerializer(data=request.data)
        s.is_valid(raise_exception=True)

        ub = membership.update_user_role_in_business(
            user_id=int(pk),
            business_id=self._business_id(request),
            role=s.validated_data["role"],
        )
        return Response(UserBusinessSerializer(ub).data, status=status.HTTP_200_OK)

    # ----------------------------
    # Join requests
    # ----------------------------
    @action(detail=False, methods=["get"])
    def pending(self, request):
        qs = membership.list_pending_requests(self._business_id(request))
        return Response(UserBusinessSerializer(qs, many=True).data)

    @action(detail=True, methods=["post"])
    def approve(self, request, pk=None):
        s = ApproveRequestSerializer(data=request.data)
        s.is_valid(raise_exception=True)

        ub = membership.approve_join_request(
            business_id=self._business_id(request),
            user_id=int(pk),
            role=s.validated_data.get("role"),
        )
        return Response(UserBusinessSerializer(ub).data, status=status.HTTP_200_OK)

    @action(detail=True, methods=["post"])
    def reject(self, request, pk=None):
        membership.reject_join_request(business_id=self._business_id(request), user_id=int(pk))
        return Response({"message": "Request rejected"}, status=status.HTTP_200_OK)

    @action(detail=True, methods=["post"], url_path="client-status")
    def client_status(self, request, pk=None):
        s = ClientStatusSerializer(data=request.data)
        s.is_valid(raise_exception=True)

        result = membership.set_client_status(
            business_id=self._business_id(request),
            user_id=int(pk),
            status=s.validated_data["client_status"],
        )
        return Response(result, status=status.HTTP_200_OK)
