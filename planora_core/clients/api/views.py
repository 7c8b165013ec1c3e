# planora_core/clients/api/views.py
from __future__ import annotations

from rest_framework import status, viewsets
from rest_framework.decorators import action
from rest_framework.exceptions import NotFound
from rest_framework.response import Response

from planora_core.clients.api.serializers import (
    ClientCreateSerializer,
    ClientSerializer,
    MemberCreateSerializer,
    MemberUpdateSerializer,
)
from planora_core.clients.permissions import ClientPermission
from planora_core.clients.selectors import get_client, list_clients, list_members
from planora_core.clients.services import ClientService
from planora_core.common.api.pagination import paginate
from planora_core.iam.context import get_identity


class ClientViewSet(viewsets.ViewSet):
    permission_classes = [ClientPermission]
    lookup_value_regex = r"[0-9a-fA-F-]{36}"

    def list(self, request):
        business_id = get_identity(request).require_business_id()
        qs = list_clients(business_id=business_id, params=request.query_params)
        return paginate(request, qs, ClientSerializer)

    def retrieve(self, request, pk=None):
        identity = get_identity(request)
        client = get_client(business_id=identity.require_business_id(), client_id=pk)
        if identity.is_client and client.user_id != identity.user_id:
            raise NotFound("Client not found")
        return Response(ClientSerializer(client).data)

    def create(self, request):
        business_id = get_identity(request).require_business_id()
        s = ClientCreateSerializer(data=request.data)
        s.is_valid(raise_exception=True)

        client = ClientService.create_client(business_id=business_id, created_by_staff=True, **s.validated_data)
        return Response(ClientSerializer(client).data, status=status.HTTP_201_CREATED)

    @action(detail=True, methods=["post"])
    def deactivate(self, request, pk=None):
        business_id = get_identity(request).require_business_id()
        client = ClientService.deactivate_client(business_id=business_id, client_id=pk)
        return Response(ClientSerializer(client).data, status=status.HTTP_200_OK)

    # ----------------------------
    # Members of the caller's own account
    # ----------------------------
    @action(detail=False, methods=["get", "post"])
    def members(self, request):
        identity = get_identity(request)
        business_id = identity.require_business_id()

        if request.method == "GET":
            data = list_members(user_id=identity.user_id, business_id=business_id)
            return Response(
                {
                    "primary": ClientSerializer(data["primary"]).data if data["primary"] else None,
                    "members": ClientSerializer(data["members"], many=True).data,
                }
            )

        s = MemberCreateSerializer(data=request.data)
        s.is_valid(raise_exception=True)
        member = ClientService.add_member(business_id=business_id, user_id=identity.user_id, data=s.validated_data)
        return Response(
            {"message": "Member added successfully", "member": ClientSerializer(member).data},
            status=status.HTTP_201_CREATED,
        )

    @action(detail=False, methods=["patch", "delete"], url_path=r"members/(?P<member_id>[0-9a-fA-F-]{36})")
    def member_detail(self, request, member_id=None):
        identity = get_identity(request)
        business_id = identity.require_business_id()

        if request.method == "DELETE":
            ClientService.remove_member(business_id=business_id, user_id=identity.user_id, member_id=member_id)
            return Response({"message": "Member removed successfully"}, status=status.HTTP_200_OK)

        # unknown keys (is_primary, user_id, ...) are dropped by the serializer
        s = MemberUpdateSerializer(data=request.data)
        s.is_valid(raise_exception=True)
        member = ClientService.update_member(
            business_id=business_id,
            user_id=identity.user_id,
            member_id=member_id,
            data=s.validated_data,
        )
        return Response(
            {"message": "Member updated successfully", "member": ClientSerializer(member).data},
            status=status.HTTP_200_OK,
        )
