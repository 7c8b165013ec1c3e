# planora_core/catchup/api/views.py
from __future__ import annotations

from rest_framework import status, viewsets
from rest_framework.decorators import action
from rest_framework.exceptions import PermissionDenied
from rest_framework.response import Response

from planora_core.catchup.api.serializers import (
    BookCatchUpSerializer,
    CancellationCreditSerializer,
    ClientGateSerializer,
    OpportunitiesQuerySerializer,
)
from planora_core.catchup.permissions import CatchUpPermission
from planora_core.catchup.selectors import (
    credit_count,
    list_catch_up_opportunities,
    list_catch_up_requests,
    list_pending_catch_up_approvals,
)
from planora_core.catchup.services import CatchUpService
from planora_core.clients.selectors import get_client
from planora_core.iam.context import get_identity
from planora_core.scheduling.api.serializers import (
    ClientSessionSerializer,
    SessionEnrollmentSerializer,
    SessionSerializer,
)

_UUID = r"[0-9a-fA-F-]{36}"


class CatchUpViewSet(viewsets.ViewSet):
    permission_classes = [CatchUpPermission]

    # ----------------------------
    # Admin review
    # ----------------------------
    @action(detail=False, methods=["get"])
    def requests(self, request):
        business_id = get_identity(request).require_business_id()
        items = list_catch_up_requests(business_id=business_id)
        return Response({"count": len(items), "results": items})

    @action(detail=False, methods=["get"])
    def pending(self, request):
        business_id = get_identity(request).require_business_id()
        qs = list_pending_catch_up_approvals(business_id=business_id)
        return Response(CancellationCreditSerializer(qs, many=True).data)

    @action(detail=False, methods=["post"], url_path=rf"clients/(?P<client_id>{_UUID})/approve")
    def approve_client(self, request, client_id=None):
        identity = get_identity(request)
        client = CatchUpService.approve_client(
            business_id=identity.require_business_id(),
            client_id=client_id,
            actor_user_id=identity.user_id,
        )
        return Response(ClientGateSerializer(client).data, status=status.HTTP_200_OK)

    @action(detail=False, methods=["post"], url_path=rf"clients/(?P<client_id>{_UUID})/reject")
    def reject_client(self, request, client_id=None):
        identity = get_identity(request)
        client = CatchUpService.reject_client(
            business_id=identity.require_business_id(),
            client_id=client_id,
            actor_user_id=identity.user_id,
        )
        return Response(ClientGateSerializer(client).data, status=status.HTTP_200_OK)

    @action(detail=False, methods=["post"], url_path=rf"cancellations/(?P<notification_id>{_UUID})/approve")
    def approve_cancellation(self, request, notification_id=None):
        identity = get_identity(request)
        n = CatchUpService.approve_cancellation(
            business_id=identity.require_business_id(),
            notification_id=notification_id,
            actor_user_id=identity.user_id,
        )
        return Response(CancellationCreditSerializer(n).data, status=status.HTTP_200_OK)

    @action(detail=False, methods=["post"], url_path=rf"cancellations/(?P<notification_id>{_UUID})/reject")
    def reject_cancellation(self, request, notification_id=None):
        identity = get_identity(request)
        n = CatchUpService.reject_cancellation(
            business_id=identity.require_business_id(),
            notification_id=notification_id,
            actor_user_id=identity.user_id,
        )
        return Response(CancellationCreditSerializer(n).data, status=status.HTTP_200_OK)

    # ----------------------------
    # Client side
    # ----------------------------
    @action(detail=False, methods=["get"])
    def opportunities(self, request):
        identity = get_identity(request)
        q = OpportunitiesQuerySerializer(data=request.query_params)
        q.is_valid(raise_exception=True)

        client = get_client(business_id=identity.require_business_id(), client_id=q.validated_data["client_id"])
        if client.user_id != identity.user_id and not identity.is_staff_of(client.business_id):
            raise PermissionDenied("Access denied")

        sessions = list_catch_up_opportunities(client=client)
        if identity.is_client:
            opportunities = ClientSessionSerializer(sessions, many=True, context={"user_id": identity.user_id}).data
        else:
            opportunities = SessionSerializer(sessions, many=True).data
        return Response(
            {
                "client_id": str(client.id),
                "catch_up_approval_status": client.catch_up_approval_status,
                "credits": credit_count(business_id=client.business_id, client_id=client.id),
                "opportunities": opportunities,
            }
        )

    @action(detail=False, methods=["post"])
    def book(self, request):
        s = BookCatchUpSerializer(data=request.data)
        s.is_valid(raise_exception=True)

        booking = CatchUpService.book_catch_up(
            identity=get_identity(request),
            session_id=s.validated_data["session_id"],
            client_id=s.validated_data["client_id"],
        )
        return Response(
            {
                "message": "Catch-up lesson booked successfully",
                "enrollment": SessionEnrollmentSerializer(booking.enrollment).data,
                "credit": CancellationCreditSerializer(booking.credit).data,
            },
            status=status.HTTP_201_CREATED,
        )
