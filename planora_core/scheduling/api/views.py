# planora_core/scheduling/api/views.py
from __future__ import annotations

from rest_framework import status, viewsets
from rest_framework.decorators import action
from rest_framework.exceptions import NotFound
from rest_framework.response import Response

from planora_core.catchup.selectors import catch_up_opportunities_for_user
from planora_core.employees.selectors import employee_for_user
from planora_core.iam.context import get_identity
from planora_core.scheduling.api.serializers import (
    ClientRefSerializer,
    ClientSessionSerializer,
    EnrollmentStatusSerializer,
    SessionSerializer,
    SessionStatusSerializer,
    SessionWriteSerializer,
)
from planora_core.scheduling.permissions import SessionPermission
from planora_core.scheduling.selectors import (
    catch_up_sessions,
    get_session,
    list_sessions,
    sessions_for_client_user,
    sessions_for_instructor,
)
from planora_core.scheduling.services import SessionService


class SessionViewSet(viewsets.ViewSet):
    """
    Thin API layer: reads via selectors, writes via SessionService.
    Responses re-read the session so roster/waitlist reflect the committed state.
    """

    permission_classes = [SessionPermission]
    lookup_value_regex = r"[0-9a-fA-F-]{36}"

    def _fresh(self, session):
        fresh = get_session(business_id=session.business_id, session_id=session.id)
        identity = get_identity(self.request)
        if identity.is_client:
            return ClientSessionSerializer(fresh, context={"user_id": identity.user_id}).data
        return SessionSerializer(fresh).data

    # ----------------------------
    # Reads
    # ----------------------------
    def list(self, request):
        identity = get_identity(request)
        business_id = identity.require_business_id()
        if identity.is_client:
            qs = sessions_for_client_user(business_id=business_id, user_id=identity.user_id, params=request.query_params)
            return Response(ClientSessionSerializer(qs[:500], many=True, context={"user_id": identity.user_id}).data)

        qs = list_sessions(business_id=business_id, params=request.query_params)
        return Response(SessionSerializer(qs[:500], many=True).data)

    def retrieve(self, request, pk=None):
        identity = get_identity(request)
        business_id = identity.require_business_id()
        session = get_session(business_id=business_id, session_id=pk)
        if identity.is_client:
            own = sessions_for_client_user(business_id=business_id, user_id=identity.user_id)
            if not own.filter(id=session.id).exists():
                raise NotFound("Session not found")
            return Response(ClientSessionSerializer(session, context={"user_id": identity.user_id}).data)
        return Response(SessionSerializer(session).data)

    @action(detail=False, methods=["get"], url_path="catch-up")
    def catch_up(self, request):
        identity = get_identity(request)
        business_id = identity.require_business_id()
        if identity.is_client:
            sessions = catch_up_opportunities_for_user(business_id=business_id, user_id=identity.user_id)
            data = ClientSessionSerializer(sessions, many=True, context={"user_id": identity.user_id}).data
            return Response({"count": len(sessions), "results": data})

        qs = catch_up_sessions(business_id=business_id)
        return Response({"count": qs.count(), "results": SessionSerializer(qs, many=True).data})

    @action(detail=False, methods=["get"])
    def mine(self, request):
        identity = get_identity(request)
        business_id = identity.require_business_id()
        employee = employee_for_user(business_id=business_id, user_id=identity.user_id)
        if employee is None:
            return Response([])
        qs = sessions_for_instructor(business_id=business_id, employee_id=employee.id)
        return Response(SessionSerializer(qs, many=True).data)

    # ----------------------------
    # Session writes
    # ----------------------------
    def create(self, request):
        identity = get_identity(request)
        s = SessionWriteSerializer(data=request.data)
        s.is_valid(raise_exception=True)

        session = SessionService.create_session(
            business_id=identity.require_business_id(),
            actor_user_id=identity.user_id,
            data=s.validated_data,
        )
        return Response(self._fresh(session), status=status.HTTP_201_CREATED)

    def partial_update(self, request, pk=None):
        identity = get_identity(request)
        s = SessionWriteSerializer(data=request.data, partial=True)
        s.is_valid(raise_exception=True)

        session = SessionService.update_session(
            business_id=identity.require_business_id(),
            session_id=pk,
            actor_user_id=identity.user_id,
            data=s.validated_data,
        )
        return Response(self._fresh(session), status=status.HTTP_200_OK)

    def destroy(self, request, pk=None):
        SessionService.delete_session(business_id=get_identity(request).require_business_id(), session_id=pk)
        return Response({"message": "Session deleted successfully"}, status=status.HTTP_200_OK)

    @action(detail=True, methods=["post"], url_path="status")
    def set_status(self, request, pk=None):
        s = SessionStatusSerializer(data=request.data)
        s.is_valid(raise_exception=True)

        session = SessionService.set_session_status(
            business_id=get_identity(request).require_business_id(),
            session_id=pk,
            status=s.validated_data["status"],
        )
        return Response(self._fresh(session), status=status.HTTP_200_OK)

    # ----------------------------
    # Roster
    # ----------------------------
    @action(detail=True, methods=["post"])
    def enroll(self, request, pk=None):
        s = ClientRefSerializer(data=request.data)
        s.is_valid(raise_exception=True)

        outcome = SessionService.enroll_client(
            identity=get_identity(request),
            session_id=pk,
            client_id=s.validated_data["client_id"],
        )
        message = (
            "Class is full. Client added to waitlist." if outcome.is_waitlisted else "Client enrolled successfully"
        )
        return Response(
            {
                "result": outcome.result,
                "message": message,
                "waitlist_position": outcome.waitlist_position,
                "session": self._fresh(outcome.session),
            },
            status=status.HTTP_200_OK,
        )

    @action(detail=True, methods=["post"])
    def cancel(self, request, pk=None):
        s = ClientRefSerializer(data=request.data)
        s.is_valid(raise_exception=True)

        outcome = SessionService.cancel_enrollment(
            identity=get_identity(request),
            session_id=pk,
            client_id=s.validated_data["client_id"],
        )
        return Response(
            {
                "message": "Enrollment cancelled successfully",
                "promoted_client_id": str(outcome.promoted.client_id) if outcome.promoted else None,
                "session": self._fresh(outcome.session),
            },
            status=status.HTTP_200_OK,
        )

    @action(detail=True, methods=["post"], url_path="enrollment-status")
    def enrollment_status(self, request, pk=None):
        s = EnrollmentStatusSerializer(data=request.data)
        s.is_valid(raise_exception=True)

        SessionService.set_enrollment_status(
            business_id=get_identity(request).require_business_id(),
            session_id=pk,
            client_id=s.validated_data["client_id"],
            status=s.validated_data["status"],
        )
        return Response(
            SessionSerializer(get_session(business_id=get_identity(request).business_id, session_id=pk)).data,
            status=status.HTTP_200_OK,
        )
