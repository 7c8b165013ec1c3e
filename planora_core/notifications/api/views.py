# planora_core/notifications/api/views.py
from __future__ import annotations

from rest_framework import status, viewsets
from rest_framework.decorators import action
from rest_framework.response import Response

from planora_core.common.api.pagination import paginate
from planora_core.iam.context import get_identity
from planora_core.notifications.api.serializers import NotificationSerializer
from planora_core.notifications.permissions import NotificationPermission
from planora_core.notifications.selectors import list_notifications
from planora_core.notifications.services import NotificationService


class NotificationViewSet(viewsets.ViewSet):
    permission_classes = [NotificationPermission]
    lookup_value_regex = r"[0-9a-fA-F-]{36}"

    def list(self, request):
        business_id = get_identity(request).require_business_id()
        qs = list_notifications(business_id=business_id, params=request.query_params)
        return paginate(request, qs, NotificationSerializer)

    @action(detail=True, methods=["post"])
    def read(self, request, pk=None):
        n = NotificationService.mark_read(business_id=get_identity(request).require_business_id(), notification_id=pk)
        return Response(NotificationSerializer(n).data, status=status.HTTP_200_OK)
