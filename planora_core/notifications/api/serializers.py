# planora_core/notifications/api/serializers.py
from __future__ import annotations

from rest_framework import serializers

from planora_core.notifications.models import Notification


class NotificationSerializer(serializers.ModelSerializer):
    class Meta:
        model = Notification
        fields = [
            "id",
            "business_id",
            "type",
            "message",
            "client_id",
            "session_id",
            "is_read",
            "catch_up_approval_status",
            "catch_up_approved_by_id",
            "catch_up_approved_at",
            "consumed_at",
            "consumed_by_session_id",
            "created_at",
        ]
        read_only_fields = fields
