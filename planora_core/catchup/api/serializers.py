# planora_core/catchup/api/serializers.py
from __future__ import annotations

from rest_framework import serializers

from planora_core.notifications.models import Notification


class CancellationCreditSerializer(serializers.ModelSerializer):
    client_name = serializers.CharField(source="client.full_name", read_only=True, default=None)
    class_title = serializers.CharField(source="session.class_offering.title", read_only=True, default=None)
    session_date = serializers.DateField(source="session.date", read_only=True, default=None)

    class Meta:
        model = Notification
        fields = [
            "id",
            "client_id",
            "client_name",
            "session_id",
            "class_title",
            "session_date",
            "message",
            "catch_up_approval_status",
            "catch_up_approved_by_id",
            "catch_up_approved_at",
            "consumed_at",
            "consumed_by_session_id",
            "created_at",
        ]
        read_only_fields = fields


class ClientGateSerializer(serializers.Serializer):
    client_id = serializers.UUIDField(source="id")
    catch_up_approval_status = serializers.CharField(allow_null=True)
    catch_up_approved_by_id = serializers.IntegerField(allow_null=True)
    catch_up_approved_at = serializers.DateTimeField(allow_null=True)
    has_cancelled_before = serializers.BooleanField()
    cancellation_count = serializers.IntegerField()


class OpportunitiesQuerySerializer(serializers.Serializer):
    client_id = serializers.UUIDField()


class BookCatchUpSerializer(serializers.Serializer):
    session_id = serializers.UUIDField()
    client_id = serializers.UUIDField()
