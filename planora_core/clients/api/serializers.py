# planora_core/clients/api/serializers.py
from __future__ import annotations

from rest_framework import serializers

from planora_core.clients.models import Client, Relationship


class ClientSerializer(serializers.ModelSerializer):
    email = serializers.CharField(source="user.email", read_only=True)

    class Meta:
        model = Client
        fields = [
            "id",
            "business_id",
            "user_id",
            "email",
            "is_primary",
            "relationship",
            "added_by_id",
            "first_name",
            "last_name",
            "phone",
            "date_of_birth",
            "emergency_contact",
            "medical_info",
            "address",
            "preferences",
            "is_active",
            "joined_date",
            "last_activity",
            "cancellation_count",
            "has_cancelled_before",
            "catch_up_approval_status",
            "catch_up_approved_by_id",
            "catch_up_approved_at",
            "created_at",
            "updated_at",
        ]
        read_only_fields = fields


class _ClientProfileSerializer(serializers.Serializer):
    first_name = serializers.CharField(max_length=120)
    last_name = serializers.CharField(max_length=120)
    phone = serializers.CharField(max_length=32, required=False, allow_blank=True)
    date_of_birth = serializers.DateField(required=False, allow_null=True)
    emergency_contact = serializers.DictField(required=False)
    medical_info = serializers.DictField(required=False)
    address = serializers.DictField(required=False)
    preferences = serializers.DictField(required=False)


class ClientCreateSerializer(_ClientProfileSerializer):
    user_id = serializers.IntegerField()
    is_primary = serializers.BooleanField(required=False, allow_null=True, default=None)
    relationship = serializers.ChoiceField(choices=Relationship.choices, required=False)


class MemberCreateSerializer(_ClientProfileSerializer):
    relationship = serializers.ChoiceField(choices=Relationship.choices, required=False)


class MemberUpdateSerializer(_ClientProfileSerializer):
    relationship = serializers.ChoiceField(choices=Relationship.choices, required=False)

    def __init__(self, *args, **kwargs):
        kwargs.setdefault("partial", True)
        super().__init__(*args, **kwargs)
