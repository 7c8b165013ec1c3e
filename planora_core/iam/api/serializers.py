# planora_core/iam/api/serializers.py
from __future__ import annotations

from rest_framework import serializers

from planora_core.iam.models import BusinessRole, ClientStatus, UserBusiness


class UserBusinessSerializer(serializers.ModelSerializer):
    username = serializers.CharField(source="user.username", read_only=True)
    email = serializers.CharField(source="user.email", read_only=True)
    permissions = serializers.DictField(child=serializers.BooleanField(), read_only=True)

    class Meta:
        model = UserBusiness
        fields = [
            "id",
            "user_id",
            "username",
            "email",
            "business_id",
            "role",
            "is_active",
            "joined_at",
            "permissions",
            "created_at",
            "updated_at",
        ]
        read_only_fields = fields


class AddUserSerializer(serializers.Serializer):
    user_id = serializers.IntegerField()
    role = serializers.ChoiceField(choices=BusinessRole.choices)
    is_active = serializers.BooleanField(required=False, allow_null=True, default=None)


class UpdateRoleSerializer(serializers.Serializer):
    role = serializers.ChoiceField(choices=BusinessRole.choices)


class ApproveRequestSerializer(serializers.Serializer):
    role = serializers.ChoiceField(choices=BusinessRole.choices, required=False)


class ClientStatusSerializer(serializers.Serializer):
    client_status = serializers.ChoiceField(choices=[ClientStatus.APPROVED, ClientStatus.SUSPENDED])
