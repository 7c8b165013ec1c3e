# planora_core/iam/api/schema_serializers.py
from __future__ import annotations

from rest_framework import serializers


class LoginRequestSerializer(serializers.Serializer):
    # either username or email
    username = serializers.CharField(required=False)
    email = serializers.EmailField(required=False)
    password = serializers.CharField()


class RefreshResponseSerializer(serializers.Serializer):
    detail = serializers.CharField()


class LogoutResponseSerializer(serializers.Serializer):
    detail = serializers.CharField()


class BusinessAssociationSerializer(serializers.Serializer):
    association_id = serializers.UUIDField()
    business_id = serializers.UUIDField()
    business_name = serializers.CharField()
    role = serializers.CharField()
    permissions = serializers.DictField(child=serializers.BooleanField())


class CurrentBusinessSerializer(serializers.Serializer):
    business_id = serializers.UUIDField()
    business_name = serializers.CharField()
    role = serializers.CharField()


class IdentityContextSerializer(serializers.Serializer):
    user_id = serializers.IntegerField()
    email = serializers.CharField(allow_blank=True)
    role = serializers.CharField()
    business_id = serializers.UUIDField(allow_null=True)
    current_business_id = serializers.UUIDField(allow_null=True)
    business_associations = BusinessAssociationSerializer(many=True)
    current_business = CurrentBusinessSerializer(allow_null=True)
    is_fixture = serializers.BooleanField()


class LoginResponseSerializer(serializers.Serializer):
    detail = serializers.CharField()
    access = serializers.CharField()
    refresh = serializers.CharField()
    identity = IdentityContextSerializer()


class MeResponseSerializer(serializers.Serializer):
    identity = IdentityContextSerializer()
    businesses = serializers.ListField(child=serializers.DictField())


class SwitchBusinessRequestSerializer(serializers.Serializer):
    business_id = serializers.UUIDField()


class SwitchBusinessResponseSerializer(serializers.Serializer):
    message = serializers.CharField()
    current_business = CurrentBusinessSerializer()
