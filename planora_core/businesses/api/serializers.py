# planora_core/businesses/api/serializers.py
from __future__ import annotations

from rest_framework import serializers

from planora_core.businesses.models import Business, BusinessStatus, SubscriptionTier


class BusinessSerializer(serializers.ModelSerializer):
    class Meta:
        model = Business
        fields = [
            "id",
            "name",
            "email",
            "phone",
            "address",
            "business_type",
            "description",
            "website",
            "admin_user_id",
            "status",
            "is_active",
            "subscription_tier",
            "settings",
            "created_at",
            "updated_at",
        ]
        read_only_fields = fields


class BusinessCreateSerializer(serializers.Serializer):
    name = serializers.CharField(max_length=255)
    email = serializers.EmailField()
    business_type = serializers.CharField(max_length=64)
    phone = serializers.CharField(max_length=32, required=False, allow_blank=True)
    address = serializers.CharField(max_length=255, required=False, allow_blank=True)
    description = serializers.CharField(required=False, allow_blank=True)
    website = serializers.URLField(required=False, allow_blank=True)
    admin_user_id = serializers.IntegerField(required=False, allow_null=True)
    subscription_tier = serializers.ChoiceField(choices=SubscriptionTier.choices, required=False)


class BusinessStatusSerializer(serializers.Serializer):
    status = serializers.ChoiceField(choices=BusinessStatus.choices)
    notes = serializers.CharField(required=False, allow_blank=True)
