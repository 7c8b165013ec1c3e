# planora_core/employees/api/serializers.py
from __future__ import annotations

from rest_framework import serializers

from planora_core.employees.models import Employee


class EmployeeSerializer(serializers.ModelSerializer):
    email = serializers.CharField(source="user.email", read_only=True)

    class Meta:
        model = Employee
        fields = [
            "id",
            "business_id",
            "user_id",
            "email",
            "first_name",
            "last_name",
            "phone",
            "bio",
            "specializations",
            "hourly_rate",
            "hire_date",
            "is_active",
            "status",
            "approved_by_id",
            "approved_at",
            "rejection_reason",
            "created_at",
            "updated_at",
        ]
        read_only_fields = fields


class EmployeeCreateSerializer(serializers.Serializer):
    user_id = serializers.IntegerField()
    first_name = serializers.CharField(max_length=120)
    last_name = serializers.CharField(max_length=120)
    phone = serializers.CharField(max_length=32, required=False, allow_blank=True)
    bio = serializers.CharField(required=False, allow_blank=True)
    specializations = serializers.ListField(child=serializers.CharField(), required=False)
    hourly_rate = serializers.DecimalField(max_digits=8, decimal_places=2, required=False, allow_null=True)
    hire_date = serializers.DateField(required=False, allow_null=True)


class EmployeeRejectSerializer(serializers.Serializer):
    reason = serializers.CharField(required=False, allow_blank=True)
