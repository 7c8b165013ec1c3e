# planora_core/classes/api/serializers.py
from __future__ import annotations

from rest_framework import serializers

from planora_core.classes.models import ClassOffering, ClassType


class ClassOfferingSerializer(serializers.ModelSerializer):
    class Meta:
        model = ClassOffering
        fields = [
            "id",
            "business_id",
            "instructor_id",
            "title",
            "description",
            "class_type",
            "duration_minutes",
            "max_capacity",
            "is_active",
            "created_at",
            "updated_at",
        ]
        read_only_fields = fields


class ClassOfferingWriteSerializer(serializers.Serializer):
    title = serializers.CharField(max_length=200)
    description = serializers.CharField(required=False, allow_blank=True)
    class_type = serializers.ChoiceField(choices=ClassType.choices, required=False)
    duration_minutes = serializers.IntegerField(min_value=1, required=False)
    max_capacity = serializers.IntegerField(min_value=1)
    instructor_id = serializers.UUIDField(required=False, allow_null=True)
