# planora_core/scheduling/api/serializers.py
from __future__ import annotations

from rest_framework import serializers

from planora_core.scheduling.constants import DayOfWeek, EnrollmentStatus, RecurrenceFrequency, SessionStatus
from planora_core.scheduling.models import Session, SessionEnrollment, WaitlistEntry
from planora_core.scheduling.recurrence import is_unschedulable, projected_date


class SessionEnrollmentSerializer(serializers.ModelSerializer):
    client_name = serializers.CharField(source="client.full_name", read_only=True)

    class Meta:
        model = SessionEnrollment
        fields = ["client_id", "client_name", "enrollment_date", "status", "is_catch_up"]
        read_only_fields = fields


class WaitlistEntrySerializer(serializers.ModelSerializer):
    client_name = serializers.CharField(source="client.full_name", read_only=True)

    class Meta:
        model = WaitlistEntry
        fields = ["client_id", "client_name", "added_date"]
        read_only_fields = fields


class SessionSerializer(serializers.ModelSerializer):
    class_title = serializers.CharField(source="class_offering.title", read_only=True)
    max_capacity = serializers.IntegerField(source="class_offering.max_capacity", read_only=True)
    enrolled_clients = SessionEnrollmentSerializer(source="enrollments", many=True, read_only=True)
    waitlist = WaitlistEntrySerializer(many=True, read_only=True)
    projected_date = serializers.SerializerMethodField()
    is_unschedulable = serializers.SerializerMethodField()

    class Meta:
        model = Session
        fields = [
            "id",
            "business_id",
            "class_offering_id",
            "class_title",
            "instructor_id",
            "date",
            "start_time",
            "end_time",
            "day_of_week",
            "is_recurring",
            "recurrence_frequency",
            "recurrence_end_date",
            "projected_date",
            "is_unschedulable",
            "status",
            "notes",
            "max_capacity",
            "enrolled_clients",
            "waitlist",
            "is_available_for_catch_up",
            "version",
            "created_at",
            "updated_at",
        ]
        read_only_fields = fields

    def get_projected_date(self, obj):
        d = projected_date(obj)
        return d.isoformat() if d else None

    def get_is_unschedulable(self, obj) -> bool:
        return is_unschedulable(obj)


class ClientSessionSerializer(SessionSerializer):
    """
    Client-facing view: roster and waitlist are reduced to the caller's own
    client records (context["user_id"]); other clients stay hidden.
    """

    enrolled_clients = serializers.SerializerMethodField()
    waitlist = serializers.SerializerMethodField()
    enrolled_count = serializers.SerializerMethodField()

    class Meta(SessionSerializer.Meta):
        fields = SessionSerializer.Meta.fields + ["enrolled_count"]
        read_only_fields = fields

    def _own(self, rows):
        user_id = self.context.get("user_id")
        return [r for r in rows if r.client.user_id == user_id]

    def get_enrolled_clients(self, obj):
        return SessionEnrollmentSerializer(self._own(obj.enrollments.all()), many=True).data

    def get_waitlist(self, obj):
        return WaitlistEntrySerializer(self._own(obj.waitlist.all()), many=True).data

    def get_enrolled_count(self, obj) -> int:
        return len(obj.enrollments.all())


class SessionWriteSerializer(serializers.Serializer):
    class_offering_id = serializers.UUIDField()
    instructor_id = serializers.UUIDField(required=False, allow_null=True)
    date = serializers.DateField(required=False, allow_null=True)
    start_time = serializers.TimeField()
    end_time = serializers.TimeField()
    day_of_week = serializers.ChoiceField(choices=DayOfWeek.choices, required=False, allow_blank=True)
    is_recurring = serializers.BooleanField(required=False, default=False)
    recurrence_frequency = serializers.ChoiceField(
        choices=RecurrenceFrequency.choices, required=False, allow_blank=True
    )
    recurrence_end_date = serializers.DateField(required=False, allow_null=True)
    notes = serializers.CharField(required=False, allow_blank=True)


class ClientRefSerializer(serializers.Serializer):
    client_id = serializers.UUIDField()


class SessionStatusSerializer(serializers.Serializer):
    status = serializers.ChoiceField(choices=SessionStatus.choices)


class EnrollmentStatusSerializer(serializers.Serializer):
    client_id = serializers.UUIDField()
    status = serializers.ChoiceField(choices=EnrollmentStatus.choices)
