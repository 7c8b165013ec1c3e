from django.contrib import admin

from planora_core.scheduling.models import Session, SessionEnrollment, WaitlistEntry


class SessionEnrollmentInline(admin.TabularInline):
    model = SessionEnrollment
    extra = 0


class WaitlistEntryInline(admin.TabularInline):
    model = WaitlistEntry
    extra = 0


@admin.register(Session)
class SessionAdmin(admin.ModelAdmin):
    list_display = ("class_offering", "business", "date", "day_of_week", "start_time", "status", "is_available_for_catch_up")
    list_filter = ("status", "is_recurring", "is_available_for_catch_up", "business")
    inlines = [SessionEnrollmentInline, WaitlistEntryInline]
    ordering = ("-date", "start_time")
