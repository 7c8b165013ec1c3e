from django.contrib import admin

from planora_core.notifications.models import Notification


@admin.register(Notification)
class NotificationAdmin(admin.ModelAdmin):
    list_display = ("type", "business", "client", "catch_up_approval_status", "is_read", "created_at")
    list_filter = ("type", "catch_up_approval_status", "is_read", "business")
    search_fields = ("message",)
    ordering = ("-created_at",)
