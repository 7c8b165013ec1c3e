from django.contrib import admin

from planora_core.clients.models import Client


@admin.register(Client)
class ClientAdmin(admin.ModelAdmin):
    list_display = ("first_name", "last_name", "business", "is_primary", "relationship", "is_active")
    list_filter = ("is_primary", "is_active", "catch_up_approval_status", "business")
    search_fields = ("first_name", "last_name", "user__email")
    ordering = ("-created_at",)
