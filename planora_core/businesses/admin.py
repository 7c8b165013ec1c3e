# planora_core/businesses/admin.py
from django.contrib import admin

from planora_core.businesses.models import Business


@admin.register(Business)
class BusinessAdmin(admin.ModelAdmin):
    list_display = ("name", "email", "business_type", "status", "is_active", "created_at")
    list_filter = ("status", "is_active", "subscription_tier")
    search_fields = ("name", "email")
    ordering = ("-created_at",)
