# planora_core/iam/admin.py
from __future__ import annotations

from django.contrib import admin

from planora_core.iam.models import UserBusiness, UserProfile


@admin.register(UserProfile)
class UserProfileAdmin(admin.ModelAdmin):
    list_display = ("id", "user", "role", "client_status", "current_business", "created_at")
    list_filter = ("role", "client_status")
    search_fields = ("user__username", "user__email")
    autocomplete_fields = ("user",)
    ordering = ("-created_at",)


@admin.register(UserBusiness)
class UserBusinessAdmin(admin.ModelAdmin):
    list_display = ("user", "business", "role", "is_active", "joined_at")
    list_filter = ("role", "is_active", "business")
    search_fields = ("user__username", "user__email", "business__name")
    ordering = ("-joined_at",)
