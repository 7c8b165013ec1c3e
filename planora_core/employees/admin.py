from django.contrib import admin

from planora_core.employees.models import Employee


@admin.register(Employee)
class EmployeeAdmin(admin.ModelAdmin):
    list_display = ("first_name", "last_name", "business", "status", "is_active", "created_at")
    list_filter = ("status", "is_active", "business")
    search_fields = ("first_name", "last_name", "user__email")
    ordering = ("-created_at",)
