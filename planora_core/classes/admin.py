from django.contrib import admin

from planora_core.classes.models import ClassOffering


@admin.register(ClassOffering)
class ClassOfferingAdmin(admin.ModelAdmin):
    list_display = ("title", "business", "class_type", "max_capacity", "is_active")
    list_filter = ("class_type", "is_active", "business")
    search_fields = ("title",)
