# planora_core/classes/selectors.py
from __future__ import annotations

from uuid import UUID

from django.core.exceptions import ValidationError as DjangoValidationError
from django.db.models import QuerySet
from rest_framework.exceptions import NotFound

from planora_core.classes.models import ClassOffering


def list_classes(*, business_id: UUID, params=None) -> QuerySet[ClassOffering]:
    params = params or {}
    qs = ClassOffering.objects.filter(business_id=business_id).select_related("instructor")

    if params.get("include_inactive") not in ("1", "true", "True"):
        qs = qs.filter(is_active=True)

    class_type = params.get("class_type")
    if class_type:
        qs = qs.filter(class_type=class_type)

    return qs.order_by("title")


def get_class(*, business_id: UUID, class_id: UUID) -> ClassOffering:
    try:
        return ClassOffering.objects.select_related("instructor").get(id=class_id, business_id=business_id)
    except (ClassOffering.DoesNotExist, ValueError, DjangoValidationError):
        raise NotFound("Class not found")
