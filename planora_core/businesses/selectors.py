# planora_core/businesses/selectors.py
from __future__ import annotations

from uuid import UUID

from django.core.exceptions import ValidationError as DjangoValidationError
from django.db.models import QuerySet
from rest_framework.exceptions import NotFound

from planora_core.businesses.models import Business


def business_qs() -> QuerySet[Business]:
    return Business.objects.all()


def get_business(*, business_id: UUID) -> Business:
    try:
        return Business.objects.get(id=business_id)
    except (Business.DoesNotExist, ValueError, DjangoValidationError):
        raise NotFound("Business not found")
