# planora_core/clients/selectors.py
from __future__ import annotations

from uuid import UUID

from django.core.exceptions import ValidationError as DjangoValidationError
from django.db.models import Q, QuerySet
from rest_framework.exceptions import NotFound

from planora_core.clients.models import Client


def list_clients(*, business_id: UUID, params=None) -> QuerySet[Client]:
    params = params or {}
    qs = Client.objects.filter(business_id=business_id).select_related("user")

    if params.get("include_inactive") not in ("1", "true", "True"):
        qs = qs.filter(is_active=True)

    q = (params.get("q") or "").strip()
    if q:
        qs = qs.filter(Q(first_name__icontains=q) | Q(last_name__icontains=q) | Q(user__email__icontains=q))

    return qs.order_by("last_name", "first_name")


def get_client(*, business_id: UUID, client_id: UUID) -> Client:
    try:
        return Client.objects.select_related("user").get(id=client_id, business_id=business_id)
    except (Client.DoesNotExist, ValueError, DjangoValidationError):
        raise NotFound("Client not found")


def list_members(*, user_id: int, business_id: UUID) -> dict:
    """
    Active client rows of one login within one business:
    {"primary": Client | None, "members": [Client, ...]} (members oldest first).
    """
    rows = list(
        Client.objects.filter(user_id=user_id, business_id=business_id, is_active=True).order_by(
            "-is_primary", "created_at"
        )
    )
    primary = next((c for c in rows if c.is_primary), None)
    members = [c for c in rows if not c.is_primary]
    return {"primary": primary, "members": members}


def client_ids_for_user(*, user_id: int, business_id: UUID) -> list[UUID]:
    return list(
        Client.objects.filter(user_id=user_id, business_id=business_id, is_active=True).values_list("id", flat=True)
    )
