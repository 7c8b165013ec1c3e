# planora_core/common/models.py
from __future__ import annotations

import uuid
from django.db import models


class TimeStampedModel(models.Model):
    """
    Standard timestamps for all entities.
    """
    created_at = models.DateTimeField(auto_now_add=True, db_index=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        abstract = True


class BusinessScopedModel(TimeStampedModel):
    """
    Enforces business (tenant) scope at the data layer.
    The JWT gate resolves request scope; this enforces persistence scope.
    Rows go away only through the Business cascade delete.
    """
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    business = models.ForeignKey("businesses.Business", on_delete=models.CASCADE, related_name="+")

    class Meta:
        abstract = True
