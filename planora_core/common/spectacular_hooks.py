# planora_core/common/spectacular_hooks.py
from __future__ import annotations

PRIMARY_PREFIX = "/api/v1/"
ALIAS_PREFIX = "/api/"


def preprocess_exclude_legacy_api(endpoints):
    """
    Document /api/v1/ only. The unversioned /api/ alias mounts the same router,
    so documenting it would duplicate every operation.
    """
    return [
        endpoint
        for endpoint in endpoints
        if endpoint[0].startswith(PRIMARY_PREFIX) or not endpoint[0].startswith(ALIAS_PREFIX)
    ]
