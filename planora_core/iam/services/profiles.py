# planora_core/iam/services/profiles.py
from __future__ import annotations

from planora_core.iam.models import UserProfile, UserRole


def get_or_create_profile(user) -> UserProfile:
    """
    Every authenticated user has exactly one profile.
    Django superusers created outside the seeding command default to super-admin.
    """
    try:
        return user.planora_profile
    except UserProfile.DoesNotExist:
        pass

    default_role = UserRole.SUPER_ADMIN if getattr(user, "is_superuser", False) else UserRole.CLIENT
    profile, _ = UserProfile.objects.get_or_create(user=user, defaults={"role": default_role})
    return profile
