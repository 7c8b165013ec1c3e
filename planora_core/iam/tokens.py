# planora_core/iam/tokens.py
from __future__ import annotations

from rest_framework_simplejwt.serializers import TokenObtainPairSerializer
from rest_framework_simplejwt.tokens import RefreshToken

from planora_core.iam.services.profiles import get_or_create_profile


class PlanoraTokenObtainPairSerializer(TokenObtainPairSerializer):
    """Adds the platform role claim next to the user id claim."""

    @classmethod
    def get_token(cls, user):
        token = super().get_token(user)
        token["role"] = get_or_create_profile(user).role
        return token


def issue_tokens_for(user) -> dict[str, str]:
    refresh = PlanoraTokenObtainPairSerializer.get_token(user)
    return {"refresh": str(refresh), "access": str(refresh.access_token)}


__all__ = ["PlanoraTokenObtainPairSerializer", "RefreshToken", "issue_tokens_for"]
