from django.apps import AppConfig
from django.conf import settings
from django.core.exceptions import ImproperlyConfigured


class CommonConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"
    name = "planora_core.common"

    def ready(self) -> None:
        # The header-selected fixture identity must never be reachable in production.
        if getattr(settings, "DJANGO_ENV", "local") == "prod" and getattr(settings, "FIXTURE_IDENTITY_ENABLED", False):
            raise ImproperlyConfigured("FIXTURE_IDENTITY_ENABLED cannot be set when DJANGO_ENV=prod.")
