from django.apps import AppConfig


class CatchUpConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"
    name = "planora_core.catchup"

    def ready(self) -> None:
        from planora_core.catchup import subscribers  # noqa: F401
