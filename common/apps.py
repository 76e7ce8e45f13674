from django.apps import AppConfig


class CommonConfig(AppConfig):
    """Shared helpers: pagination, the outbound HTTP client and its logs."""

    default_auto_field = "django.db.models.BigAutoField"
    name = "common"
