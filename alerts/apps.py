from django.apps import AppConfig


class AlertsConfig(AppConfig):
    """Day-over-day event volume monitoring against the analytics API."""

    default_auto_field = "django.db.models.BigAutoField"
    name = "alerts"
