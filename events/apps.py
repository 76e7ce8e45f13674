from django.apps import AppConfig


class EventsConfig(AppConfig):
    """Tracking plan: events, versions, platform statuses, comments and property templates."""

    default_auto_field = "django.db.models.BigAutoField"
    name = "events"
