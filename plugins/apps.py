from django.apps import AppConfig


class PluginsConfig(AppConfig):
    """Switchable features of the admin UI and their configuration."""

    default_auto_field = "django.db.models.BigAutoField"
    name = "plugins"
