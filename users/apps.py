from django.apps import AppConfig


class UsersConfig(AppConfig):
    """Accounts, roles, login logs and first-run setup."""

    default_auto_field = "django.db.models.BigAutoField"
    name = "users"

    def ready(self):
        from . import signals  # noqa
