"""Install the built-in plugins."""
from django.db import migrations


def seed(apps, schema_editor):
    from plugins.services import ensure_default_plugins
    ensure_default_plugins(apps.get_model("plugins", "Plugin"))


class Migration(migrations.Migration):
    dependencies = [
        ("plugins", "0001_initial"),
    ]

    operations = [
        migrations.RunPython(seed, migrations.RunPython.noop),
    ]
