from django.core.management.base import BaseCommand

from plugins.defaults import DEFAULT_PLUGINS
from plugins.models import Plugin
from plugins.services import ensure_default_plugins


class Command(BaseCommand):
    help = "Install the built-in plugins that are missing (existing plugins are left untouched)"

    def add_arguments(self, parser):
        parser.add_argument(
            "--dry-run",
            action="store_true",
            help="List the plugins that would be installed without creating them",
        )

    def handle(self, *args, **options):
        if options.get("dry_run"):
            existing = set(Plugin.objects.values_list("id", flat=True))
            missing = [p["id"] for p in DEFAULT_PLUGINS if p["id"] not in existing]
            self.stdout.write(self.style.WARNING("DRY RUN MODE - No changes will be made"))
            if not missing:
                self.stdout.write("All default plugins are installed.")
            for plugin_id in missing:
                self.stdout.write(f"Would install: {plugin_id}")
            return

        created = ensure_default_plugins()
        if created:
            self.stdout.write(self.style.SUCCESS(f"Installed {len(created)} plugin(s): {', '.join(created)}"))
        else:
            self.stdout.write(self.style.SUCCESS("All default plugins are already installed."))
