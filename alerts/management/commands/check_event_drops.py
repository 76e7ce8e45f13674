from django.core.management.base import BaseCommand, CommandError

from alerts.detection import AlertCheckError, run_drop_check


class Command(BaseCommand):
    help = "Compare yesterday's event volumes with the day before and create alerts for large drops"

    def handle(self, *args, **options):
        try:
            for progress in run_drop_check():
                if progress["status"] == "started":
                    self.stdout.write(f"Checking {progress['total']} event/platform pair(s)...")
                elif progress["status"] == "progress":
                    self.stdout.write(f"  {progress['completed']}/{progress['total']} done")
                else:
                    self.stdout.write(self.style.SUCCESS(
                        f"Checked {progress['events_checked']} event(s), "
                        f"created {progress['alerts_created']} alert(s)"
                    ))
        except AlertCheckError as exc:
            raise CommandError(str(exc))
