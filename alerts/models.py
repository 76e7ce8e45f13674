"""
Models for the alerts app.

An `Alert` records one significant drop of an event's daily volume on one
platform.  Category and action are copied from the event so the alert
still reads correctly after the event is renamed or deleted.
"""
from django.db import models
from django.utils import timezone

from events.models import PLATFORM_CHOICES, Event


class Alert(models.Model):
    event = models.ForeignKey(Event, on_delete=models.SET_NULL, null=True, blank=True, related_name="alerts")
    platform = models.CharField(max_length=16, choices=PLATFORM_CHOICES)
    event_category = models.CharField(max_length=255)
    event_action = models.CharField(max_length=255)
    yesterday_count = models.PositiveIntegerField(default=0)
    day_before_count = models.PositiveIntegerField(default=0)
    drop_percent = models.IntegerField()
    checked_at = models.DateTimeField(default=timezone.now, db_index=True)
    is_resolved = models.BooleanField(default=False)

    class Meta:
        ordering = ["-checked_at", "-id"]

    def __str__(self) -> str:
        return f"{self.event_category} > {self.event_action} [{self.platform}] -{self.drop_percent}%"
