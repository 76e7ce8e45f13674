from django.contrib import admin

from .models import Alert


@admin.register(Alert)
class AlertAdmin(admin.ModelAdmin):
    list_display = ("event_category", "event_action", "platform", "drop_percent",
                    "yesterday_count", "day_before_count", "checked_at", "is_resolved")
    list_filter = ("platform", "is_resolved")
    search_fields = ("event_category", "event_action")
    list_editable = ("is_resolved",)
