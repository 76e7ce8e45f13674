from django.contrib import admin

from .models import Plugin


@admin.register(Plugin)
class PluginAdmin(admin.ModelAdmin):
    list_display = ("id", "name", "version", "is_enabled", "updated_at")
    list_filter = ("is_enabled",)
    search_fields = ("id", "name")
    ordering = ("id",)
