"""
Admin configuration for the events app.

Events are edited through the API so that versioning rules apply; the
admin mostly serves for inspection.
"""
from django.contrib import admin

from .models import Category, Comment, Event, EventPlatformStatus, EventVersion, PropertyTemplate, StatusHistory


class EventVersionInline(admin.TabularInline):
    model = EventVersion
    extra = 0
    fields = ("version", "action", "name", "change_description", "author", "created_at")
    readonly_fields = fields
    can_delete = False


@admin.register(Event)
class EventAdmin(admin.ModelAdmin):
    list_display = ("action", "category", "name", "current_version", "owner", "created_at")
    list_filter = ("category",)
    search_fields = ("action", "name", "category__name", "action_description")
    readonly_fields = ("current_version", "created_at", "updated_at")
    inlines = [EventVersionInline]


@admin.register(Category)
class CategoryAdmin(admin.ModelAdmin):
    list_display = ("name", "created_at")
    search_fields = ("name",)


@admin.register(EventPlatformStatus)
class EventPlatformStatusAdmin(admin.ModelAdmin):
    list_display = ("event", "version_number", "platform", "implementation_status", "validation_status")
    list_filter = ("platform", "implementation_status", "validation_status")


@admin.register(StatusHistory)
class StatusHistoryAdmin(admin.ModelAdmin):
    list_display = ("platform_status", "status_type", "old_status", "new_status", "changed_by", "created_at")
    list_filter = ("status_type",)


@admin.register(Comment)
class CommentAdmin(admin.ModelAdmin):
    list_display = ("event", "author", "created_at")
    search_fields = ("author", "content")


@admin.register(PropertyTemplate)
class PropertyTemplateAdmin(admin.ModelAdmin):
    list_display = ("dimension", "name", "category")
    list_filter = ("category",)
    ordering = ("dimension",)
