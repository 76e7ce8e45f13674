"""
Serializers for the events app.

`EventSerializer` validates input for create/update and renders events
with their owner/author names and the platform statuses of the current
version.  Versioning itself is handled in ``events.services``.
"""
from django.contrib.auth import get_user_model
from rest_framework import serializers

from .models import (
    IMPLEMENTATION_STATUS_CHOICES,
    PLATFORM_CHOICES,
    VALIDATION_STATUS_CHOICES,
    Category,
    Comment,
    Event,
    EventPlatformStatus,
    EventVersion,
    PropertyTemplate,
    StatusHistory,
)

User = get_user_model()


def _display_name(user):
    if user is None:
        return None
    profile = getattr(user, "profile", None)
    return (profile.name if profile and profile.name else None) or user.email or user.username


class CategoryNameField(serializers.Field):
    """Reads as the category name; writes a trimmed, non-empty name."""

    def to_representation(self, value):
        return value.name if isinstance(value, Category) else value

    def to_internal_value(self, data):
        if not isinstance(data, str) or not data.strip():
            raise serializers.ValidationError("Event category is required.")
        return data.strip()


class PropertySerializer(serializers.Serializer):
    name = serializers.CharField(max_length=255)
    type = serializers.CharField(max_length=64, default="string")
    required = serializers.BooleanField(default=False)
    description = serializers.CharField(allow_blank=True, default="")


class CategorySerializer(serializers.ModelSerializer):
    class Meta:
        model = Category
        fields = ["id", "name", "created_at"]
        read_only_fields = ["id", "created_at"]

    def validate_name(self, value):
        value = value.strip()
        if not value:
            raise serializers.ValidationError("Category name is required.")
        return value


class StatusHistorySerializer(serializers.ModelSerializer):
    changed_by_name = serializers.SerializerMethodField()

    class Meta:
        model = StatusHistory
        fields = ["id", "platform_status", "status_type", "old_status", "new_status",
                  "changed_by", "changed_by_name", "comment", "jira_link", "created_at"]
        read_only_fields = fields

    def get_changed_by_name(self, obj):
        return _display_name(obj.changed_by)


class EventPlatformStatusSerializer(serializers.ModelSerializer):
    class Meta:
        model = EventPlatformStatus
        fields = ["id", "event", "version_number", "platform", "jira_link",
                  "implementation_status", "validation_status", "created_at", "updated_at"]
        read_only_fields = fields


class EventPlatformStatusWithHistorySerializer(EventPlatformStatusSerializer):
    history = StatusHistorySerializer(many=True, read_only=True)

    class Meta(EventPlatformStatusSerializer.Meta):
        fields = EventPlatformStatusSerializer.Meta.fields + ["history"]
        read_only_fields = fields


class PlatformStatusCreateSerializer(serializers.Serializer):
    platform = serializers.ChoiceField(choices=PLATFORM_CHOICES)
    jira_link = serializers.CharField(required=False, allow_blank=True, max_length=500, default="")
    implementation_status = serializers.ChoiceField(choices=IMPLEMENTATION_STATUS_CHOICES, default="draft")
    validation_status = serializers.ChoiceField(choices=VALIDATION_STATUS_CHOICES, default="pending")


class PlatformStatusUpdateSerializer(serializers.Serializer):
    version_number = serializers.IntegerField(required=False, min_value=1)
    jira_link = serializers.CharField(required=False, allow_blank=True, max_length=500)
    implementation_status = serializers.ChoiceField(choices=IMPLEMENTATION_STATUS_CHOICES, required=False)
    validation_status = serializers.ChoiceField(choices=VALIDATION_STATUS_CHOICES, required=False)
    status_comment = serializers.CharField(required=False, allow_blank=True)
    status_jira_link = serializers.CharField(required=False, allow_blank=True, max_length=500)


class EventSerializer(serializers.ModelSerializer):
    category = CategoryNameField()
    platforms = serializers.ListField(child=serializers.ChoiceField(choices=PLATFORM_CHOICES), required=False)
    properties = PropertySerializer(many=True, required=False)
    owner = serializers.PrimaryKeyRelatedField(queryset=User.objects.all(), allow_null=True, required=False)
    owner_name = serializers.SerializerMethodField()
    author_name = serializers.SerializerMethodField()
    platform_statuses = serializers.SerializerMethodField()
    change_description = serializers.CharField(write_only=True, required=False, allow_blank=True)

    class Meta:
        model = Event
        fields = [
            "id", "category", "block", "action", "action_description", "name",
            "value_description", "owner", "owner_name", "author", "author_name",
            "platforms", "properties", "notes", "current_version", "platform_statuses",
            "change_description", "created_at", "updated_at",
        ]
        read_only_fields = ["id", "author", "current_version", "created_at", "updated_at"]
        # (category, action) uniqueness is checked when the event is saved.
        validators = []
        extra_kwargs = {"action": {"allow_blank": False}}

    def get_owner_name(self, obj):
        return _display_name(obj.owner)

    def get_author_name(self, obj):
        return _display_name(obj.author)

    def get_platform_statuses(self, obj):
        # Uses the prefetched statuses when the view provides them.
        statuses = [s for s in obj.platform_statuses.all() if s.version_number == obj.current_version]
        statuses.sort(key=lambda s: s.platform)
        return EventPlatformStatusSerializer(statuses, many=True).data

    def validate_action(self, value):
        value = value.strip()
        if not value:
            raise serializers.ValidationError("Event action is required.")
        return value


class EventVersionSerializer(serializers.ModelSerializer):
    owner_name = serializers.SerializerMethodField()
    author_name = serializers.SerializerMethodField()

    class Meta:
        model = EventVersion
        fields = [
            "id", "event", "version", "category_name", "block", "action", "action_description",
            "name", "value_description", "owner", "owner_name", "platforms", "properties", "notes",
            "change_description", "author", "author_name", "created_at",
        ]
        read_only_fields = fields

    def get_owner_name(self, obj):
        return _display_name(obj.owner)

    def get_author_name(self, obj):
        return _display_name(obj.author)


class CommentSerializer(serializers.ModelSerializer):
    author = serializers.CharField(required=False, allow_blank=True, max_length=255)

    class Meta:
        model = Comment
        fields = ["id", "event", "author", "user", "content", "created_at"]
        read_only_fields = ["id", "event", "user", "created_at"]
        extra_kwargs = {"content": {"allow_blank": False}}


class PropertyTemplateSerializer(serializers.ModelSerializer):
    class Meta:
        model = PropertyTemplate
        fields = ["id", "dimension", "name", "description", "example_data", "category",
                  "created_at", "updated_at"]
        read_only_fields = ["id", "created_at", "updated_at"]


class ImportRowSerializer(serializers.Serializer):
    """One row of a bulk import, as produced by the CSV parser or sent by a client."""
    platforms = serializers.ListField(child=serializers.ChoiceField(choices=PLATFORM_CHOICES), default=list)
    block = serializers.CharField(allow_blank=True, default="")
    action_description = serializers.CharField(allow_blank=True, default="")
    category = serializers.CharField(allow_blank=True, default="")
    action = serializers.CharField(allow_blank=True, default="")
    name = serializers.CharField(allow_blank=True, allow_null=True, default="")
    value_description = serializers.CharField(allow_blank=True, allow_null=True, default="")
    properties = PropertySerializer(many=True, default=list)


def clean_import_rows(rows):
    """Validate raw import rows; returns (valid rows, error messages)."""
    if not isinstance(rows, list):
        raise serializers.ValidationError({"events": ["Expected a list of events."]})
    valid, errors = [], []
    for number, row in enumerate(rows, start=1):
        serializer = ImportRowSerializer(data=row)
        if serializer.is_valid():
            data = dict(serializer.validated_data)
            data["properties"] = [dict(p) for p in data["properties"]]
            data["name"] = data.get("name") or ""
            data["value_description"] = data.get("value_description") or ""
            valid.append(data)
        else:
            errors.append(f"Row {number}: {serializer.errors}")
    return valid, errors
