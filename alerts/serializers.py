from rest_framework import serializers

from .models import Alert


class AlertSerializer(serializers.ModelSerializer):
    class Meta:
        model = Alert
        fields = ["id", "event", "platform", "event_category", "event_action", "yesterday_count",
                  "day_before_count", "drop_percent", "checked_at", "is_resolved"]
        read_only_fields = fields


class BulkDeleteSerializer(serializers.Serializer):
    ids = serializers.ListField(child=serializers.IntegerField(min_value=1), allow_empty=False)


class AlertSettingsSerializer(serializers.Serializer):
    """Alert settings as stored in the alerts plugin; the token is write-only."""
    matomo_url = serializers.URLField(required=False, allow_blank=True, max_length=500)
    matomo_token = serializers.CharField(required=False, allow_null=True, allow_blank=True,
                                         write_only=True, trim_whitespace=True)
    matomo_site_id = serializers.CharField(required=False, allow_blank=True, max_length=255)
    drop_threshold = serializers.IntegerField(required=False, min_value=1, max_value=100)
    max_concurrency = serializers.IntegerField(required=False, min_value=1, max_value=50)
    is_enabled = serializers.BooleanField(required=False)
    has_token = serializers.SerializerMethodField()

    def get_has_token(self, obj):
        return bool(obj.matomo_token)

    def validate_matomo_site_id(self, value):
        for part in filter(None, (p.strip() for p in value.split(","))):
            platform, sep, site_id = part.partition(":")
            if not sep or not platform.strip() or not site_id.strip().isdigit():
                raise serializers.ValidationError(
                    'Use "platform:site_id" pairs separated by commas, e.g. "web:1,ios:2".'
                )
        return value
