"""
Serializers for the plugins app.

Secret values inside a plugin's config (the analytics API token) are
write-only: responses replace them with a ``has_token`` flag.
"""
from rest_framework import serializers

from .defaults import ALERTS_PLUGIN_ID
from .models import Plugin

SECRET_CONFIG_KEYS = ("matomo_token",)


def redact_config(config: dict) -> dict:
    config = dict(config or {})
    for key in SECRET_CONFIG_KEYS:
        if key in config:
            config["has_token"] = bool(config.pop(key))
    return config


def merge_config(current: dict, incoming: dict) -> dict:
    """Shallow merge; a secret sent as null keeps the stored value."""
    merged = dict(current or {})
    for key, value in (incoming or {}).items():
        if key in SECRET_CONFIG_KEYS and value is None:
            continue
        if key == "has_token":
            continue
        merged[key] = value
    return merged


class PluginSerializer(serializers.ModelSerializer):
    class Meta:
        model = Plugin
        fields = ["id", "name", "description", "version", "is_enabled", "config",
                  "installed_at", "updated_at"]
        read_only_fields = fields

    def to_representation(self, instance):
        rep = super().to_representation(instance)
        rep["config"] = redact_config(rep.get("config"))
        return rep


class PluginUpdateSerializer(serializers.ModelSerializer):
    config = serializers.DictField(required=False)

    class Meta:
        model = Plugin
        fields = ["is_enabled", "config"]
        extra_kwargs = {"is_enabled": {"required": False}}

    def validate(self, attrs):
        if not attrs:
            raise serializers.ValidationError("Provide is_enabled and/or config.")
        if "config" in attrs and getattr(self.instance, "pk", None) == ALERTS_PLUGIN_ID:
            attrs["config"] = self._validate_alerts_config(attrs["config"])
        return attrs

    def _validate_alerts_config(self, config: dict) -> dict:
        # Same rules as PUT /api/alerts/settings/.
        from alerts.serializers import AlertSettingsSerializer

        incoming = {k: v for k, v in config.items() if k not in ("has_token", "is_enabled")}
        checked = AlertSettingsSerializer(data=incoming, partial=True)
        if not checked.is_valid():
            raise serializers.ValidationError({"config": checked.errors})
        return {**incoming, **checked.validated_data}

    def update(self, instance, validated_data):
        if "is_enabled" in validated_data:
            instance.is_enabled = validated_data["is_enabled"]
        if "config" in validated_data:
            instance.config = merge_config(instance.config, validated_data["config"])
        instance.save()
        return instance

    def to_representation(self, instance):
        return PluginSerializer(instance, context=self.context).data
