"""
Alert settings stored in the config of the ``alerts`` plugin.

The plugin's ``is_enabled`` flag switches monitoring on and off.  When the
plugin stores no API token, ``settings.ANALYTICS_API_TOKEN`` is used.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field

from django.conf import settings

from plugins.defaults import (
    ALERTS_PLUGIN_ID,
    DEFAULT_DROP_THRESHOLD,
    DEFAULT_MATOMO_URL,
    DEFAULT_MAX_CONCURRENCY,
    DEFAULT_SITE_MAPPING,
)
from plugins.models import Plugin
from plugins.serializers import merge_config
from plugins.services import ensure_default_plugins

logger = logging.getLogger(__name__)

FALLBACK_SITE_IDS = {"web": 1, "ios": 2, "android": 3}


def parse_site_mapping(raw) -> dict[str, int]:
    """
    Parse ``"web:1,ios:2,android:3"`` into ``{"web": 1, ...}``.

    Malformed parts are ignored; an empty result falls back to the
    default web/iOS/Android site ids.
    """
    mapping = {}
    for part in str(raw or "").split(","):
        platform, sep, site_id = part.strip().partition(":")
        if not sep or not platform.strip():
            continue
        try:
            mapping[platform.strip().lower()] = int(site_id.strip())
        except ValueError:
            logger.warning("Ignoring malformed site mapping entry %r", part)
    return mapping or dict(FALLBACK_SITE_IDS)


@dataclass
class AlertSettings:
    matomo_url: str = DEFAULT_MATOMO_URL
    matomo_token: str | None = None
    matomo_site_id: str = DEFAULT_SITE_MAPPING
    drop_threshold: int = DEFAULT_DROP_THRESHOLD
    max_concurrency: int = DEFAULT_MAX_CONCURRENCY
    is_enabled: bool = True
    site_mapping: dict = field(default_factory=dict)

    @property
    def api_url(self) -> str:
        return self.matomo_url or getattr(settings, "ANALYTICS_API_URL", "") or DEFAULT_MATOMO_URL

    @property
    def token(self) -> str | None:
        return self.matomo_token or getattr(settings, "ANALYTICS_API_TOKEN", "") or None


def _int_setting(config: dict, key: str, default: int) -> int:
    value = config.get(key)
    if not value:
        return default
    try:
        return int(value)
    except (TypeError, ValueError):
        logger.warning("Ignoring invalid alert setting %s=%r, using %s", key, value, default)
        return default


def get_alerts_plugin() -> Plugin:
    plugin = Plugin.objects.filter(pk=ALERTS_PLUGIN_ID).first()
    if plugin is None:
        ensure_default_plugins()
        plugin = Plugin.objects.get(pk=ALERTS_PLUGIN_ID)
    return plugin


def load_alert_settings() -> AlertSettings:
    plugin = get_alerts_plugin()
    config = plugin.config or {}
    return AlertSettings(
        matomo_url=config.get("matomo_url") or DEFAULT_MATOMO_URL,
        matomo_token=config.get("matomo_token") or None,
        matomo_site_id=config.get("matomo_site_id") or DEFAULT_SITE_MAPPING,
        drop_threshold=_int_setting(config, "drop_threshold", DEFAULT_DROP_THRESHOLD),
        max_concurrency=_int_setting(config, "max_concurrency", DEFAULT_MAX_CONCURRENCY),
        is_enabled=plugin.is_enabled,
        site_mapping=parse_site_mapping(config.get("matomo_site_id")),
    )


def save_alert_settings(data: dict) -> AlertSettings:
    """Store validated settings; a token sent as null keeps the stored one."""
    plugin = get_alerts_plugin()
    data = dict(data)
    if "is_enabled" in data:
        plugin.is_enabled = data.pop("is_enabled")
    plugin.config = merge_config(plugin.config, data)
    plugin.save()
    logger.info("Alert settings updated (enabled=%s)", plugin.is_enabled)
    return load_alert_settings()
