"""
Helpers other apps use to look up plugins.

``ensure_default_plugins`` installs any built-in plugin that is missing
and never touches plugins that already exist, so admin changes survive
re-seeding.
"""
import copy
import logging

from .defaults import DEFAULT_PLUGINS

logger = logging.getLogger(__name__)


def ensure_default_plugins(plugin_model=None) -> list[str]:
    """Create the missing built-in plugins; returns the ids created."""
    if plugin_model is None:
        from .models import Plugin as plugin_model

    existing = set(plugin_model.objects.values_list("id", flat=True))
    created = []
    for plugin in DEFAULT_PLUGINS:
        if plugin["id"] in existing:
            continue
        plugin_model.objects.create(**copy.deepcopy(plugin))
        created.append(plugin["id"])
    if created:
        logger.info("Installed default plugins: %s", ", ".join(created))
    return created


def get_plugin(plugin_id: str):
    from .models import Plugin
    return Plugin.objects.filter(pk=plugin_id).first()


def is_plugin_enabled(plugin_id: str) -> bool:
    plugin = get_plugin(plugin_id)
    return bool(plugin and plugin.is_enabled)
