"""
Views for the plugins app.

Any authenticated user can list plugins (the UI needs to know what is
enabled); only administrators may switch them or change their config.
"""
import logging

from rest_framework import mixins, permissions, viewsets

from users.permissions import IsAdminRole
from .models import Plugin
from .serializers import PluginSerializer, PluginUpdateSerializer

logger = logging.getLogger(__name__)


class PluginViewSet(mixins.ListModelMixin,
                    mixins.RetrieveModelMixin,
                    mixins.UpdateModelMixin,
                    viewsets.GenericViewSet):
    queryset = Plugin.objects.all().order_by("id")
    serializer_class = PluginSerializer
    http_method_names = ["get", "patch", "head", "options"]

    def get_permissions(self):
        if self.action in ("update", "partial_update"):
            return [permissions.IsAuthenticated(), IsAdminRole()]
        return [permissions.IsAuthenticated()]

    def get_serializer_class(self):
        if self.action in ("update", "partial_update"):
            return PluginUpdateSerializer
        return PluginSerializer

    def perform_update(self, serializer):
        plugin = serializer.save()
        logger.info("Plugin %s updated by user %s (enabled=%s)",
                    plugin.pk, self.request.user.pk, plugin.is_enabled)
