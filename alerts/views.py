"""
Views for the alerts app.

- list alerts (any authenticated user), delete and bulk delete (admin or
  analyst)
- read and change the alert settings (admin)
- run the drop check, either as one request or as a Server-Sent Events
  stream reporting progress per batch (admin or analyst)
"""
import json
import logging

from django.http import StreamingHttpResponse
from rest_framework import mixins, permissions, status, viewsets
from rest_framework.decorators import action
from rest_framework.exceptions import APIException
from rest_framework.renderers import JSONRenderer
from rest_framework.response import Response

from common.pagination import AlertLimitOffsetPagination
from users.permissions import IsAdminOrAnalyst, IsAdminRole
from .config import load_alert_settings, save_alert_settings
from .detection import AlertCheckError, check_event_drops, run_drop_check
from .models import Alert
from .renderers import EventStreamRenderer
from .serializers import AlertSerializer, AlertSettingsSerializer, BulkDeleteSerializer

logger = logging.getLogger(__name__)


class AlertCheckUnavailable(APIException):
    status_code = status.HTTP_400_BAD_REQUEST
    default_detail = "The alert check cannot run."
    default_code = "alert_check_unavailable"


def _sse(payload: dict) -> str:
    return f"data: {json.dumps(payload, ensure_ascii=False)}\n\n"


def stream_drop_check():
    try:
        for progress in run_drop_check():
            yield _sse(progress)
    except AlertCheckError as exc:
        yield _sse({"error": str(exc)})
    except Exception as exc:
        logger.exception("Drop check failed")
        yield _sse({"error": str(exc) or "Failed to check alerts"})


class AlertViewSet(mixins.ListModelMixin, mixins.DestroyModelMixin, viewsets.GenericViewSet):
    queryset = Alert.objects.all().order_by("-checked_at", "-id")
    serializer_class = AlertSerializer
    pagination_class = AlertLimitOffsetPagination

    def get_permissions(self):
        if self.action in ("destroy", "bulk_delete", "check", "check_stream"):
            return [permissions.IsAuthenticated(), IsAdminOrAnalyst()]
        if self.action == "alert_settings":
            return [permissions.IsAuthenticated(), IsAdminRole()]
        return [permissions.IsAuthenticated()]

    @action(detail=False, methods=["post"], url_path="bulk-delete")
    def bulk_delete(self, request):
        serializer = BulkDeleteSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        deleted, _ = Alert.objects.filter(pk__in=serializer.validated_data["ids"]).delete()
        logger.info("User %s deleted %s alert(s)", request.user.pk, deleted)
        return Response({"deleted": deleted})

    @action(detail=False, methods=["get", "put"], url_path="settings")
    def alert_settings(self, request):
        if request.method == "GET":
            return Response(AlertSettingsSerializer(load_alert_settings()).data)
        serializer = AlertSettingsSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        config = save_alert_settings(serializer.validated_data)
        return Response(AlertSettingsSerializer(config).data)

    @action(detail=False, methods=["post"], url_path="check")
    def check(self, request):
        try:
            summary = check_event_drops()
        except AlertCheckError as exc:
            raise AlertCheckUnavailable(str(exc))
        return Response({
            "message": f"Check finished. Alerts created: {summary['alerts_created']}.",
            "alerts_created": summary["alerts_created"],
            "events_checked": summary["events_checked"],
        })

    @action(detail=False, methods=["get"], url_path="check-stream",
            renderer_classes=[JSONRenderer, EventStreamRenderer])
    def check_stream(self, request):
        response = StreamingHttpResponse(stream_drop_check(), content_type="text/event-stream")
        response["Cache-Control"] = "no-cache"
        response["X-Accel-Buffering"] = "no"
        return response
