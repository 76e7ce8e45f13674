"""
ViewSets for the events app.

Every endpoint requires authentication; what a user may do is decided by
the permission flags of their role (see ``users.roles``).  Versioning and
bulk import are delegated to ``events.services``.
"""
import logging

from django.db import transaction
from django.db.models import Max, Prefetch
from django.shortcuts import get_object_or_404
from rest_framework import mixins, permissions, status, viewsets
from rest_framework.decorators import action
from rest_framework.exceptions import NotFound, ValidationError
from rest_framework.response import Response
from rest_framework.views import APIView

from common.pagination import EventLimitOffsetPagination
from plugins.defaults import CODE_GENERATOR_PLUGIN_ID
from plugins.services import is_plugin_enabled
from users.permissions import HasRolePermission, IsAdminRole
from . import services
from .codegen import generate_snippets
from .csv_import import parse_csv
from .filters import EventFilter
from .models import Category, Comment, Event, EventPlatformStatus, EventVersion, PropertyTemplate, StatusHistory
from .serializers import (
    CategorySerializer,
    CommentSerializer,
    EventPlatformStatusSerializer,
    EventPlatformStatusWithHistorySerializer,
    EventSerializer,
    EventVersionSerializer,
    PlatformStatusCreateSerializer,
    PlatformStatusUpdateSerializer,
    PropertyTemplateSerializer,
    StatusHistorySerializer,
    clean_import_rows,
)

logger = logging.getLogger(__name__)

CanView = HasRolePermission.for_flag("can_view_events")
CanCreate = HasRolePermission.for_flag("can_create_events")
CanEdit = HasRolePermission.for_flag("can_edit_events")
CanDelete = HasRolePermission.for_flag("can_delete_events")
CanChangeStatuses = HasRolePermission.for_flag("can_change_statuses")
CanComment = HasRolePermission.for_flag("can_comment")
CanManageProperties = HasRolePermission.for_flag("can_manage_properties")


class EventViewSet(viewsets.ModelViewSet):
    """
    Tracking-plan events with their versions, platform statuses and
    comments.

    - list/retrieve: ``can_view_events``
    - create and import: ``can_create_events``
    - partial update: ``can_edit_events`` (may open a new version)
    - delete: ``can_delete_events``
    """
    serializer_class = EventSerializer
    pagination_class = EventLimitOffsetPagination
    filterset_class = EventFilter
    http_method_names = ["get", "post", "patch", "delete", "head", "options"]

    action_permissions = {
        "create": CanCreate,
        "import_preview": CanCreate,
        "import_events": CanCreate,
        "partial_update": CanEdit,
        "destroy": CanDelete,
    }

    def get_queryset(self):
        return (
            Event.objects.select_related("category", "owner__profile", "author__profile")
            .prefetch_related("platform_statuses")
            .order_by("-created_at", "-id")
        )

    def get_permissions(self):
        flag = self.action_permissions.get(self.action, CanView)
        if self.action == "comments" and self.request.method == "POST":
            flag = CanComment
        elif self.action in ("platform_statuses", "platform_status_detail") and self.request.method != "GET":
            flag = CanChangeStatuses
        return [permissions.IsAuthenticated(), flag()]

    def _fresh(self, event):
        return self.get_queryset().get(pk=event.pk)

    # ------------------------ CRUD ------------------------
    def create(self, request, *args, **kwargs):
        serializer = self.get_serializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = dict(serializer.validated_data)
        data.pop("change_description", None)
        event = services.create_event(data, author=request.user)
        return Response(self.get_serializer(self._fresh(event)).data, status=status.HTTP_201_CREATED)

    def partial_update(self, request, *args, **kwargs):
        event = self.get_object()
        serializer = self.get_serializer(event, data=request.data, partial=True)
        serializer.is_valid(raise_exception=True)
        data = dict(serializer.validated_data)
        change_description = data.pop("change_description", None)
        event = services.update_event(event, data, author=request.user, change_description=change_description)
        return Response(self.get_serializer(self._fresh(event)).data)

    def perform_destroy(self, instance):
        logger.info("Deleting event %s (%s) by user %s", instance.pk, instance, self.request.user.pk)
        instance.delete()

    # ------------------------ Import ------------------------
    def _import_rows(self, request):
        if "csv" in request.data:
            csv_text = request.data.get("csv")
            if not isinstance(csv_text, str):
                raise ValidationError({"csv": ["Expected CSV text."]})
            return clean_import_rows(parse_csv(csv_text))
        if "events" not in request.data:
            raise ValidationError({"events": ["This field is required."]})
        return clean_import_rows(request.data.get("events"))

    @action(detail=False, methods=["post"], url_path="import/preview")
    def import_preview(self, request):
        rows, errors = self._import_rows(request)
        result = services.preview_import(rows)
        result["errors"] = errors + result["errors"]
        return Response(result)

    @action(detail=False, methods=["post"], url_path="import")
    def import_events(self, request):
        new_rows, errors = clean_import_rows(request.data.get("new_events") or [])

        update_items = request.data.get("update_events") or []
        if not isinstance(update_items, list):
            raise ValidationError({"update_events": ["Expected a list."]})
        updates = []
        for item in update_items:
            if not isinstance(item, dict):
                errors.append("Update entry must be an object")
                continue
            parsed, row_errors = clean_import_rows([item.get("parsed") or {}])
            errors.extend(row_errors)
            if parsed:
                updates.append({"parsed": parsed[0], "existing_id": item.get("existing_id")})

        result = services.import_events(new_rows, updates, author=request.user)
        result["errors"] = errors + result["errors"]
        return Response(result)

    # ------------------------ Comments ------------------------
    @action(detail=True, methods=["get", "post"], url_path="comments")
    def comments(self, request, pk=None):
        event = self.get_object()
        if request.method == "GET":
            qs = Comment.objects.filter(event=event).order_by("-created_at", "-id")
            return Response(CommentSerializer(qs, many=True).data)

        serializer = CommentSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        profile = getattr(request.user, "profile", None)
        author = (profile.name if profile else "") or serializer.validated_data.get("author") or "Anonymous"
        comment = serializer.save(event=event, user=request.user, author=author)
        return Response(CommentSerializer(comment).data, status=status.HTTP_201_CREATED)

    # ------------------------ Versions ------------------------
    @action(detail=True, methods=["get"], url_path="versions")
    def versions(self, request, pk=None):
        event = self.get_object()
        qs = EventVersion.objects.filter(event=event).select_related("owner__profile", "author__profile")
        return Response(EventVersionSerializer(qs.order_by("-version"), many=True).data)

    @action(detail=True, methods=["get"], url_path=r"versions/(?P<version>\d+)")
    def version_detail(self, request, pk=None, version=None):
        event = self.get_object()
        obj = get_object_or_404(EventVersion, event=event, version=int(version))
        return Response(EventVersionSerializer(obj).data)

    # ------------------------ Platform statuses ------------------------
    @action(detail=True, methods=["get", "post"], url_path="platform-statuses")
    def platform_statuses(self, request, pk=None):
        event = self.get_object()
        if request.method == "GET":
            version = request.query_params.get("version")
            if version is not None:
                try:
                    version = int(version)
                except ValueError:
                    raise ValidationError({"version": ["A valid integer is required."]})
            else:
                version = event.current_version
            qs = (
                EventPlatformStatus.objects.filter(event=event, version_number=version)
                .prefetch_related(Prefetch("history", queryset=StatusHistory.objects.select_related("changed_by__profile")))
                .order_by("platform")
            )
            return Response(EventPlatformStatusWithHistorySerializer(qs, many=True).data)

        serializer = PlatformStatusCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data
        with transaction.atomic():
            if EventPlatformStatus.objects.filter(
                event=event, version_number=event.current_version, platform=data["platform"]
            ).exists():
                raise ValidationError({"platform": ["Status for this platform already exists."]})
            platform_status = EventPlatformStatus.objects.create(
                event=event, version_number=event.current_version, **data
            )
            if data["platform"] not in (event.platforms or []):
                event.platforms = list(event.platforms or []) + [data["platform"]]
                event.save(update_fields=["platforms", "updated_at"])
        return Response(EventPlatformStatusSerializer(platform_status).data, status=status.HTTP_201_CREATED)

    @action(detail=True, methods=["patch", "delete"], url_path=r"platform-statuses/(?P<platform>[\w-]+)")
    def platform_status_detail(self, request, pk=None, platform=None):
        event = self.get_object()

        if request.method == "DELETE":
            platform_status = EventPlatformStatus.objects.filter(
                event=event, version_number=event.current_version, platform=platform
            ).first()
            if platform_status is None:
                raise NotFound("Platform status not found.")
            with transaction.atomic():
                platform_status.delete()
                event.platforms = [p for p in event.platforms or [] if p != platform]
                event.save(update_fields=["platforms", "updated_at"])
            return Response(status=status.HTTP_204_NO_CONTENT)

        serializer = PlatformStatusUpdateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data
        version = data.get("version_number") or event.current_version
        platform_status = EventPlatformStatus.objects.filter(
            event=event, version_number=version, platform=platform
        ).first()
        if platform_status is None:
            raise NotFound("Platform status not found for this version.")

        with transaction.atomic():
            for kind in ("implementation", "validation"):
                field = f"{kind}_status"
                new_value = data.get(field)
                old_value = getattr(platform_status, field)
                if new_value and new_value != old_value:
                    StatusHistory.objects.create(
                        platform_status=platform_status,
                        status_type=kind,
                        old_status=old_value,
                        new_status=new_value,
                        changed_by=request.user,
                        comment=data.get("status_comment") or None,
                        jira_link=data.get("status_jira_link") or None,
                    )
                    setattr(platform_status, field, new_value)
            if "jira_link" in data:
                platform_status.jira_link = data["jira_link"]
            platform_status.save()
        return Response(EventPlatformStatusSerializer(platform_status).data)

    # ------------------------ Code snippets ------------------------
    @action(detail=True, methods=["get"], url_path="code-snippets")
    def code_snippets(self, request, pk=None):
        if not is_plugin_enabled(CODE_GENERATOR_PLUGIN_ID):
            raise NotFound("The code generator plugin is disabled.")
        event = self.get_object()
        return Response({"event_id": event.pk, "snippets": generate_snippets(event)})


class StatsView(APIView):
    permission_classes = [permissions.IsAuthenticated]

    def get(self, request):
        return Response(services.get_stats())


class CommentViewSet(mixins.DestroyModelMixin, viewsets.GenericViewSet):
    """Deleting a comment is reserved to administrators."""
    queryset = Comment.objects.all()
    permission_classes = [permissions.IsAuthenticated, IsAdminRole]


class PlatformStatusHistoryView(APIView):
    permission_classes = [permissions.IsAuthenticated, CanView]

    def get(self, request, status_id):
        platform_status = get_object_or_404(EventPlatformStatus, pk=status_id)
        qs = platform_status.history.select_related("changed_by__profile").order_by("-created_at", "-id")
        return Response(StatusHistorySerializer(qs, many=True).data)


class CategoryViewSet(mixins.ListModelMixin, viewsets.GenericViewSet):
    queryset = Category.objects.all().order_by("name")
    serializer_class = CategorySerializer

    def get_permissions(self):
        if self.action == "create":
            return [permissions.IsAuthenticated(), CanCreate()]
        return [permissions.IsAuthenticated()]

    def create(self, request, *args, **kwargs):
        # Posting an existing name returns that category instead of failing on uniqueness.
        name = request.data.get("name") if hasattr(request.data, "get") else None
        if not isinstance(name, str) or not name.strip():
            raise ValidationError({"name": ["Category name is required."]})
        category, created = Category.objects.get_or_create(name=name.strip())
        serializer = self.get_serializer(category)
        return Response(serializer.data, status=status.HTTP_201_CREATED if created else status.HTTP_200_OK)


class PropertyTemplateViewSet(viewsets.ModelViewSet):
    """Custom dimensions.  Reading is open to every user; changes need ``can_manage_properties``."""
    serializer_class = PropertyTemplateSerializer
    http_method_names = ["get", "post", "patch", "delete", "head", "options"]

    def get_queryset(self):
        qs = PropertyTemplate.objects.all().order_by("dimension")
        category = self.request.query_params.get("category")
        if category:
            qs = qs.filter(category=category)
        return qs

    def get_permissions(self):
        if self.action in ("create", "partial_update", "destroy"):
            return [permissions.IsAuthenticated(), CanManageProperties()]
        return [permissions.IsAuthenticated()]

    @action(detail=False, methods=["get"], url_path="next-dimension")
    def next_dimension(self, request):
        current = PropertyTemplate.objects.aggregate(m=Max("dimension"))["m"]
        return Response({"next_dimension": (current or 0) + 1})
