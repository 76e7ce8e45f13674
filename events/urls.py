"""
URL routes for the events app, mounted under `/api/`.

- `events/` with nested actions (import, comments, versions,
  platform-statuses, code-snippets)
- `stats/`, `comments/{id}/`, `platform-statuses/{id}/history/`
- `categories/`, `property-templates/`
"""
from django.urls import include, path
from rest_framework.routers import DefaultRouter

from .views import (
    CategoryViewSet,
    CommentViewSet,
    EventViewSet,
    PlatformStatusHistoryView,
    PropertyTemplateViewSet,
    StatsView,
)

router = DefaultRouter()
router.register(r"events", EventViewSet, basename="event")
router.register(r"comments", CommentViewSet, basename="comment")
router.register(r"categories", CategoryViewSet, basename="category")
router.register(r"property-templates", PropertyTemplateViewSet, basename="property-template")

urlpatterns = [
    path("stats/", StatsView.as_view(), name="event-stats"),
    path("platform-statuses/<int:status_id>/history/", PlatformStatusHistoryView.as_view(),
         name="platform-status-history"),
    path("", include(router.urls)),
]
