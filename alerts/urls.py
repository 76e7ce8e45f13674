"""
URL routes for the alerts app, mounted under `/api/`.

`alerts/`, `alerts/{id}/`, `alerts/bulk-delete/`, `alerts/settings/`,
`alerts/check/` and `alerts/check-stream/`.
"""
from django.urls import include, path
from rest_framework.routers import DefaultRouter

from .views import AlertViewSet

router = DefaultRouter()
router.register(r"alerts", AlertViewSet, basename="alert")

urlpatterns = [
    path("", include(router.urls)),
]
