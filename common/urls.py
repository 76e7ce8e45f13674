"""
URL configuration for the common app.

Include under ``/api/http-logs/`` at the project level.
"""
from django.urls import path
from .views import HttpLogClearView, HttpLogListView, HttpLogStatsView


urlpatterns = [
    path("", HttpLogListView.as_view(), name="http-logs-list"),
    path("stats/", HttpLogStatsView.as_view(), name="http-logs-stats"),
    path("clear/", HttpLogClearView.as_view(), name="http-logs-clear"),
]
