"""
Views for the HTTP logs page.

Expose the in-memory record of outbound HTTP requests (see
``common.http_client``) together with the global rate limiter status.
Admin only.
"""
from __future__ import annotations

from rest_framework import permissions, status, views
from rest_framework.response import Response

from users.permissions import IsAdminRole
from .http_client import get_global_rate_limiter_status, http_stats
from .pagination import DefaultPagination


class HttpLogStatsView(views.APIView):
    """Aggregated counters over the recorded requests."""

    permission_classes = [permissions.IsAuthenticated, IsAdminRole]

    def get(self, request):
        stats = http_stats.get_stats()
        return Response({**stats, "rate_limiter": get_global_rate_limiter_status()})


class HttpLogListView(views.APIView):
    """Recorded requests, newest first, paged with limit/offset."""

    permission_classes = [permissions.IsAuthenticated, IsAdminRole]

    def get(self, request):
        paginator = DefaultPagination()
        page = paginator.paginate_queryset(http_stats.get_logs(), request, view=self)
        return paginator.get_paginated_response(page)


class HttpLogClearView(views.APIView):
    permission_classes = [permissions.IsAuthenticated, IsAdminRole]

    def post(self, request):
        http_stats.clear()
        return Response({"detail": "HTTP logs cleared"}, status=status.HTTP_200_OK)
