"""
Pagination utilities for the project.

List endpoints in the admin UI page with ``limit``/``offset`` query
parameters.  Each paginator below only differs in its default and maximum
page size.
"""
from rest_framework.pagination import LimitOffsetPagination


class DefaultPagination(LimitOffsetPagination):
    """Limit/offset paginator used by most list endpoints."""
    default_limit = 100
    max_limit = 1000


class EventLimitOffsetPagination(LimitOffsetPagination):
    """Paging for the events table."""
    default_limit = 50
    max_limit = 500


class AlertLimitOffsetPagination(LimitOffsetPagination):
    """Alerts are filtered client-side, so the default page holds them all."""
    default_limit = 10000
    max_limit = 10000
