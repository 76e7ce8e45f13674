"""
django-filter FilterSet for the event list.

Status and Jira filters look at the platform statuses of each event's
current version only.
"""
from django.db.models import F, Q
from django_filters import rest_framework as filters

from .models import IMPLEMENTATION_STATUS_CHOICES, PLATFORM_CHOICES, VALIDATION_STATUS_CHOICES, Event


class EventFilter(filters.FilterSet):
    search = filters.CharFilter(method="filter_search")
    category = filters.CharFilter(field_name="category__name")
    platform = filters.ChoiceFilter(choices=PLATFORM_CHOICES, method="filter_platform")
    owner_id = filters.NumberFilter(field_name="owner_id")
    author_id = filters.NumberFilter(field_name="author_id")
    implementation_status = filters.ChoiceFilter(choices=IMPLEMENTATION_STATUS_CHOICES, method="filter_current_status")
    validation_status = filters.ChoiceFilter(choices=VALIDATION_STATUS_CHOICES, method="filter_current_status")
    jira = filters.CharFilter(method="filter_jira")

    class Meta:
        model = Event
        fields = []

    def filter_search(self, queryset, name, value):
        if not value:
            return queryset
        return queryset.filter(
            Q(name__icontains=value)
            | Q(action__icontains=value)
            | Q(category__name__icontains=value)
            | Q(action_description__icontains=value)
        )

    def filter_platform(self, queryset, name, value):
        if not value:
            return queryset
        # platforms is a JSON list; match the quoted key so "web" never matches "webview".
        return queryset.filter(platforms__icontains=f'"{value}"')

    def filter_current_status(self, queryset, name, value):
        if not value:
            return queryset
        ids = Event.objects.filter(
            platform_statuses__version_number=F("current_version"),
            **{f"platform_statuses__{name}": value},
        ).values("id")
        return queryset.filter(id__in=ids)

    def filter_jira(self, queryset, name, value):
        if not value:
            return queryset
        ids = Event.objects.filter(
            platform_statuses__version_number=F("current_version"),
            platform_statuses__jira_link__icontains=value,
        ).values("id")
        return queryset.filter(id__in=ids)
