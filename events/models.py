"""
Models for the events app.

An `Event` is one entry of the tracking plan, identified by its Matomo
category and action.  Every change to the fields that define what is
sent to analytics produces a new `EventVersion`; each version carries one
`EventPlatformStatus` per platform, and every status change is written
to `StatusHistory`.  `PropertyTemplate` describes the custom dimensions
that events may reference.
"""
from django.contrib.auth.models import User
from django.db import models

PLATFORM_WEB = "web"
PLATFORM_IOS = "ios"
PLATFORM_ANDROID = "android"
PLATFORM_BACKEND = "backend"
PLATFORM_ALL = "all"

PLATFORM_CHOICES = [
    (PLATFORM_WEB, "Web"),
    (PLATFORM_IOS, "iOS"),
    (PLATFORM_ANDROID, "Android"),
    (PLATFORM_BACKEND, "Backend"),
    (PLATFORM_ALL, "All platforms"),
]
PLATFORMS = [value for value, _ in PLATFORM_CHOICES]

IMPLEMENTATION_STATUS_CHOICES = [
    ("draft", "Draft"),
    ("in_development", "In development"),
    ("implemented", "Implemented"),
    ("archived", "Archived"),
]
IMPLEMENTATION_STATUSES = [value for value, _ in IMPLEMENTATION_STATUS_CHOICES]

VALIDATION_STATUS_CHOICES = [
    ("pending", "Pending check"),
    ("correct", "Correct"),
    ("error", "Error"),
    ("warning", "Warning"),
]
VALIDATION_STATUSES = [value for value, _ in VALIDATION_STATUS_CHOICES]

DEFAULT_IMPLEMENTATION_STATUS = "draft"
DEFAULT_VALIDATION_STATUS = "pending"


class Category(models.Model):
    name = models.CharField(max_length=255, unique=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["name"]
        verbose_name_plural = "categories"

    def __str__(self) -> str:
        return self.name


class Event(models.Model):
    """A tracked analytics event (Matomo category + action)."""

    category = models.ForeignKey(Category, on_delete=models.PROTECT, related_name="events")
    block = models.CharField(max_length=255, blank=True, default="")
    action = models.CharField(max_length=255)
    action_description = models.TextField(blank=True, default="")
    name = models.CharField(max_length=255, blank=True, default="")
    value_description = models.TextField(blank=True, default="")
    owner = models.ForeignKey(User, on_delete=models.SET_NULL, null=True, blank=True,
                              related_name="owned_events")
    author = models.ForeignKey(User, on_delete=models.SET_NULL, null=True, blank=True,
                               related_name="authored_events")
    # List of platform keys, e.g. ["web", "ios"].
    platforms = models.JSONField(default=list, blank=True)
    # List of {name, type, required, description}.
    properties = models.JSONField(default=list, blank=True)
    notes = models.TextField(blank=True, default="")
    current_version = models.PositiveIntegerField(default=1)
    created_at = models.DateTimeField(auto_now_add=True, db_index=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["-created_at", "-id"]
        constraints = [
            models.UniqueConstraint(fields=["category", "action"], name="uniq_event_category_action"),
        ]

    def __str__(self) -> str:
        return f"{self.category.name} > {self.action}"


class EventVersion(models.Model):
    """Snapshot of an event at one version number."""

    event = models.ForeignKey(Event, on_delete=models.CASCADE, related_name="versions")
    version = models.PositiveIntegerField()
    category_name = models.CharField(max_length=255)
    block = models.CharField(max_length=255, blank=True, default="")
    action = models.CharField(max_length=255)
    action_description = models.TextField(blank=True, default="")
    name = models.CharField(max_length=255, blank=True, default="")
    value_description = models.TextField(blank=True, default="")
    owner = models.ForeignKey(User, on_delete=models.SET_NULL, null=True, blank=True, related_name="+")
    platforms = models.JSONField(default=list, blank=True)
    properties = models.JSONField(default=list, blank=True)
    notes = models.TextField(blank=True, default="")
    change_description = models.TextField(blank=True, default="")
    author = models.ForeignKey(User, on_delete=models.SET_NULL, null=True, blank=True, related_name="+")
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["-version"]
        constraints = [
            models.UniqueConstraint(fields=["event", "version"], name="uniq_event_version"),
        ]

    def __str__(self) -> str:
        return f"{self.event_id} v{self.version}"


class EventPlatformStatus(models.Model):
    event = models.ForeignKey(Event, on_delete=models.CASCADE, related_name="platform_statuses")
    version_number = models.PositiveIntegerField(default=1)
    platform = models.CharField(max_length=16, choices=PLATFORM_CHOICES)
    jira_link = models.CharField(max_length=500, blank=True, default="")
    implementation_status = models.CharField(
        max_length=32, choices=IMPLEMENTATION_STATUS_CHOICES, default=DEFAULT_IMPLEMENTATION_STATUS, db_index=True
    )
    validation_status = models.CharField(
        max_length=32, choices=VALIDATION_STATUS_CHOICES, default=DEFAULT_VALIDATION_STATUS, db_index=True
    )
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["platform"]
        verbose_name_plural = "event platform statuses"
        constraints = [
            models.UniqueConstraint(
                fields=["event", "version_number", "platform"], name="uniq_event_version_platform"
            ),
        ]

    def __str__(self) -> str:
        return f"{self.event_id} v{self.version_number} {self.platform}"


class StatusHistory(models.Model):
    STATUS_TYPE_CHOICES = [
        ("implementation", "Implementation"),
        ("validation", "Validation"),
    ]

    platform_status = models.ForeignKey(EventPlatformStatus, on_delete=models.CASCADE, related_name="history")
    status_type = models.CharField(max_length=16, choices=STATUS_TYPE_CHOICES)
    old_status = models.CharField(max_length=32, blank=True, null=True)
    new_status = models.CharField(max_length=32)
    changed_by = models.ForeignKey(User, on_delete=models.SET_NULL, null=True, blank=True, related_name="+")
    comment = models.TextField(blank=True, null=True)
    jira_link = models.CharField(max_length=500, blank=True, null=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["-created_at", "-id"]
        verbose_name_plural = "status history"


class Comment(models.Model):
    event = models.ForeignKey(Event, on_delete=models.CASCADE, related_name="comments")
    author = models.CharField(max_length=255)
    user = models.ForeignKey(User, on_delete=models.SET_NULL, null=True, blank=True, related_name="event_comments")
    content = models.TextField()
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["-created_at", "-id"]

    def __str__(self) -> str:
        return f"Comment<{self.author} on {self.event_id}>"


class PropertyTemplate(models.Model):
    """A custom dimension that events may send as a property."""

    dimension = models.PositiveIntegerField(unique=True)
    name = models.CharField(max_length=255)
    description = models.TextField(blank=True, default="")
    example_data = models.TextField(blank=True, default="")
    category = models.CharField(max_length=255, blank=True, default="")
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["dimension"]

    def __str__(self) -> str:
        return f"dimension{self.dimension} ({self.name})"
