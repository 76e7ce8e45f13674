"""
Initial migration for the events app.

Creates categories, events with their version snapshots, per-platform
statuses with history, comments and property templates.
"""
from django.conf import settings
from django.db import migrations, models
import django.db.models.deletion

PLATFORM_CHOICES = [
    ("web", "Web"),
    ("ios", "iOS"),
    ("android", "Android"),
    ("backend", "Backend"),
    ("all", "All platforms"),
]
IMPLEMENTATION_STATUS_CHOICES = [
    ("draft", "Draft"),
    ("in_development", "In development"),
    ("implemented", "Implemented"),
    ("archived", "Archived"),
]
VALIDATION_STATUS_CHOICES = [
    ("pending", "Pending check"),
    ("correct", "Correct"),
    ("error", "Error"),
    ("warning", "Warning"),
]


class Migration(migrations.Migration):
    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name="Category",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("name", models.CharField(max_length=255, unique=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
            ],
            options={"ordering": ["name"], "verbose_name_plural": "categories"},
        ),
        migrations.CreateModel(
            name="Event",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("block", models.CharField(blank=True, default="", max_length=255)),
                ("action", models.CharField(max_length=255)),
                ("action_description", models.TextField(blank=True, default="")),
                ("name", models.CharField(blank=True, default="", max_length=255)),
                ("value_description", models.TextField(blank=True, default="")),
                ("platforms", models.JSONField(blank=True, default=list)),
                ("properties", models.JSONField(blank=True, default=list)),
                ("notes", models.TextField(blank=True, default="")),
                ("current_version", models.PositiveIntegerField(default=1)),
                ("created_at", models.DateTimeField(auto_now_add=True, db_index=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("category", models.ForeignKey(on_delete=django.db.models.deletion.PROTECT,
                                               related_name="events", to="events.category")),
                ("owner", models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL,
                                            related_name="owned_events", to=settings.AUTH_USER_MODEL)),
                ("author", models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL,
                                             related_name="authored_events", to=settings.AUTH_USER_MODEL)),
            ],
            options={"ordering": ["-created_at", "-id"]},
        ),
        migrations.AddConstraint(
            model_name="event",
            constraint=models.UniqueConstraint(fields=("category", "action"), name="uniq_event_category_action"),
        ),
        migrations.CreateModel(
            name="EventVersion",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("version", models.PositiveIntegerField()),
                ("category_name", models.CharField(max_length=255)),
                ("block", models.CharField(blank=True, default="", max_length=255)),
                ("action", models.CharField(max_length=255)),
                ("action_description", models.TextField(blank=True, default="")),
                ("name", models.CharField(blank=True, default="", max_length=255)),
                ("value_description", models.TextField(blank=True, default="")),
                ("platforms", models.JSONField(blank=True, default=list)),
                ("properties", models.JSONField(blank=True, default=list)),
                ("notes", models.TextField(blank=True, default="")),
                ("change_description", models.TextField(blank=True, default="")),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("event", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE,
                                            related_name="versions", to="events.event")),
                ("owner", models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL,
                                            related_name="+", to=settings.AUTH_USER_MODEL)),
                ("author", models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL,
                                             related_name="+", to=settings.AUTH_USER_MODEL)),
            ],
            options={"ordering": ["-version"]},
        ),
        migrations.AddConstraint(
            model_name="eventversion",
            constraint=models.UniqueConstraint(fields=("event", "version"), name="uniq_event_version"),
        ),
        migrations.CreateModel(
            name="EventPlatformStatus",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("version_number", models.PositiveIntegerField(default=1)),
                ("platform", models.CharField(choices=PLATFORM_CHOICES, max_length=16)),
                ("jira_link", models.CharField(blank=True, default="", max_length=500)),
                ("implementation_status", models.CharField(choices=IMPLEMENTATION_STATUS_CHOICES, db_index=True,
                                                           default="draft", max_length=32)),
                ("validation_status", models.CharField(choices=VALIDATION_STATUS_CHOICES, db_index=True,
                                                       default="pending", max_length=32)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("event", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE,
                                            related_name="platform_statuses", to="events.event")),
            ],
            options={"ordering": ["platform"], "verbose_name_plural": "event platform statuses"},
        ),
        migrations.AddConstraint(
            model_name="eventplatformstatus",
            constraint=models.UniqueConstraint(fields=("event", "version_number", "platform"),
                                               name="uniq_event_version_platform"),
        ),
        migrations.CreateModel(
            name="StatusHistory",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("status_type", models.CharField(choices=[("implementation", "Implementation"),
                                                          ("validation", "Validation")], max_length=16)),
                ("old_status", models.CharField(blank=True, max_length=32, null=True)),
                ("new_status", models.CharField(max_length=32)),
                ("comment", models.TextField(blank=True, null=True)),
                ("jira_link", models.CharField(blank=True, max_length=500, null=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("platform_status", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE,
                                                      related_name="history", to="events.eventplatformstatus")),
                ("changed_by", models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL,
                                                 related_name="+", to=settings.AUTH_USER_MODEL)),
            ],
            options={"ordering": ["-created_at", "-id"], "verbose_name_plural": "status history"},
        ),
        migrations.CreateModel(
            name="Comment",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("author", models.CharField(max_length=255)),
                ("content", models.TextField()),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("event", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE,
                                            related_name="comments", to="events.event")),
                ("user", models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL,
                                           related_name="event_comments", to=settings.AUTH_USER_MODEL)),
            ],
            options={"ordering": ["-created_at", "-id"]},
        ),
        migrations.CreateModel(
            name="PropertyTemplate",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("dimension", models.PositiveIntegerField(unique=True)),
                ("name", models.CharField(max_length=255)),
                ("description", models.TextField(blank=True, default="")),
                ("example_data", models.TextField(blank=True, default="")),
                ("category", models.CharField(blank=True, default="", max_length=255)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
            ],
            options={"ordering": ["dimension"]},
        ),
    ]
