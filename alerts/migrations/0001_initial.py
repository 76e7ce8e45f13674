from django.db import migrations, models
import django.db.models.deletion
import django.utils.timezone


class Migration(migrations.Migration):
    initial = True

    dependencies = [
        ("events", "0001_initial"),
    ]

    operations = [
        migrations.CreateModel(
            name="Alert",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("platform", models.CharField(choices=[("web", "Web"), ("ios", "iOS"), ("android", "Android"),
                                                       ("backend", "Backend"), ("all", "All platforms")],
                                              max_length=16)),
                ("event_category", models.CharField(max_length=255)),
                ("event_action", models.CharField(max_length=255)),
                ("yesterday_count", models.PositiveIntegerField(default=0)),
                ("day_before_count", models.PositiveIntegerField(default=0)),
                ("drop_percent", models.IntegerField()),
                ("checked_at", models.DateTimeField(db_index=True, default=django.utils.timezone.now)),
                ("is_resolved", models.BooleanField(default=False)),
                ("event", models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL,
                                            related_name="alerts", to="events.event")),
            ],
            options={"ordering": ["-checked_at", "-id"]},
        ),
    ]
