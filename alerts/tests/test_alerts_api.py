"""
API tests for alerts: listing, deletion, settings and the drop check
endpoints.
"""
import json
from datetime import timedelta

import pytest
from django.utils import timezone

from alerts.config import save_alert_settings
from alerts.models import Alert
from alerts.tasks import check_event_drops
from events.services import create_event
from plugins.defaults import ALERTS_PLUGIN_ID
from plugins.models import Plugin


def _alert(**overrides):
    data = {"platform": "web", "event_category": "Shop", "event_action": "buy",
            "yesterday_count": 10, "day_before_count": 100, "drop_percent": 90}
    data.update(overrides)
    return Alert.objects.create(**data)


@pytest.fixture
def monitored_events(db):
    create_event({"category": "Shop", "action": "buy", "platforms": ["web", "ios"]})
    create_event({"category": "Auth", "action": "login", "platforms": ["android"]})


@pytest.fixture
def halved_counts(monkeypatch):
    """Every label has half of the day-before volume yesterday."""
    yesterday = timezone.now().date() - timedelta(days=1)

    def fake_count(api_url, token, site_id, label, day):
        return 50 if day == yesterday else 100

    monkeypatch.setattr("alerts.detection.get_event_count", fake_count)


def _sse_messages(response):
    body = b"".join(response.streaming_content).decode()
    return [json.loads(chunk[len("data: "):]) for chunk in body.split("\n\n") if chunk.startswith("data: ")]


@pytest.mark.django_db
def test_list_alerts_newest_first(viewer_api):
    old = _alert(checked_at=timezone.now() - timedelta(days=1))
    new = _alert(event_action="view")

    resp = viewer_api.get("/api/alerts/")
    assert resp.status_code == 200
    body = resp.json()
    assert body["count"] == 2
    assert [a["id"] for a in body["results"]] == [new.pk, old.pk]

    assert viewer_api.get("/api/alerts/", {"limit": 1, "offset": 1}).json()["results"][0]["id"] == old.pk


@pytest.mark.django_db
def test_delete_requires_admin_or_analyst(viewer_api, developer_api, analyst_api):
    alert = _alert()
    assert viewer_api.delete(f"/api/alerts/{alert.pk}/").status_code == 403
    assert developer_api.delete(f"/api/alerts/{alert.pk}/").status_code == 403
    assert analyst_api.delete(f"/api/alerts/{alert.pk}/").status_code == 204
    assert not Alert.objects.exists()


@pytest.mark.django_db
def test_bulk_delete(admin_api, developer_api):
    a, b, c = _alert(), _alert(), _alert()

    assert admin_api.post("/api/alerts/bulk-delete/", {"ids": []}, format="json").status_code == 400
    assert admin_api.post("/api/alerts/bulk-delete/", {"ids": "all"}, format="json").status_code == 400
    assert admin_api.post("/api/alerts/bulk-delete/", {}, format="json").status_code == 400
    assert developer_api.post("/api/alerts/bulk-delete/", {"ids": [a.pk]}, format="json").status_code == 403

    resp = admin_api.post("/api/alerts/bulk-delete/", {"ids": [a.pk, b.pk]}, format="json")
    assert resp.status_code == 200
    assert resp.json() == {"deleted": 2}
    assert list(Alert.objects.values_list("id", flat=True)) == [c.pk]


@pytest.mark.django_db
def test_settings_are_admin_only_and_hide_the_token(admin_api, analyst_api, default_plugins):
    assert analyst_api.get("/api/alerts/settings/").status_code == 403
    assert analyst_api.put("/api/alerts/settings/", {"drop_threshold": 10}, format="json").status_code == 403

    initial = admin_api.get("/api/alerts/settings/").json()
    assert initial["has_token"] is False
    assert initial["drop_threshold"] == 30
    assert initial["matomo_site_id"] == "web:1,ios:2,android:3"
    assert "matomo_token" not in initial

    resp = admin_api.put(
        "/api/alerts/settings/",
        {"matomo_token": "s3cret", "drop_threshold": 40, "matomo_site_id": "web:7"},
        format="json",
    )
    assert resp.status_code == 200
    body = resp.json()
    assert body["has_token"] is True
    assert body["drop_threshold"] == 40
    assert "s3cret" not in resp.content.decode()

    plugin = Plugin.objects.get(pk=ALERTS_PLUGIN_ID)
    assert plugin.config["matomo_token"] == "s3cret"
    assert plugin.config["max_concurrency"] == 5

    # A null token keeps the stored one; is_enabled maps to the plugin flag.
    resp = admin_api.put("/api/alerts/settings/", {"matomo_token": None, "is_enabled": False}, format="json")
    assert resp.json()["has_token"] is True
    assert resp.json()["is_enabled"] is False
    assert Plugin.objects.get(pk=ALERTS_PLUGIN_ID).is_enabled is False

    plugin_view = admin_api.get(f"/api/plugins/{ALERTS_PLUGIN_ID}/").json()
    assert plugin_view["config"]["has_token"] is True
    assert "matomo_token" not in plugin_view["config"]


@pytest.mark.django_db
def test_settings_validation(admin_api, default_plugins):
    for payload in ({"drop_threshold": 0}, {"max_concurrency": 0}, {"matomo_site_id": "web=1"},
                    {"matomo_url": "not a url"}):
        assert admin_api.put("/api/alerts/settings/", payload, format="json").status_code == 400, payload


@pytest.mark.django_db
def test_settings_fall_back_on_invalid_stored_values(admin_api, default_plugins):
    Plugin.objects.filter(pk=ALERTS_PLUGIN_ID).update(config={"drop_threshold": "abc", "max_concurrency": [2]})

    resp = admin_api.get("/api/alerts/settings/")
    assert resp.status_code == 200
    assert resp.json()["drop_threshold"] == 30
    assert resp.json()["max_concurrency"] == 5


@pytest.mark.django_db
def test_check_without_token_is_rejected(analyst_api, default_plugins):
    resp = analyst_api.post("/api/alerts/check/")
    assert resp.status_code == 400
    assert "token" in resp.json()["detail"]


@pytest.mark.django_db
def test_check_when_module_disabled(analyst_api, default_plugins):
    save_alert_settings({"matomo_token": "t", "is_enabled": False})
    resp = analyst_api.post("/api/alerts/check/")
    assert resp.status_code == 400
    assert "disabled" in resp.json()["detail"]


@pytest.mark.django_db
def test_check_creates_alerts(analyst_api, viewer_api, default_plugins, monitored_events, halved_counts):
    save_alert_settings({"matomo_token": "t"})
    assert viewer_api.post("/api/alerts/check/").status_code == 403

    resp = analyst_api.post("/api/alerts/check/")
    assert resp.status_code == 200
    body = resp.json()
    assert body["alerts_created"] == 3
    assert body["events_checked"] == 2
    assert body["message"] == "Check finished. Alerts created: 3."
    assert set(Alert.objects.values_list("platform", flat=True)) == {"web", "ios", "android"}
    assert set(Alert.objects.values_list("drop_percent", flat=True)) == {50}


@pytest.mark.django_db
def test_threshold_above_drop_creates_nothing(analyst_api, default_plugins, monitored_events, halved_counts):
    save_alert_settings({"matomo_token": "t", "drop_threshold": 60})
    assert analyst_api.post("/api/alerts/check/").json()["alerts_created"] == 0


@pytest.mark.django_db
def test_check_stream_reports_progress(analyst_api, default_plugins, monitored_events, halved_counts):
    save_alert_settings({"matomo_token": "t", "max_concurrency": 2})

    resp = analyst_api.get("/api/alerts/check-stream/", HTTP_ACCEPT="text/event-stream")
    assert resp.status_code == 200
    assert resp["Content-Type"].startswith("text/event-stream")

    messages = _sse_messages(resp)
    assert [m["status"] for m in messages] == ["started", "progress", "progress", "completed"]
    assert messages[0]["total"] == 3
    assert messages[-1]["alerts_created"] == 3
    assert messages[-1]["events_checked"] == 2


@pytest.mark.django_db
def test_check_stream_reports_configuration_errors(analyst_api, default_plugins):
    resp = analyst_api.get("/api/alerts/check-stream/")
    messages = _sse_messages(resp)
    assert len(messages) == 1
    assert "token" in messages[0]["error"]


@pytest.mark.django_db
def test_scheduled_task(default_plugins, monitored_events, halved_counts):
    assert "skipped" in check_event_drops()

    save_alert_settings({"matomo_token": "t"})
    summary = check_event_drops()
    assert summary["status"] == "completed"
    assert summary["alerts_created"] == 3
