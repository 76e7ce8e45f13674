"""
Tests for the plugin registry: seeding, listing, toggling and config updates.
"""
import pytest
from django.core.management import call_command

from plugins.defaults import DEFAULT_PLUGINS
from plugins.models import Plugin
from plugins.services import ensure_default_plugins, is_plugin_enabled


@pytest.fixture
def plugins(db):
    ensure_default_plugins()
    return Plugin.objects.all()


@pytest.mark.django_db
def test_seeding_is_idempotent_and_keeps_changes():
    assert len(ensure_default_plugins()) == len(DEFAULT_PLUGINS)
    Plugin.objects.filter(pk="comments").update(is_enabled=False)

    assert ensure_default_plugins() == []
    assert Plugin.objects.count() == len(DEFAULT_PLUGINS)
    assert is_plugin_enabled("comments") is False


@pytest.mark.django_db
def test_seed_command_installs_missing(capsys):
    Plugin.objects.create(id="alerts", name="Custom alerts", is_enabled=False)
    call_command("seed_plugins")
    assert Plugin.objects.count() == len(DEFAULT_PLUGINS)
    assert Plugin.objects.get(pk="alerts").name == "Custom alerts"
    assert "Installed" in capsys.readouterr().out


@pytest.mark.django_db
def test_seed_command_dry_run(capsys):
    call_command("seed_plugins", "--dry-run")
    assert Plugin.objects.count() == 0
    assert "Would install: code-generator" in capsys.readouterr().out


def test_unknown_plugin_is_disabled(db):
    assert is_plugin_enabled("does-not-exist") is False


@pytest.mark.django_db
def test_list_and_detail_hide_token(viewer_api, plugins):
    Plugin.objects.filter(pk="alerts").update(config={"matomo_token": "s3cret", "drop_threshold": 30})

    resp = viewer_api.get("/api/plugins/")
    assert resp.status_code == 200
    ids = [p["id"] for p in resp.json()]
    assert "code-generator" in ids and "alerts" in ids

    detail = viewer_api.get("/api/plugins/alerts/").json()
    assert "matomo_token" not in detail["config"]
    assert detail["config"]["has_token"] is True
    assert "s3cret" not in resp.content.decode()


@pytest.mark.django_db
def test_missing_plugin_is_404(viewer_api, plugins):
    assert viewer_api.get("/api/plugins/nope/").status_code == 404


@pytest.mark.django_db
def test_admin_toggles_and_merges_config(admin_api, plugins):
    Plugin.objects.filter(pk="alerts").update(config={"matomo_token": "keep-me", "drop_threshold": 30})

    resp = admin_api.patch("/api/plugins/alerts/", {"is_enabled": False, "config": {"drop_threshold": 50}},
                           format="json")
    assert resp.status_code == 200
    assert resp.json()["is_enabled"] is False

    plugin = Plugin.objects.get(pk="alerts")
    assert plugin.config["drop_threshold"] == 50
    assert plugin.config["matomo_token"] == "keep-me"


@pytest.mark.django_db
def test_alerts_config_follows_alert_settings_rules(admin_api, plugins):
    Plugin.objects.filter(pk="alerts").update(config={"drop_threshold": 30})

    for config in ({"drop_threshold": "abc"}, {"max_concurrency": 0}, {"matomo_site_id": "web=1"}):
        resp = admin_api.patch("/api/plugins/alerts/", {"config": config}, format="json")
        assert resp.status_code == 400, config
        assert "config" in resp.json()
    assert Plugin.objects.get(pk="alerts").config == {"drop_threshold": 30}

    resp = admin_api.patch("/api/plugins/alerts/", {"config": {"drop_threshold": "45", "note": "x"}}, format="json")
    assert resp.status_code == 200
    assert Plugin.objects.get(pk="alerts").config == {"drop_threshold": 45, "note": "x"}


@pytest.mark.django_db
def test_empty_patch_rejected(admin_api, plugins):
    assert admin_api.patch("/api/plugins/comments/", {}, format="json").status_code == 400


@pytest.mark.django_db
def test_only_admin_may_update(analyst_api, plugins):
    resp = analyst_api.patch("/api/plugins/comments/", {"is_enabled": False}, format="json")
    assert resp.status_code == 403
    assert Plugin.objects.get(pk="comments").is_enabled is True
