from io import StringIO

import pytest
from django.core.management import CommandError, call_command

from alerts.config import save_alert_settings


@pytest.mark.django_db
def test_command_fails_without_token(default_plugins):
    with pytest.raises(CommandError):
        call_command("check_event_drops", stdout=StringIO())


@pytest.mark.django_db
def test_command_prints_summary(default_plugins, monkeypatch):
    save_alert_settings({"matomo_token": "t"})
    monkeypatch.setattr("alerts.detection.get_event_count", lambda *args: 0)
    out = StringIO()
    call_command("check_event_drops", stdout=out)
    assert "Checked 0 event(s), created 0 alert(s)" in out.getvalue()
