"""
API tests for tracking-plan events: CRUD, versioning, filters and stats.
"""
import pytest

from events.models import Comment, Event, EventPlatformStatus, EventVersion, StatusHistory


def _create(api, **overrides):
    payload = {
        "category": "Auth",
        "action": "login",
        "name": "user_login",
        "platforms": ["web", "ios"],
        "properties": [{"name": "method", "type": "string", "required": True, "description": "email or sso"}],
    }
    payload.update(overrides)
    resp = api.post("/api/events/", payload, format="json")
    assert resp.status_code == 201, resp.content
    return resp.json()


@pytest.mark.django_db
def test_create_event_opens_version_one_with_statuses(analyst_api, developer_account):
    body = _create(analyst_api, category="  Auth  ", owner=developer_account.pk)

    assert body["category"] == "Auth"
    assert body["current_version"] == 1
    assert body["owner_name"] == "Dev"
    assert body["author_name"] == "Anna Analyst"
    assert [s["platform"] for s in body["platform_statuses"]] == ["ios", "web"]
    assert {s["implementation_status"] for s in body["platform_statuses"]} == {"draft"}
    assert {s["validation_status"] for s in body["platform_statuses"]} == {"pending"}

    version = EventVersion.objects.get(event_id=body["id"])
    assert version.version == 1
    assert version.change_description == "Initial version"
    assert version.category_name == "Auth"


@pytest.mark.django_db
def test_create_requires_category_and_action(analyst_api):
    resp = analyst_api.post("/api/events/", {"category": "  ", "action": "x"}, format="json")
    assert resp.status_code == 400
    assert "category" in resp.json()

    resp = analyst_api.post("/api/events/", {"category": "Auth", "action": ""}, format="json")
    assert resp.status_code == 400
    assert "action" in resp.json()


@pytest.mark.django_db
def test_duplicate_category_and_action_is_rejected(analyst_api):
    _create(analyst_api)
    resp = analyst_api.post("/api/events/", {"category": "Auth", "action": "login"}, format="json")
    assert resp.status_code == 400
    assert Event.objects.count() == 1


@pytest.mark.django_db
def test_viewer_and_developer_cannot_create(viewer_api, developer_api):
    for client in (viewer_api, developer_api):
        resp = client.post("/api/events/", {"category": "Auth", "action": "login"}, format="json")
        assert resp.status_code == 403


@pytest.mark.django_db
def test_anonymous_requests_are_rejected(api_client):
    assert api_client.get("/api/events/").status_code == 401


@pytest.mark.django_db
def test_list_is_paged_newest_first(analyst_api, viewer_api):
    for i in range(3):
        _create(analyst_api, action=f"step_{i}")

    resp = viewer_api.get("/api/events/", {"limit": 2})
    assert resp.status_code == 200
    body = resp.json()
    assert body["count"] == 3
    assert [e["action"] for e in body["results"]] == ["step_2", "step_1"]

    rest = viewer_api.get("/api/events/", {"limit": 2, "offset": 2}).json()
    assert [e["action"] for e in rest["results"]] == ["step_0"]


@pytest.mark.django_db
def test_retrieve_missing_event_is_404(viewer_api):
    assert viewer_api.get("/api/events/999/").status_code == 404


@pytest.mark.django_db
def test_update_without_versioned_change_stays_on_current_version(analyst_api):
    event = _create(analyst_api)
    resp = analyst_api.patch(
        f"/api/events/{event['id']}/",
        {"notes": "checked on staging", "platforms": ["web", "android"]},
        format="json",
    )
    assert resp.status_code == 200
    body = resp.json()
    assert body["current_version"] == 1
    assert [s["platform"] for s in body["platform_statuses"]] == ["android", "web"]

    snapshot = EventVersion.objects.get(event_id=event["id"], version=1)
    assert snapshot.notes == "checked on staging"
    assert snapshot.platforms == ["web", "android"]
    assert not EventPlatformStatus.objects.filter(event_id=event["id"], platform="ios").exists()


@pytest.mark.django_db
def test_changing_a_versioned_field_opens_new_version(analyst_api):
    event = _create(analyst_api)
    url = f"/api/events/{event['id']}/"

    resp = analyst_api.patch(url, {"name": "user_signed_in"}, format="json")
    assert resp.status_code == 200
    assert resp.json()["current_version"] == 2

    resp = analyst_api.patch(
        url, {"action": "sign_in", "change_description": "Renamed action"}, format="json"
    )
    assert resp.json()["current_version"] == 3

    versions = analyst_api.get(f"{url}versions/").json()
    assert [v["version"] for v in versions] == [3, 2, 1]
    assert versions[0]["change_description"] == "Renamed action"
    assert versions[1]["change_description"] == "Updated to version 2"
    assert versions[2]["name"] == "user_login"

    assert analyst_api.get(f"{url}versions/1/").json()["action"] == "login"
    assert analyst_api.get(f"{url}versions/9/").status_code == 404

    # Each version carries its own platform statuses.
    assert EventPlatformStatus.objects.filter(event_id=event["id"]).count() == 6


@pytest.mark.django_db
def test_properties_change_bumps_version(analyst_api):
    event = _create(analyst_api)
    resp = analyst_api.patch(
        f"/api/events/{event['id']}/",
        {"properties": [{"name": "method", "type": "string", "required": False, "description": "email"}]},
        format="json",
    )
    assert resp.json()["current_version"] == 2


@pytest.mark.django_db
def test_update_cannot_collide_with_another_event(analyst_api):
    _create(analyst_api, action="login")
    other = _create(analyst_api, action="logout")
    resp = analyst_api.patch(f"/api/events/{other['id']}/", {"action": "login"}, format="json")
    assert resp.status_code == 400
    assert Event.objects.get(pk=other["id"]).action == "logout"


@pytest.mark.django_db
def test_developer_cannot_edit_and_analyst_cannot_delete(analyst_api, developer_api):
    event = _create(analyst_api)
    assert developer_api.patch(f"/api/events/{event['id']}/", {"notes": "x"}, format="json").status_code == 403
    assert analyst_api.delete(f"/api/events/{event['id']}/").status_code == 403


@pytest.mark.django_db
def test_delete_removes_everything_related(analyst_api, admin_api):
    event = _create(analyst_api)
    analyst_api.post(f"/api/events/{event['id']}/comments/", {"content": "looks good"}, format="json")
    analyst_api.patch(
        f"/api/events/{event['id']}/platform-statuses/web/", {"implementation_status": "implemented"}, format="json"
    )

    assert admin_api.delete(f"/api/events/{event['id']}/").status_code == 204
    assert not Event.objects.exists()
    assert not EventVersion.objects.exists()
    assert not EventPlatformStatus.objects.exists()
    assert not StatusHistory.objects.exists()
    assert not Comment.objects.exists()


@pytest.mark.django_db
def test_filters(analyst_api, viewer_api):
    login = _create(analyst_api, category="Auth", action="login", platforms=["web"])
    _create(analyst_api, category="Shop", action="buy", name="purchase", platforms=["ios", "android"])
    analyst_api.patch(
        f"/api/events/{login['id']}/platform-statuses/web/",
        {"implementation_status": "implemented", "jira_link": "https://jira.local/browse/TRK-42"},
        format="json",
    )

    def actions(**params):
        return [e["action"] for e in viewer_api.get("/api/events/", params).json()["results"]]

    assert actions(category="Shop") == ["buy"]
    assert actions(platform="ios") == ["buy"]
    assert actions(search="purch") == ["buy"]
    assert actions(implementation_status="implemented") == ["login"]
    assert actions(validation_status="pending") == ["buy", "login"]
    assert actions(jira="TRK-42") == ["login"]


@pytest.mark.django_db
def test_status_filter_ignores_older_versions(analyst_api, viewer_api):
    event = _create(analyst_api, platforms=["web"])
    analyst_api.patch(
        f"/api/events/{event['id']}/platform-statuses/web/", {"implementation_status": "implemented"}, format="json"
    )
    analyst_api.patch(f"/api/events/{event['id']}/", {"name": "renamed"}, format="json")

    resp = viewer_api.get("/api/events/", {"implementation_status": "implemented"})
    assert resp.json()["count"] == 0


@pytest.mark.django_db
def test_stats_count_current_version_statuses(analyst_api, viewer_api):
    first = _create(analyst_api, action="a", platforms=["web", "ios"])
    _create(analyst_api, action="b", platforms=["android"])
    analyst_api.patch(
        f"/api/events/{first['id']}/platform-statuses/web/",
        {"implementation_status": "implemented", "validation_status": "correct"},
        format="json",
    )

    stats = viewer_api.get("/api/stats/").json()
    assert stats["total"] == 2
    assert stats["by_implementation_status"] == {
        "draft": 2, "in_development": 0, "implemented": 1, "archived": 0,
    }
    assert stats["by_validation_status"] == {"pending": 2, "correct": 1, "error": 0, "warning": 0}
