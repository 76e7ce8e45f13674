"""
Tests for login, logout, the current-user endpoint and first-run setup.
"""
import pytest
from rest_framework.test import APIClient

from users.models import LoginLog, UserProfile
from users.serializers import create_user


@pytest.mark.django_db
def test_setup_flow_creates_first_admin(api_client):
    status_resp = api_client.get("/api/setup/status/")
    assert status_resp.status_code == 200
    assert status_resp.json() == {"is_configured": False, "has_users": False}

    resp = api_client.post(
        "/api/setup/complete/",
        {"name": "Root", "email": "Root@Example.com", "password": "secret1"},
        format="json",
    )
    assert resp.status_code == 201
    body = resp.json()
    assert body["success"] is True
    assert body["user"]["email"] == "root@example.com"
    assert body["user"]["role"] == "admin"
    assert body["user"]["permissions"]["can_manage_users"] is True
    assert "password" not in body["user"]
    assert "access" in body

    assert api_client.get("/api/setup/status/").json() == {"is_configured": True, "has_users": True}


@pytest.mark.django_db
def test_setup_refused_once_users_exist(api_client, viewer_account):
    resp = api_client.post(
        "/api/setup/complete/",
        {"name": "Other", "email": "other@example.com", "password": "secret1"},
        format="json",
    )
    assert resp.status_code == 409


@pytest.mark.django_db
def test_setup_rejects_short_password(api_client):
    resp = api_client.post(
        "/api/setup/complete/",
        {"name": "Root", "email": "root@example.com", "password": "123"},
        format="json",
    )
    assert resp.status_code == 400
    assert "password" in resp.json()


@pytest.mark.django_db
def test_login_success_records_log(api_client, analyst_account):
    resp = api_client.post(
        "/api/auth/login/",
        {"email": "analyst@example.com", "password": "pass12345"},
        format="json",
        HTTP_X_FORWARDED_FOR="10.0.0.5, 172.16.0.1",
        HTTP_USER_AGENT="pytest-agent",
    )
    assert resp.status_code == 200
    body = resp.json()
    assert body["user"]["role"] == "analyst"
    assert body["user"]["permissions"]["can_create_events"] is True
    assert body["user"]["permissions"]["can_delete_events"] is False
    assert body["access"] and body["refresh"]

    log = LoginLog.objects.get(user=analyst_account)
    assert log.ip_address == "10.0.0.5"
    assert log.user_agent == "pytest-agent"

    # The login also opened a session, so /me works without a token.
    assert api_client.get("/api/auth/me/").status_code == 200


@pytest.mark.django_db
@pytest.mark.parametrize(
    "payload,expected",
    [
        ({"email": "not-an-email", "password": "x"}, 400),
        ({"email": "nobody@example.com", "password": "pass12345"}, 401),
        ({"email": "viewer@example.com", "password": "wrong"}, 401),
    ],
)
def test_login_failures(api_client, viewer_account, payload, expected):
    resp = api_client.post("/api/auth/login/", payload, format="json")
    assert resp.status_code == expected
    assert not LoginLog.objects.exists()


@pytest.mark.django_db
def test_login_rejects_deactivated_account(api_client, make_user):
    make_user(email="gone@example.com", is_active=False)
    resp = api_client.post("/api/auth/login/", {"email": "gone@example.com", "password": "pass12345"}, format="json")
    assert resp.status_code == 401


@pytest.mark.django_db
def test_login_brute_force_block(api_client, viewer_account, settings):
    settings.LOGIN_RATE_LIMIT = {"max_attempts": 3, "window": 600, "block": 900}
    for _ in range(3):
        resp = api_client.post("/api/auth/login/", {"email": "viewer@example.com", "password": "bad"}, format="json")
        assert resp.status_code == 401

    blocked = api_client.post("/api/auth/login/", {"email": "viewer@example.com", "password": "bad"}, format="json")
    assert blocked.status_code == 429

    # Correct credentials are refused too while the block lasts.
    still_blocked = api_client.post(
        "/api/auth/login/", {"email": "viewer@example.com", "password": "pass12345"}, format="json"
    )
    assert still_blocked.status_code == 429

    # Another client IP is unaffected.
    other = APIClient(REMOTE_ADDR="192.0.2.10")
    ok = other.post("/api/auth/login/", {"email": "viewer@example.com", "password": "pass12345"}, format="json")
    assert ok.status_code == 200


@pytest.mark.django_db
def test_me_requires_authentication(api_client):
    assert api_client.get("/api/auth/me/").status_code == 401


@pytest.mark.django_db
def test_me_returns_current_user(developer_api):
    resp = developer_api.get("/api/auth/me/")
    assert resp.status_code == 200
    assert resp.json()["email"] == "dev@example.com"
    assert resp.json()["role"] == "developer"


@pytest.mark.django_db
def test_logout_blacklists_refresh_token(api_client, viewer_account):
    login = api_client.post("/api/auth/login/", {"email": "viewer@example.com", "password": "pass12345"}, format="json")
    refresh = login.json()["refresh"]

    resp = api_client.post("/api/auth/logout/", {"refresh": refresh}, format="json")
    assert resp.status_code == 200

    reuse = APIClient().post("/api/token/refresh/", {"refresh": refresh}, format="json")
    assert reuse.status_code == 401


@pytest.mark.django_db
def test_profile_created_for_every_user(django_user_model):
    user = django_user_model.objects.create_user(username="plain", password="x")
    assert UserProfile.objects.get(user=user).role == "viewer"


@pytest.mark.django_db
def test_superuser_counts_as_admin(django_user_model):
    user = django_user_model.objects.create_superuser("root", "root@example.com", "pass12345")
    client = APIClient()
    client.force_authenticate(user)
    assert client.get("/api/users/").status_code == 200


@pytest.mark.django_db
def test_create_user_returns_filled_profile():
    user = create_user(email="Lead@Example.com", password="secret1", name="Lead", role="admin")
    assert user.profile.role == "admin"
    assert user.profile.name == "Lead"
    assert UserProfile.objects.get(user=user).role == "admin"
    assert UserProfile.objects.filter(user=user).count() == 1


@pytest.mark.django_db
def test_token_endpoint_records_login(api_client, viewer_account):
    resp = api_client.post(
        "/api/token/", {"username": "viewer@example.com", "password": "pass12345"}, format="json"
    )
    assert resp.status_code == 200
    assert resp.json()["access"] and resp.json()["refresh"]
    assert LoginLog.objects.filter(user=viewer_account).count() == 1


@pytest.mark.django_db
def test_token_endpoint_brute_force_block(api_client, viewer_account, settings):
    settings.LOGIN_RATE_LIMIT = {"max_attempts": 3, "window": 600, "block": 900}
    for _ in range(3):
        resp = api_client.post("/api/token/", {"username": "viewer@example.com", "password": "bad"}, format="json")
        assert resp.status_code == 401

    blocked = api_client.post("/api/token/", {"username": "viewer@example.com", "password": "bad"}, format="json")
    assert blocked.status_code == 429

    still_blocked = api_client.post(
        "/api/token/", {"username": "viewer@example.com", "password": "pass12345"}, format="json"
    )
    assert still_blocked.status_code == 429
    assert not LoginLog.objects.exists()

    # The block is shared with the email login endpoint.
    login = api_client.post("/api/auth/login/", {"email": "viewer@example.com", "password": "pass12345"}, format="json")
    assert login.status_code == 429
