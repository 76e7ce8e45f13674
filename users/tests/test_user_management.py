"""
Tests for admin user management, role permissions and the login log.
"""
import pytest

from users.models import LoginLog
from users.roles import ROLE_PERMISSIONS, USER_ROLES, has_role_permission


def test_role_table_covers_every_role():
    assert set(ROLE_PERMISSIONS) == set(USER_ROLES)
    assert all(ROLE_PERMISSIONS["admin"].values())
    assert [k for k, v in ROLE_PERMISSIONS["viewer"].items() if v] == ["can_view_events"]
    assert ROLE_PERMISSIONS["developer"]["can_comment"] is True
    assert ROLE_PERMISSIONS["developer"]["can_edit_events"] is False
    assert ROLE_PERMISSIONS["analyst"]["can_manage_properties"] is True
    assert ROLE_PERMISSIONS["analyst"]["can_manage_users"] is False


@pytest.mark.django_db
def test_unknown_permission_flag_is_an_error(viewer_account):
    with pytest.raises(ValueError):
        has_role_permission(viewer_account, "can_fly")


@pytest.mark.django_db
def test_user_crud_by_admin(admin_api):
    created = admin_api.post(
        "/api/users/",
        {"email": "New@Example.com", "name": "Newbie", "role": "developer", "password": "secret1"},
        format="json",
    )
    assert created.status_code == 201
    body = created.json()
    assert body["email"] == "new@example.com"
    assert body["role"] == "developer"
    assert body["permissions"]["can_change_statuses"] is True
    assert body["permissions"]["can_manage_users"] is False
    assert "password" not in body
    user_id = body["id"]

    listed = admin_api.get("/api/users/").json()
    assert {u["email"] for u in listed} == {"admin@example.com", "new@example.com"}

    patched = admin_api.patch(f"/api/users/{user_id}/", {"role": "analyst", "is_active": False}, format="json")
    assert patched.status_code == 200
    assert patched.json()["role"] == "analyst"
    assert patched.json()["is_active"] is False

    assert admin_api.delete(f"/api/users/{user_id}/").status_code == 204
    assert admin_api.get(f"/api/users/{user_id}/").status_code == 404


@pytest.mark.django_db
def test_password_is_hashed_and_changeable(admin_api, django_user_model):
    resp = admin_api.post("/api/users/", {"email": "p@example.com", "password": "secret1"}, format="json")
    user = django_user_model.objects.get(pk=resp.json()["id"])
    assert user.password != "secret1"
    assert user.check_password("secret1")

    admin_api.patch(f"/api/users/{user.pk}/", {"password": "another1"}, format="json")
    user.refresh_from_db()
    assert user.check_password("another1")


@pytest.mark.django_db
def test_user_validation(admin_api):
    short = admin_api.post("/api/users/", {"email": "s@example.com", "password": "123"}, format="json")
    assert short.status_code == 400
    assert "password" in short.json()

    missing = admin_api.post("/api/users/", {"email": "m@example.com"}, format="json")
    assert missing.status_code == 400

    dup = admin_api.post("/api/users/", {"email": "ADMIN@example.com", "password": "secret1"}, format="json")
    assert dup.status_code == 400
    assert "email" in dup.json()


@pytest.mark.django_db
def test_user_management_requires_admin(analyst_api, viewer_api):
    assert analyst_api.get("/api/users/").status_code == 403
    assert viewer_api.post("/api/users/", {"email": "x@example.com", "password": "secret1"},
                           format="json").status_code == 403


@pytest.mark.django_db
def test_login_logs_newest_first(admin_api, admin_account, viewer_account):
    LoginLog.objects.create(user=viewer_account, ip_address="10.0.0.1")
    LoginLog.objects.create(user=admin_account, ip_address="10.0.0.2")

    resp = admin_api.get("/api/login-logs/?limit=1")
    assert resp.status_code == 200
    body = resp.json()
    # Plus the token login made by the admin_api fixture.
    assert body["count"] == 3
    assert len(body["results"]) == 1
    assert body["results"][0]["ip_address"] == "10.0.0.2"
    assert body["results"][0]["user_email"] == "admin@example.com"


@pytest.mark.django_db
def test_login_logs_admin_only(developer_api):
    assert developer_api.get("/api/login-logs/").status_code == 403
