"""
Common test fixtures for the API tests of every app.

Provides a user factory, one user per role and DRF clients authenticated
with a JWT obtained from the token endpoint.  The cache is cleared for
every test so brute-force counters never leak between tests.
"""
import pytest
from django.core.cache import cache
from rest_framework.test import APIClient

from users.serializers import create_user

PASSWORD = "pass12345"


@pytest.fixture(autouse=True)
def _clear_cache():
    cache.clear()
    yield
    cache.clear()


@pytest.fixture
def api_client():
    return APIClient()


@pytest.fixture
def make_user(db):
    """Create a user with the given role; the email doubles as username."""
    def _make(email="u1@example.com", role="viewer", name="", password=PASSWORD, is_active=True):
        return create_user(email=email, password=password, name=name, role=role, is_active=is_active)
    return _make


def _authenticate(user, password=PASSWORD):
    client = APIClient()
    resp = client.post("/api/token/", {"username": user.username, "password": password}, format="json")
    assert resp.status_code == 200, resp.content
    client.credentials(HTTP_AUTHORIZATION=f"Bearer {resp.json()['access']}")
    return client


@pytest.fixture
def admin_account(make_user):
    return make_user(email="admin@example.com", role="admin", name="Admin")


@pytest.fixture
def analyst_account(make_user):
    return make_user(email="analyst@example.com", role="analyst", name="Anna Analyst")


@pytest.fixture
def developer_account(make_user):
    return make_user(email="dev@example.com", role="developer", name="Dev")


@pytest.fixture
def viewer_account(make_user):
    return make_user(email="viewer@example.com", role="viewer", name="Viewer")


@pytest.fixture
def admin_api(admin_account):
    return _authenticate(admin_account)


@pytest.fixture
def analyst_api(analyst_account):
    return _authenticate(analyst_account)


@pytest.fixture
def developer_api(developer_account):
    return _authenticate(developer_account)


@pytest.fixture
def viewer_api(viewer_account):
    return _authenticate(viewer_account)


@pytest.fixture
def default_plugins(db):
    """The built-in plugins; the seeding migration does not run under --nomigrations."""
    from plugins.services import ensure_default_plugins

    ensure_default_plugins()


@pytest.fixture
def login_as(db):
    """Return an authenticated client for any user created in the test."""
    return _authenticate
