"""
URL routes for the users app.

Mounted under `/api/`:
- `auth/login/`, `auth/logout/`, `auth/me/`
- `setup/status/`, `setup/complete/`
- `users/` (admin CRUD) and `login-logs/`
"""
from django.urls import include, path
from rest_framework.routers import DefaultRouter

from .views import (
    LoginLogListView,
    LoginView,
    LogoutView,
    MeView,
    SetupCompleteView,
    SetupStatusView,
    UserViewSet,
)

router = DefaultRouter()
router.register(r"users", UserViewSet, basename="user")

urlpatterns = [
    path("auth/login/", LoginView.as_view(), name="login"),
    path("auth/logout/", LogoutView.as_view(), name="logout"),
    path("auth/me/", MeView.as_view(), name="me"),

    path("setup/status/", SetupStatusView.as_view(), name="setup-status"),
    path("setup/complete/", SetupCompleteView.as_view(), name="setup-complete"),

    path("login-logs/", LoginLogListView.as_view(), name="login-logs"),
    path("", include(router.urls)),
]
