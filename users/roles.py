"""
Role definitions and the permission table for the admin UI.

Every user carries one role on their profile.  Views ask for a single
permission flag (``can_edit_events`` and so on) rather than checking role
names directly, so the table below is the only place that maps roles to
capabilities.
"""
from __future__ import annotations

ROLE_VIEWER = "viewer"
ROLE_DEVELOPER = "developer"
ROLE_ANALYST = "analyst"
ROLE_ADMIN = "admin"

ROLE_CHOICES = [
    (ROLE_VIEWER, "Viewer"),
    (ROLE_DEVELOPER, "Developer"),
    (ROLE_ANALYST, "Analyst"),
    (ROLE_ADMIN, "Administrator"),
]

USER_ROLES = [value for value, _ in ROLE_CHOICES]

PERMISSION_FLAGS = (
    "can_view_events",
    "can_create_events",
    "can_edit_events",
    "can_delete_events",
    "can_change_statuses",
    "can_comment",
    "can_manage_properties",
    "can_manage_users",
)


def _flags(*granted: str) -> dict[str, bool]:
    return {flag: flag in granted for flag in PERMISSION_FLAGS}


ROLE_PERMISSIONS: dict[str, dict[str, bool]] = {
    ROLE_VIEWER: _flags("can_view_events"),
    ROLE_DEVELOPER: _flags("can_view_events", "can_change_statuses", "can_comment"),
    ROLE_ANALYST: _flags(
        "can_view_events",
        "can_create_events",
        "can_edit_events",
        "can_change_statuses",
        "can_comment",
        "can_manage_properties",
    ),
    ROLE_ADMIN: _flags(*PERMISSION_FLAGS),
}


def get_role(user) -> str | None:
    """Role of ``user``; superusers always count as admins."""
    if not user or not user.is_authenticated:
        return None
    if user.is_superuser:
        return ROLE_ADMIN
    profile = getattr(user, "profile", None)
    return profile.role if profile else ROLE_VIEWER


def has_role_permission(user, permission: str) -> bool:
    if permission not in PERMISSION_FLAGS:
        raise ValueError(f"Unknown permission flag: {permission}")
    role = get_role(user)
    if role is None:
        return False
    return ROLE_PERMISSIONS.get(role, {}).get(permission, False)


def is_admin(user) -> bool:
    return get_role(user) == ROLE_ADMIN
