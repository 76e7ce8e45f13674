from rest_framework.permissions import BasePermission

from .roles import ROLE_ADMIN, ROLE_ANALYST, get_role, has_role_permission, is_admin


class HasRolePermission(BasePermission):
    """
    Grant access when the user's role carries ``required_permission``.

    Use ``HasRolePermission.for_flag("can_edit_events")`` to build a
    permission class bound to one flag.
    """
    required_permission: str | None = None
    message = "Insufficient permissions for this operation."

    def has_permission(self, request, view):
        user = getattr(request, "user", None)
        if not (user and user.is_authenticated):
            return False
        return has_role_permission(user, self.required_permission)

    @classmethod
    def for_flag(cls, flag: str):
        return type(f"Requires_{flag}", (cls,), {"required_permission": flag})


class IsAdminRole(BasePermission):
    message = "Administrators only."

    def has_permission(self, request, view):
        user = getattr(request, "user", None)
        return bool(user and user.is_authenticated and is_admin(user))


class IsAdminOrAnalyst(BasePermission):
    message = "Only administrators and analysts may do this."

    def has_permission(self, request, view):
        user = getattr(request, "user", None)
        return bool(user and user.is_authenticated and get_role(user) in (ROLE_ADMIN, ROLE_ANALYST))
