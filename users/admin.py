"""
Admin configuration for the users app.

Re-registers the `User` admin with an inline profile so roles can be
edited from the Django admin, and exposes the login log read-only.
"""
from django.contrib import admin
from django.contrib.auth.admin import UserAdmin as BaseUserAdmin
from django.contrib.auth.models import User

from .models import LoginLog, UserProfile


class UserProfileInline(admin.StackedInline):
    model = UserProfile
    can_delete = False
    fields = ("name", "role")


class UserAdmin(BaseUserAdmin):
    inlines = [UserProfileInline]
    list_display = ("email", "profile_name", "profile_role", "is_active", "date_joined")
    list_filter = ("is_active", "profile__role")
    search_fields = ("email", "username", "profile__name")

    @admin.display(description="Name")
    def profile_name(self, obj):
        return getattr(getattr(obj, "profile", None), "name", "")

    @admin.display(description="Role")
    def profile_role(self, obj):
        return getattr(getattr(obj, "profile", None), "role", "")


@admin.register(LoginLog)
class LoginLogAdmin(admin.ModelAdmin):
    list_display = ("user", "ip_address", "created_at")
    search_fields = ("user__email", "ip_address")
    ordering = ("-created_at",)
    readonly_fields = ("user", "ip_address", "user_agent", "created_at")


admin.site.unregister(User)
admin.site.register(User, UserAdmin)
