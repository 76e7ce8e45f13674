"""
Models for the users app.

A `UserProfile` extends the built-in `auth.User` with a display name and
the role that drives every permission check.  Profiles are created by a
`post_save` signal.  `LoginLog` keeps one row per successful login.
"""
from django.contrib.auth.models import User
from django.db import models

from .roles import ROLE_CHOICES, ROLE_VIEWER


class UserProfile(models.Model):
    """Extension of Django's built-in User model."""

    user = models.OneToOneField(User, on_delete=models.CASCADE, related_name="profile")
    name = models.CharField(max_length=255, blank=True, default="")
    role = models.CharField(max_length=20, choices=ROLE_CHOICES, default=ROLE_VIEWER, db_index=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self) -> str:
        return f"Profile<{self.user.email or self.user.username}:{self.role}>"

    @property
    def display_name(self) -> str:
        return self.name or self.user.get_full_name() or self.user.email or self.user.username


class LoginLog(models.Model):
    user = models.ForeignKey(User, on_delete=models.CASCADE, related_name="login_logs")
    ip_address = models.CharField(max_length=64, blank=True, null=True)
    user_agent = models.TextField(blank=True, null=True)
    created_at = models.DateTimeField(auto_now_add=True, db_index=True)

    class Meta:
        ordering = ["-created_at", "-id"]

    def __str__(self) -> str:
        return f"LoginLog<{self.user_id} @ {self.created_at:%Y-%m-%d %H:%M}>"
