"""
Models for the plugins app.

A `Plugin` is an optional feature of the admin UI that can be switched
on or off and carries its own JSON configuration.  The primary key is a
stable slug such as ``code-generator`` or ``alerts``.
"""
from django.db import models


class Plugin(models.Model):
    id = models.SlugField(max_length=64, primary_key=True)
    name = models.CharField(max_length=255)
    description = models.TextField(blank=True, default="")
    version = models.CharField(max_length=32, default="1.0.0")
    is_enabled = models.BooleanField(default=True)
    config = models.JSONField(default=dict, blank=True)
    installed_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["id"]

    def __str__(self) -> str:
        state = "on" if self.is_enabled else "off"
        return f"Plugin({self.id}, {state})"
