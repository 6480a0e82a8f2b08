"""Key/value settings editable from the Django admin.

Rows override the notification defaults from Django settings; see
``settings_provider.DatabaseSettingsProvider`` for how they are read.
"""

from __future__ import annotations

from django.db import models  # type: ignore


class SystemSetting(models.Model):
    """A single notification setting such as ``admin_email``."""

    key = models.CharField(max_length=100, unique=True)
    value = models.TextField(blank=True)
    description = models.CharField(max_length=255, blank=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ['key']

    def __str__(self) -> str:
        return f"{self.key}={self.value}"
