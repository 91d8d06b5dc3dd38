# store/models/setting.py

"""
PATH: store/models/setting.py

SITE SETTINGS

- Setting rows hold the raw text value plus its declared type.
- Rows are created lazily on first write; until then the registry
  default in store/services/settings.py applies.
- Every change is recorded in SettingHistory (append-only).
"""

import uuid

from django.conf import settings
from django.core.exceptions import ValidationError
from django.db import models


class Setting(models.Model):
    TYPE_STRING = "string"
    TYPE_INTEGER = "integer"
    TYPE_FLOAT = "float"
    TYPE_BOOLEAN = "boolean"
    TYPE_JSON = "json"

    TYPE_CHOICES = [
        (TYPE_STRING, "String"),
        (TYPE_INTEGER, "Integer"),
        (TYPE_FLOAT, "Float"),
        (TYPE_BOOLEAN, "Boolean"),
        (TYPE_JSON, "JSON"),
    ]

    GROUP_CHOICES = [
        ("store", "Store"),
        ("operating", "Operating hours"),
        ("delivery", "Delivery"),
        ("payment", "Payment"),
        ("email", "Email"),
        ("notifications", "Notifications"),
        ("security", "Security"),
        ("features", "Features"),
    ]

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    key = models.CharField(max_length=100, unique=True)
    value = models.TextField(blank=True, default="")
    type = models.CharField(max_length=10, choices=TYPE_CHOICES, default=TYPE_STRING)
    group = models.CharField(max_length=20, choices=GROUP_CHOICES, db_index=True)
    description = models.CharField(max_length=255, blank=True, default="")
    is_public = models.BooleanField(default=False)

    updated_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="+",
    )
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["group", "key"]

    def __str__(self):
        return f"{self.group}.{self.key}"


class SettingHistory(models.Model):
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    setting = models.ForeignKey(Setting, on_delete=models.CASCADE, related_name="history")
    old_value = models.TextField(blank=True, default="")
    new_value = models.TextField(blank=True, default="")
    changed_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="+",
    )
    changed_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["-changed_at"]
        verbose_name_plural = "setting history"

    def save(self, *args, **kwargs):
        if not self._state.adding:
            raise ValidationError("SettingHistory records are immutable")
        return super().save(*args, **kwargs)

    def delete(self, *args, **kwargs):
        raise ValidationError("SettingHistory records are immutable and cannot be deleted")
