# notifications/models/notification.py

import uuid

from django.conf import settings
from django.db import models
from django.utils import timezone


class Notification(models.Model):
    """
    In-app notification for one user.

    Created by services (order placed, status change, stock alerts);
    users only ever read, mark read or delete their own.
    """

    TYPE_ORDER_PLACED = "order_placed"
    TYPE_ORDER_STATUS = "order_status"
    TYPE_DELIVERY = "delivery"
    TYPE_STOCK_ALERT = "stock_alert"
    TYPE_SYSTEM = "system"

    TYPE_CHOICES = [
        (TYPE_ORDER_PLACED, "Order placed"),
        (TYPE_ORDER_STATUS, "Order status"),
        (TYPE_DELIVERY, "Delivery"),
        (TYPE_STOCK_ALERT, "Stock alert"),
        (TYPE_SYSTEM, "System"),
    ]

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="notifications",
    )

    type = models.CharField(max_length=20, choices=TYPE_CHOICES, default=TYPE_SYSTEM)
    title = models.CharField(max_length=255)
    message = models.TextField(blank=True, default="")
    data = models.JSONField(default=dict, blank=True)

    read_at = models.DateTimeField(null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["-created_at"]
        indexes = [
            models.Index(fields=["user", "read_at"], name="notification_user_read_idx"),
        ]

    @property
    def is_read(self) -> bool:
        return self.read_at is not None

    def mark_read(self) -> None:
        if self.read_at is None:
            self.read_at = timezone.now()
            self.save(update_fields=["read_at"])

    def __str__(self):
        return f"{self.user_id} | {self.type} | {self.title}"
