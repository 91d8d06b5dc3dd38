# orders/models/status_history.py

import uuid

from django.conf import settings
from django.core.exceptions import ValidationError
from django.db import models


class OrderStatusHistory(models.Model):
    """
    Append-only status trail for an order.
    The first row ("Order placed") is written at checkout.
    """

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    order = models.ForeignKey("orders.Order", on_delete=models.CASCADE, related_name="status_history")
    status = models.CharField(max_length=20)
    notes = models.TextField(blank=True, default="")
    changed_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="order_status_changes",
    )
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["created_at"]
        verbose_name_plural = "order status history"
        indexes = [
            models.Index(fields=["order", "created_at"], name="orderhist_order_created_idx"),
        ]

    def save(self, *args, **kwargs):
        if not self._state.adding:
            raise ValidationError("OrderStatusHistory records are immutable")
        return super().save(*args, **kwargs)

    def delete(self, *args, **kwargs):
        raise ValidationError("OrderStatusHistory records are immutable and cannot be deleted")

    def __str__(self):
        return f"{self.order_id} -> {self.status}"
