# inventory/models/inventory_log.py

"""
CANONICAL INVENTORY LEDGER

Immutable stock ledger entry: one row per change to Product.stock.

GUARANTEES:
- Append-only (no updates, no deletes)
- Arithmetic matches the type:
    addition         -> stock_after = stock_before + quantity
    deduction/waste  -> stock_after = stock_before - quantity
    adjustment       -> |stock_after - stock_before| = quantity
- stock_after is never negative
"""

import uuid

from django.conf import settings
from django.core.exceptions import ValidationError
from django.db import models

from products.models import Product


class InventoryLog(models.Model):
    TYPE_ADDITION = "addition"
    TYPE_DEDUCTION = "deduction"
    TYPE_ADJUSTMENT = "adjustment"
    TYPE_WASTE = "waste"

    TYPE_CHOICES = [
        (TYPE_ADDITION, "Addition"),
        (TYPE_DEDUCTION, "Deduction"),
        (TYPE_ADJUSTMENT, "Adjustment"),
        (TYPE_WASTE, "Waste"),
    ]

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    product = models.ForeignKey(
        Product, on_delete=models.PROTECT, related_name="inventory_logs"
    )

    type = models.CharField(max_length=20, choices=TYPE_CHOICES)
    quantity = models.PositiveIntegerField()
    stock_before = models.PositiveIntegerField()
    stock_after = models.PositiveIntegerField()
    reason = models.CharField(max_length=255, blank=True, default="")

    order = models.ForeignKey(
        "orders.Order",
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="inventory_logs",
    )

    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="inventory_logs",
    )

    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["-created_at"]
        indexes = [
            models.Index(fields=["product", "created_at"], name="invlog_product_created_idx"),
            models.Index(fields=["type", "created_at"], name="invlog_type_created_idx"),
        ]

    def clean(self):
        if self.quantity is None or self.quantity <= 0:
            raise ValidationError("quantity must be greater than zero")

        if self.stock_after is None or self.stock_after < 0:
            raise ValidationError("stock_after cannot be negative")

        delta = int(self.stock_after) - int(self.stock_before)

        if self.type == self.TYPE_ADDITION and delta != self.quantity:
            raise ValidationError("addition must increase stock by quantity")

        if self.type in {self.TYPE_DEDUCTION, self.TYPE_WASTE} and delta != -self.quantity:
            raise ValidationError(f"{self.type} must decrease stock by quantity")

        if self.type == self.TYPE_ADJUSTMENT and abs(delta) != self.quantity:
            raise ValidationError("adjustment quantity must equal the absolute change")

    def save(self, *args, **kwargs):
        if not self._state.adding:
            raise ValidationError("InventoryLog records are immutable")
        self.full_clean()
        return super().save(*args, **kwargs)

    def delete(self, *args, **kwargs):
        raise ValidationError("InventoryLog records are immutable and cannot be deleted")

    def __str__(self):
        product_name = getattr(self.product, "name", "Product")
        return f"{product_name} | {self.type} | {self.quantity}"
