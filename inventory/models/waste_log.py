# inventory/models/waste_log.py

import uuid
from decimal import Decimal

from django.conf import settings
from django.db import models

from products.models import Product


class WasteLog(models.Model):
    """
    Spoiled / damaged stock written off by staff.

    Stock leaves the shelf when the log is created; an admin then approves
    it (write-off stands) or rejects it (stock is put back).
    """

    REASON_DAMAGED = "damaged"
    REASON_EXPIRED = "expired"
    REASON_QUALITY = "quality"
    REASON_OTHER = "other"

    REASON_CHOICES = [
        (REASON_DAMAGED, "Damaged"),
        (REASON_EXPIRED, "Expired"),
        (REASON_QUALITY, "Quality issue"),
        (REASON_OTHER, "Other"),
    ]

    STATUS_PENDING = "pending"
    STATUS_APPROVED = "approved"
    STATUS_REJECTED = "rejected"

    STATUS_CHOICES = [
        (STATUS_PENDING, "Pending"),
        (STATUS_APPROVED, "Approved"),
        (STATUS_REJECTED, "Rejected"),
    ]

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    product = models.ForeignKey(Product, on_delete=models.PROTECT, related_name="waste_logs")

    quantity = models.PositiveIntegerField()
    reason = models.CharField(max_length=20, choices=REASON_CHOICES)
    notes = models.TextField(blank=True, default="")

    unit_cost = models.DecimalField(max_digits=10, decimal_places=2, default=Decimal("0.00"))
    total_cost = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal("0.00"))

    logged_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        related_name="waste_logged",
    )

    status = models.CharField(max_length=20, choices=STATUS_CHOICES, default=STATUS_PENDING)
    reviewed_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="waste_reviewed",
    )
    reviewed_at = models.DateTimeField(null=True, blank=True)
    rejection_notes = models.TextField(blank=True, default="")

    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["-created_at"]
        indexes = [
            models.Index(fields=["status", "created_at"], name="waste_status_created_idx"),
        ]

    @property
    def is_reviewed(self) -> bool:
        return self.status != self.STATUS_PENDING

    def save(self, *args, **kwargs):
        self.total_cost = (Decimal(self.unit_cost or 0) * Decimal(int(self.quantity or 0))).quantize(
            Decimal("0.01")
        )
        super().save(*args, **kwargs)

    def __str__(self):
        return f"{self.product_id} | {self.quantity} | {self.status}"
