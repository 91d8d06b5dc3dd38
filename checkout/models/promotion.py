# checkout/models/promotion.py

import uuid
from decimal import ROUND_HALF_UP, Decimal

from django.core.exceptions import ValidationError
from django.db import models
from django.utils import timezone

TWOPLACES = Decimal("0.01")


class Promotion(models.Model):
    """
    Discount code.

    percentage -> round(total * value / 100, 2)
    fixed      -> min(value, total)
    Nothing is discounted below min_order.
    """

    TYPE_PERCENTAGE = "percentage"
    TYPE_FIXED = "fixed"

    TYPE_CHOICES = [
        (TYPE_PERCENTAGE, "Percentage"),
        (TYPE_FIXED, "Fixed amount"),
    ]

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    code = models.CharField(max_length=50, unique=True)
    name = models.CharField(max_length=255)
    description = models.TextField(blank=True, default="")

    type = models.CharField(max_length=20, choices=TYPE_CHOICES, default=TYPE_PERCENTAGE)
    value = models.DecimalField(max_digits=10, decimal_places=2)
    min_order = models.DecimalField(max_digits=10, decimal_places=2, default=Decimal("0.00"))

    max_uses = models.PositiveIntegerField(null=True, blank=True)
    uses_count = models.PositiveIntegerField(default=0)

    starts_at = models.DateTimeField(default=timezone.now)
    ends_at = models.DateTimeField(null=True, blank=True)
    is_active = models.BooleanField(default=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["-created_at"]

    def __str__(self):
        return self.code

    def clean(self):
        if self.value is None or Decimal(self.value) <= 0:
            raise ValidationError({"value": "Value must be greater than zero"})
        if self.type == self.TYPE_PERCENTAGE and Decimal(self.value) > 100:
            raise ValidationError({"value": "Percentage cannot exceed 100"})
        if self.ends_at and self.starts_at and self.ends_at <= self.starts_at:
            raise ValidationError({"ends_at": "End must be after start"})

    def save(self, *args, **kwargs):
        self.code = (self.code or "").strip().upper()
        super().save(*args, **kwargs)

    def can_be_used(self, now=None) -> bool:
        now = now or timezone.now()
        if not self.is_active:
            return False
        if self.starts_at and now < self.starts_at:
            return False
        if self.ends_at and now > self.ends_at:
            return False
        if self.max_uses is not None and self.uses_count >= self.max_uses:
            return False
        return True

    def meets_minimum(self, total) -> bool:
        return Decimal(str(total)) >= self.min_order

    def calculate_discount(self, total) -> Decimal:
        total = Decimal(str(total))
        if not self.meets_minimum(total):
            return Decimal("0.00")
        if self.type == self.TYPE_PERCENTAGE:
            return (total * self.value / Decimal("100")).quantize(TWOPLACES, rounding=ROUND_HALF_UP)
        return min(self.value, total).quantize(TWOPLACES)
