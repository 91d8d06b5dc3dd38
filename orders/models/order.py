# orders/models/order.py

import secrets
import string
import uuid
from decimal import Decimal

from django.conf import settings
from django.db import models
from django.utils import timezone

ORDER_NUMBER_ALPHABET = string.ascii_uppercase + string.digits


def generate_order_number(now=None) -> str:
    """ZM-YYYYMMDD-XXXX (random suffix)."""
    now = now or timezone.localtime()
    suffix = "".join(secrets.choice(ORDER_NUMBER_ALPHABET) for _ in range(4))
    return f"ZM-{now:%Y%m%d}-{suffix}"


class Order(models.Model):
    """
    Customer order.

    Money fields are server-computed at checkout and never edited afterwards:
        total = subtotal + delivery_fee - discount

    Status moves only through orders.services.order_lifecycle, which writes
    an OrderStatusHistory row per change.
    """

    STATUS_PENDING = "pending"
    STATUS_CONFIRMED = "confirmed"
    STATUS_PROCESSING = "processing"
    STATUS_READY = "ready"
    STATUS_OUT_FOR_DELIVERY = "out_for_delivery"
    STATUS_DELIVERED = "delivered"
    STATUS_CANCELLED = "cancelled"

    STATUS_CHOICES = [
        (STATUS_PENDING, "Pending"),
        (STATUS_CONFIRMED, "Confirmed"),
        (STATUS_PROCESSING, "Processing"),
        (STATUS_READY, "Ready"),
        (STATUS_OUT_FOR_DELIVERY, "Out for delivery"),
        (STATUS_DELIVERED, "Delivered"),
        (STATUS_CANCELLED, "Cancelled"),
    ]

    # Orders in these states do not count as revenue.
    NON_REVENUE_STATUSES = (STATUS_PENDING, STATUS_CANCELLED)
    CANCELLABLE_STATUSES = (STATUS_PENDING, STATUS_CONFIRMED)

    METHOD_DELIVERY = "delivery"
    METHOD_PICKUP = "pickup"

    METHOD_CHOICES = [
        (METHOD_DELIVERY, "Delivery"),
        (METHOD_PICKUP, "Pickup"),
    ]

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    order_number = models.CharField(max_length=32, unique=True, blank=True)

    user = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.PROTECT, related_name="orders")
    address = models.ForeignKey(
        "users.Address", on_delete=models.SET_NULL, null=True, blank=True, related_name="orders"
    )
    delivery_zone = models.ForeignKey(
        "delivery.DeliveryZone", on_delete=models.SET_NULL, null=True, blank=True, related_name="orders"
    )

    status = models.CharField(max_length=20, choices=STATUS_CHOICES, default=STATUS_PENDING)

    subtotal = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal("0.00"))
    delivery_fee = models.DecimalField(max_digits=10, decimal_places=2, default=Decimal("0.00"))
    discount = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal("0.00"))
    total = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal("0.00"))
    currency = models.CharField(max_length=3, default="AUD")

    promotion = models.ForeignKey(
        "checkout.Promotion", on_delete=models.SET_NULL, null=True, blank=True, related_name="orders"
    )
    promotion_code = models.CharField(max_length=50, blank=True, default="")

    notes = models.TextField(blank=True, default="")
    staff_notes = models.JSONField(default=list, blank=True)

    delivery_method = models.CharField(max_length=10, choices=METHOD_CHOICES, default=METHOD_DELIVERY)
    delivery_instructions = models.TextField(blank=True, default="")
    scheduled_date = models.DateField(null=True, blank=True)
    scheduled_slot = models.CharField(max_length=50, blank=True, default="")

    assigned_to = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="assigned_orders",
    )
    assigned_at = models.DateTimeField(null=True, blank=True)

    delivered_at = models.DateTimeField(null=True, blank=True)
    cancelled_at = models.DateTimeField(null=True, blank=True)
    cancellation_reason = models.TextField(blank=True, default="")

    delivery_issue = models.TextField(blank=True, default="")
    delivery_issue_reported_at = models.DateTimeField(null=True, blank=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["-created_at"]
        indexes = [
            models.Index(fields=["status", "created_at"], name="order_status_created_idx"),
            models.Index(fields=["user", "created_at"], name="order_user_created_idx"),
            models.Index(fields=["scheduled_date"], name="order_scheduled_date_idx"),
        ]

    def save(self, *args, **kwargs):
        if not self.order_number:
            number = generate_order_number()
            while Order.objects.filter(order_number=number).exists():
                number = generate_order_number()
            self.order_number = number
        super().save(*args, **kwargs)

    def __str__(self):
        return f"{self.order_number} | {self.total} | {self.status}"

    @property
    def can_be_cancelled(self) -> bool:
        return self.status in self.CANCELLABLE_STATUSES

    @property
    def is_pickup(self) -> bool:
        return self.delivery_method == self.METHOD_PICKUP

    @property
    def item_count(self) -> int:
        return sum(item.quantity for item in self.items.all())

    @property
    def latest_payment(self):
        payments = list(self.payments.all())
        return max(payments, key=lambda p: p.created_at) if payments else None

    @property
    def payment_status(self) -> str | None:
        payment = self.latest_payment
        return payment.status if payment else None


class OrderItem(models.Model):
    """Line snapshot: name, sku and price are copied at checkout."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    order = models.ForeignKey(Order, on_delete=models.CASCADE, related_name="items")
    product = models.ForeignKey(
        "products.Product", on_delete=models.SET_NULL, null=True, blank=True, related_name="order_items"
    )

    product_name = models.CharField(max_length=255)
    sku = models.CharField(max_length=64, blank=True, default="")
    unit_price = models.DecimalField(max_digits=10, decimal_places=2)
    quantity = models.PositiveIntegerField()
    line_total = models.DecimalField(max_digits=12, decimal_places=2)

    class Meta:
        ordering = ["product_name"]

    def save(self, *args, **kwargs):
        self.line_total = (Decimal(self.unit_price) * int(self.quantity)).quantize(Decimal("0.01"))
        super().save(*args, **kwargs)

    def __str__(self):
        return f"{self.product_name} x {self.quantity}"
