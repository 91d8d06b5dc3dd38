# payments/models/payment.py

import uuid
from decimal import Decimal

from django.db import models


class Payment(models.Model):
    """
    One payment attempt against an order.

    GATEWAYS:
    - stripe: transaction_id = PaymentIntent id
    - paypal: transaction_id = PayPal order id (capture id kept in gateway_response)
    - cod:    transaction_id = COD_<order_number>, completed on delivery
    """

    GATEWAY_STRIPE = "stripe"
    GATEWAY_PAYPAL = "paypal"
    GATEWAY_COD = "cod"

    GATEWAY_CHOICES = [
        (GATEWAY_STRIPE, "Stripe"),
        (GATEWAY_PAYPAL, "PayPal"),
        (GATEWAY_COD, "Cash on delivery"),
    ]

    STATUS_PENDING = "pending"
    STATUS_COMPLETED = "completed"
    STATUS_FAILED = "failed"
    STATUS_REFUNDED = "refunded"

    STATUS_CHOICES = [
        (STATUS_PENDING, "Pending"),
        (STATUS_COMPLETED, "Completed"),
        (STATUS_FAILED, "Failed"),
        (STATUS_REFUNDED, "Refunded"),
    ]

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    order = models.ForeignKey("orders.Order", on_delete=models.CASCADE, related_name="payments")
    gateway = models.CharField(max_length=10, choices=GATEWAY_CHOICES)
    transaction_id = models.CharField(max_length=255, null=True, blank=True, unique=True)

    status = models.CharField(max_length=20, choices=STATUS_CHOICES, default=STATUS_PENDING)
    amount = models.DecimalField(max_digits=12, decimal_places=2)
    currency = models.CharField(max_length=3, default="AUD")

    gateway_response = models.JSONField(default=dict, blank=True)

    refunded_amount = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal("0.00"))
    refund_reason = models.TextField(blank=True, default="")

    completed_at = models.DateTimeField(null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["-created_at"]
        indexes = [
            models.Index(fields=["status", "created_at"], name="payment_status_created_idx"),
            models.Index(fields=["gateway", "status"], name="payment_gateway_status_idx"),
        ]

    def __str__(self):
        return f"{self.gateway} | {self.transaction_id or '-'} | {self.status}"

    @property
    def is_completed(self) -> bool:
        return self.status == self.STATUS_COMPLETED
