from .payments import (
    CodProcessView,
    PaymentStatusView,
    PayPalConfirmView,
    PayPalProcessView,
    StripeConfirmView,
    StripeProcessView,
)
from .webhooks import PayPalWebhookView, StripeWebhookView

__all__ = [
    "CodProcessView",
    "PayPalConfirmView",
    "PayPalProcessView",
    "PayPalWebhookView",
    "PaymentStatusView",
    "StripeConfirmView",
    "StripeProcessView",
    "StripeWebhookView",
]
