# payments/services/stripe_gateway.py

"""
STRIPE GATEWAY

Thin wrapper over the stripe SDK:
- amounts go out in cents
- the secret key is passed per call (settings.PAYMENTS["STRIPE"])
- SDK errors surface as GatewayError / WebhookSignatureError
"""

from __future__ import annotations

import logging
from decimal import ROUND_HALF_UP, Decimal

import stripe
from django.conf import settings

from payments.services.errors import GatewayDisabledError, GatewayError, WebhookSignatureError

logger = logging.getLogger(__name__)


def _cfg() -> dict:
    return settings.PAYMENTS["STRIPE"]


def _secret_key() -> str:
    key = _cfg()["SECRET_KEY"]
    if not key:
        raise GatewayDisabledError("Card payments are not configured.")
    return key


def publishable_key() -> str:
    return _cfg()["PUBLIC_KEY"]


def to_cents(amount) -> int:
    return int((Decimal(str(amount)) * 100).quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def from_cents(cents) -> Decimal:
    return (Decimal(int(cents or 0)) / 100).quantize(Decimal("0.01"))


def _gateway_error(exc: stripe.StripeError, context: str) -> GatewayError:
    logger.error(
        "Stripe call failed",
        extra={"context": context, "error_type": type(exc).__name__},
    )
    if isinstance(exc, stripe.CardError):
        return GatewayError(exc.user_message or "Your card was declined.")
    if isinstance(exc, stripe.RateLimitError):
        return GatewayError("Too many payment requests. Please try again shortly.")
    if isinstance(exc, stripe.APIConnectionError):
        return GatewayError("Payment service temporarily unavailable. Please try again.")
    return GatewayError("Payment processing failed. Please try again or contact support.")


def create_payment_intent(*, amount, currency: str, metadata: dict, customer_email: str = ""):
    try:
        return stripe.PaymentIntent.create(
            api_key=_secret_key(),
            amount=to_cents(amount),
            currency=currency.lower(),
            metadata=metadata,
            receipt_email=customer_email or None,
            automatic_payment_methods={"enabled": True},
        )
    except stripe.StripeError as exc:
        raise _gateway_error(exc, "create_payment_intent") from exc


def retrieve_payment_intent(intent_id: str):
    try:
        return stripe.PaymentIntent.retrieve(intent_id, api_key=_secret_key())
    except stripe.StripeError as exc:
        raise _gateway_error(exc, "retrieve_payment_intent") from exc


def create_refund(*, payment_intent_id: str, amount=None, reason: str = ""):
    params = {"payment_intent": payment_intent_id, "metadata": {"reason": reason[:500]}}
    if amount is not None:
        params["amount"] = to_cents(amount)
    try:
        return stripe.Refund.create(api_key=_secret_key(), **params)
    except stripe.StripeError as exc:
        raise _gateway_error(exc, "create_refund") from exc


def construct_event(payload: bytes, signature: str):
    """Verify the Stripe-Signature header and parse the event."""
    secret = _cfg()["WEBHOOK_SECRET"]
    if not secret:
        raise WebhookSignatureError("Stripe webhook secret is not configured.")
    if not signature:
        raise WebhookSignatureError("Missing Stripe-Signature header.")
    try:
        return stripe.Webhook.construct_event(payload, signature, secret)
    except ValueError as exc:
        raise WebhookSignatureError("Invalid payload.") from exc
    except stripe.SignatureVerificationError as exc:
        raise WebhookSignatureError("Invalid signature.") from exc
