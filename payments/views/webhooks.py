# payments/views/webhooks.py

"""
PAYMENT WEBHOOKS (AllowAny, webhook throttle)

- Stripe: Stripe-Signature verified with stripe.Webhook.construct_event
- PayPal: verify-webhook-signature API when PAYPAL_WEBHOOK_ID is set

Bad signature -> 400. Every verified event is acknowledged with 200, even
when it names a payment we do not know.
"""

from __future__ import annotations

import json
import logging

from drf_spectacular.utils import extend_schema
from rest_framework import status
from rest_framework.permissions import AllowAny
from rest_framework.views import APIView

from backend.responses import error_response, success_response
from backend.throttles import WebhookThrottle
from payments.services import PaymentError, WebhookSignatureError
from payments.services import payment_flow, paypal, stripe_gateway

logger = logging.getLogger(__name__)


class _WebhookView(APIView):
    permission_classes = [AllowAny]
    authentication_classes = []
    throttle_classes = [WebhookThrottle]


class StripeWebhookView(_WebhookView):
    @extend_schema(tags=["Webhooks"], request=None, responses={200: dict, 400: dict})
    def post(self, request):
        try:
            event = stripe_gateway.construct_event(request.body, request.META.get("HTTP_STRIPE_SIGNATURE", ""))
        except WebhookSignatureError as exc:
            logger.warning("Stripe webhook rejected", extra={"reason": str(exc)})
            return error_response(code=exc.code, message=str(exc), http_status=status.HTTP_400_BAD_REQUEST)

        outcome = payment_flow.handle_stripe_event(event)
        logger.info("Stripe webhook processed", extra={"event_type": event["type"], "outcome": outcome})
        return success_response({"received": True, "outcome": outcome})


class PayPalWebhookView(_WebhookView):
    @extend_schema(tags=["Webhooks"], request=None, responses={200: dict, 400: dict})
    def post(self, request):
        try:
            event = json.loads(request.body or b"{}")
        except json.JSONDecodeError:
            return error_response(
                code="INVALID_PAYLOAD", message="Invalid payload.", http_status=status.HTTP_400_BAD_REQUEST
            )
        if not isinstance(event, dict):
            return error_response(
                code="INVALID_PAYLOAD", message="Invalid payload.", http_status=status.HTTP_400_BAD_REQUEST
            )

        try:
            verified = paypal.verify_webhook_signature(headers=request.headers, event=event)
        except PaymentError:
            logger.exception("PayPal webhook verification failed")
            verified = False
        if not verified:
            return error_response(
                code="INVALID_SIGNATURE",
                message="Invalid signature.",
                http_status=status.HTTP_400_BAD_REQUEST,
            )

        outcome = payment_flow.handle_paypal_event(event)
        logger.info("PayPal webhook processed", extra={"event_type": event.get("event_type"), "outcome": outcome})
        return success_response({"received": True, "outcome": outcome})
