# payments/services/payment_flow.py

"""
PAYMENT FLOW

Gateway-agnostic payment state machine:

    pending -> completed -> refunded
    pending -> failed

GUARANTEES:
- complete_payment() is idempotent: a completed payment is never re-processed
- completing confirms a pending order and issues a paid invoice
- refunds cancel the order (stock restored by the order lifecycle)
- webhooks for unknown references are acknowledged, not errors
"""

from __future__ import annotations

import logging
from decimal import Decimal

from django.conf import settings
from django.db import transaction
from django.utils import timezone

from notifications.models import Notification
from notifications.services import notify_staff
from orders.models import Order
from orders.services import issue_invoice, mark_paid, transition
from payments.models import Payment
from payments.services import paypal, stripe_gateway
from payments.services.errors import (
    AlreadyRefundedError,
    CodUnavailableError,
    GatewayDisabledError,
    GatewayError,
    InvalidRefundAmountError,
    NoPaymentError,
    OrderNotPayableError,
    PaymentForbiddenError,
    PaymentNotFoundError,
)
from store.services import settings as site_settings

logger = logging.getLogger(__name__)

TWOPLACES = Decimal("0.01")


# =====================================================
# AVAILABILITY
# =====================================================

def available_methods(*, currency: str = "AUD", subtotal=None) -> list[dict]:
    currency = (currency or "AUD").upper()
    methods: list[dict] = []

    if site_settings.stripe_enabled():
        methods.append({"code": Payment.GATEWAY_STRIPE, "name": "Credit / debit card"})
    if site_settings.paypal_enabled():
        methods.append({"code": Payment.GATEWAY_PAYPAL, "name": "PayPal"})
    if _cod_allowed(currency, subtotal):
        methods.append(
            {
                "code": Payment.GATEWAY_COD,
                "name": "Cash on delivery",
                "max_amount": f"{site_settings.cod_max_amount():.2f}",
            }
        )
    return methods


def _cod_allowed(currency: str, amount) -> bool:
    if not site_settings.cod_enabled() or currency.upper() != "AUD":
        return False
    if amount is None:
        return True
    return Decimal(str(amount)) <= site_settings.cod_max_amount()


# =====================================================
# INTERNALS
# =====================================================

def _payable_order(order: Order, user) -> Order:
    if order.user_id != user.pk:
        raise PaymentForbiddenError("You do not have access to this order.")
    if order.status != Order.STATUS_PENDING:
        raise OrderNotPayableError("Only pending orders can be paid.")
    if order.payments.filter(status=Payment.STATUS_COMPLETED).exists():
        raise OrderNotPayableError("This order has already been paid.")
    return order


def _merge_response(payment: Payment, data) -> dict:
    merged = dict(payment.gateway_response or {})
    if data:
        merged.update(dict(data))
    return merged


@transaction.atomic
def complete_payment(payment: Payment, *, gateway_response=None, user=None) -> Payment:
    locked = Payment.objects.select_for_update().select_related("order").get(pk=payment.pk)
    if locked.status == Payment.STATUS_COMPLETED:
        return locked
    if locked.status == Payment.STATUS_REFUNDED:
        logger.warning("Completion ignored for refunded payment", extra={"payment_id": str(locked.pk)})
        return locked

    locked.status = Payment.STATUS_COMPLETED
    locked.completed_at = timezone.now()
    locked.gateway_response = _merge_response(locked, gateway_response)
    locked.save(update_fields=["status", "completed_at", "gateway_response", "updated_at"])

    order = locked.order
    if order.status == Order.STATUS_CANCELLED:
        # money arrived after the cancellation; the order stays cancelled until staff refund it
        _alert_paid_after_cancel(locked)
        return locked
    if order.status == Order.STATUS_PENDING:
        transition(order, Order.STATUS_CONFIRMED, user=user, notes=f"Payment received ({locked.gateway})")
    mark_paid(order)

    logger.info(
        "Payment completed",
        extra={
            "payment_id": str(locked.pk),
            "order_number": order.order_number,
            "gateway": locked.gateway,
            "amount": str(locked.amount),
        },
    )
    return locked


def _alert_paid_after_cancel(payment: Payment) -> None:
    order = payment.order
    logger.warning(
        "Payment completed for cancelled order",
        extra={"payment_id": str(payment.pk), "order_number": order.order_number, "gateway": payment.gateway},
    )
    notify_staff(
        type=Notification.TYPE_SYSTEM,
        title=f"Refund needed for {order.order_number}",
        message=(
            f"A {payment.gateway} payment of ${payment.amount:.2f} arrived after order "
            f"{order.order_number} was cancelled. Refund it from the order page."
        ),
        data={"order_id": str(order.pk), "payment_id": str(payment.pk)},
    )


def completion_outcome(payment: Payment) -> str:
    """Webhook label for a payment that complete_payment() just processed."""
    if payment.order.status == Order.STATUS_CANCELLED:
        return "refund_required"
    return "completed"


@transaction.atomic
def fail_payment(payment: Payment, *, gateway_response=None) -> Payment:
    locked = Payment.objects.select_for_update().get(pk=payment.pk)
    if locked.status != Payment.STATUS_PENDING:
        return locked
    locked.status = Payment.STATUS_FAILED
    locked.gateway_response = _merge_response(locked, gateway_response)
    locked.save(update_fields=["status", "gateway_response", "updated_at"])
    logger.warning("Payment failed", extra={"payment_id": str(locked.pk), "gateway": locked.gateway})
    return locked


@transaction.atomic
def _mark_refunded(payment: Payment, *, amount, reason: str, user=None, gateway_response=None) -> Payment:
    payment.status = Payment.STATUS_REFUNDED
    payment.refunded_amount = Decimal(str(amount)).quantize(TWOPLACES)
    payment.refund_reason = reason
    payment.gateway_response = _merge_response(payment, gateway_response)
    payment.save(
        update_fields=["status", "refunded_amount", "refund_reason", "gateway_response", "updated_at"]
    )

    order = payment.order
    if order.status != Order.STATUS_CANCELLED:
        transition(order, Order.STATUS_CANCELLED, user=user, notes=f"Refunded: {reason}", force=True)

    logger.info(
        "Payment refunded",
        extra={
            "payment_id": str(payment.pk),
            "order_number": order.order_number,
            "amount": str(payment.refunded_amount),
        },
    )
    return payment


# =====================================================
# STRIPE
# =====================================================

@transaction.atomic
def start_stripe_payment(order: Order, *, user) -> dict:
    if not site_settings.stripe_enabled():
        raise GatewayDisabledError("Card payments are not available.")
    _payable_order(order, user)

    intent = stripe_gateway.create_payment_intent(
        amount=order.total,
        currency=order.currency,
        metadata={"order_id": str(order.pk), "order_number": order.order_number},
        customer_email=order.user.email,
    )

    Payment.objects.create(
        order=order,
        gateway=Payment.GATEWAY_STRIPE,
        transaction_id=intent["id"],
        status=Payment.STATUS_PENDING,
        amount=order.total,
        currency=order.currency,
        gateway_response={"payment_intent_status": intent.get("status")},
    )
    logger.info("Stripe payment started", extra={"order_number": order.order_number})

    return {
        "client_secret": intent["client_secret"],
        "payment_intent_id": intent["id"],
        "publishable_key": stripe_gateway.publishable_key(),
        "amount": f"{order.total:.2f}",
        "currency": order.currency,
    }


def _payment_for(transaction_id: str, gateway: str, user) -> Payment:
    payment = (
        Payment.objects.select_related("order")
        .filter(transaction_id=transaction_id, gateway=gateway)
        .first()
    )
    if payment is None:
        raise PaymentNotFoundError("Payment not found.")
    if payment.order.user_id != user.pk:
        raise PaymentForbiddenError("You do not have access to this payment.")
    return payment


def confirm_stripe_payment(payment_intent_id: str, *, user) -> Payment:
    payment = _payment_for(payment_intent_id, Payment.GATEWAY_STRIPE, user)
    if payment.is_completed:
        return payment

    intent = stripe_gateway.retrieve_payment_intent(payment_intent_id)
    status = intent.get("status")
    if status == "succeeded":
        return complete_payment(payment, gateway_response={"payment_intent_status": status}, user=user)
    if status in ("canceled", "requires_payment_method"):
        return fail_payment(payment, gateway_response={"payment_intent_status": status})
    return payment


# =====================================================
# PAYPAL
# =====================================================

@transaction.atomic
def start_paypal_payment(order: Order, *, user, return_url: str = "", cancel_url: str = "") -> dict:
    if not site_settings.paypal_enabled():
        raise GatewayDisabledError("PayPal is not available.")
    _payable_order(order, user)

    base = settings.FRONTEND_BASE_URL.rstrip("/")
    paypal_order = paypal.create_order(
        reference=order.order_number,
        amount=order.total,
        currency=order.currency,
        return_url=return_url or f"{base}/checkout/paypal/return?order={order.pk}",
        cancel_url=cancel_url or f"{base}/checkout/paypal/cancel?order={order.pk}",
    )
    paypal_order_id = paypal_order.get("id")
    if not paypal_order_id:
        raise GatewayError("PayPal did not return an order id.")

    Payment.objects.create(
        order=order,
        gateway=Payment.GATEWAY_PAYPAL,
        transaction_id=paypal_order_id,
        status=Payment.STATUS_PENDING,
        amount=order.total,
        currency=order.currency,
        gateway_response={"paypal_status": paypal_order.get("status")},
    )
    logger.info("PayPal payment started", extra={"order_number": order.order_number})

    return {
        "paypal_order_id": paypal_order_id,
        "approval_url": paypal.approval_url(paypal_order),
        "amount": f"{order.total:.2f}",
        "currency": order.currency,
    }


def confirm_paypal_payment(paypal_order_id: str, *, user) -> Payment:
    payment = _payment_for(paypal_order_id, Payment.GATEWAY_PAYPAL, user)
    if payment.is_completed:
        return payment

    capture = paypal.capture_order(paypal_order_id)
    status = capture.get("status")
    response = {"paypal_status": status, "capture_id": paypal.capture_id_from(capture)}
    if status == "COMPLETED":
        return complete_payment(payment, gateway_response=response, user=user)
    return fail_payment(payment, gateway_response=response)


# =====================================================
# CASH ON DELIVERY
# =====================================================

@transaction.atomic
def process_cod(order: Order, *, user) -> dict:
    if order.user_id != user.pk:
        raise PaymentForbiddenError("You do not have access to this order.")
    if order.status != Order.STATUS_PENDING:
        raise OrderNotPayableError("Only pending orders can be paid.")

    if not _cod_allowed(order.currency, order.total):
        raise CodUnavailableError(
            f"Cash on delivery is available for AUD orders up to ${site_settings.cod_max_amount():.2f}."
        )

    payment, _ = Payment.objects.get_or_create(
        transaction_id=f"COD_{order.order_number}",
        defaults={
            "order": order,
            "gateway": Payment.GATEWAY_COD,
            "status": Payment.STATUS_PENDING,
            "amount": order.total,
            "currency": order.currency,
        },
    )

    transition(order, Order.STATUS_CONFIRMED, user=user, notes="Cash on delivery selected")
    invoice = issue_invoice(order)

    logger.info("COD payment recorded", extra={"order_number": order.order_number, "amount": str(order.total)})
    return {
        "payment_id": str(payment.pk),
        "transaction_id": payment.transaction_id,
        "amount_to_collect": f"{order.total:.2f}",
        "currency": order.currency,
        "invoice_number": invoice.invoice_number,
    }


def complete_cod_on_delivery(order: Order) -> Payment | None:
    payment = order.payments.filter(gateway=Payment.GATEWAY_COD, status=Payment.STATUS_PENDING).first()
    if payment is None:
        return None
    return complete_payment(payment, gateway_response={"collected_on_delivery": True})


# =====================================================
# STATUS / REFUNDS
# =====================================================

def payment_status(order: Order) -> dict:
    payment = order.latest_payment
    return {
        "order_id": str(order.pk),
        "order_number": order.order_number,
        "order_status": order.status,
        "payment": None
        if payment is None
        else {
            "id": str(payment.pk),
            "gateway": payment.gateway,
            "status": payment.status,
            "amount": f"{payment.amount:.2f}",
            "currency": payment.currency,
            "completed_at": payment.completed_at.isoformat() if payment.completed_at else None,
        },
    }


@transaction.atomic
def refund_order(order: Order, *, reason: str, amount=None, user=None) -> Payment:
    payment = (
        Payment.objects.select_for_update()
        .select_related("order")
        .filter(order=order, status__in=[Payment.STATUS_COMPLETED, Payment.STATUS_REFUNDED])
        .order_by("-created_at")
        .first()
    )
    if payment is None:
        raise NoPaymentError("This order has no completed payment to refund.")
    if payment.status == Payment.STATUS_REFUNDED:
        raise AlreadyRefundedError("This payment has already been refunded.")

    refund_amount = payment.amount if amount is None else Decimal(str(amount)).quantize(TWOPLACES)
    if refund_amount <= 0 or refund_amount > order.total:
        raise InvalidRefundAmountError("Refund amount must be greater than zero and at most the order total.")

    response: dict = {}
    if payment.gateway == Payment.GATEWAY_STRIPE:
        refund = stripe_gateway.create_refund(
            payment_intent_id=payment.transaction_id, amount=refund_amount, reason=reason
        )
        response = {"refund_id": refund["id"], "refund_status": refund.get("status")}
    elif payment.gateway == Payment.GATEWAY_PAYPAL:
        capture_id = (payment.gateway_response or {}).get("capture_id")
        if not capture_id:
            raise GatewayError("PayPal capture reference is missing for this payment.")
        refund = paypal.refund_capture(
            capture_id=capture_id, amount=refund_amount, currency=payment.currency, note=reason
        )
        response = {"refund_id": refund.get("id"), "refund_status": refund.get("status")}
    else:
        response = {"refunded_by": getattr(user, "email", None)}

    return _mark_refunded(payment, amount=refund_amount, reason=reason, user=user, gateway_response=response)


# =====================================================
# WEBHOOKS
# =====================================================

def handle_stripe_event(event) -> str:
    """Returns a short outcome label for logging and the response body."""
    event_type = event["type"]
    obj = event["data"]["object"]

    if event_type in ("payment_intent.succeeded", "payment_intent.payment_failed"):
        payment = Payment.objects.filter(gateway=Payment.GATEWAY_STRIPE, transaction_id=obj["id"]).first()
        if payment is None:
            return "unknown_reference"
        if event_type == "payment_intent.succeeded":
            if payment.is_completed:
                return "already_completed"
            payment = complete_payment(payment, gateway_response={"payment_intent_status": "succeeded"})
            return completion_outcome(payment)
        fail_payment(payment, gateway_response={"payment_intent_status": obj.get("status")})
        return "failed"

    if event_type == "charge.refunded":
        payment = Payment.objects.filter(
            gateway=Payment.GATEWAY_STRIPE, transaction_id=obj.get("payment_intent")
        ).first()
        if payment is None:
            return "unknown_reference"
        if payment.status == Payment.STATUS_REFUNDED:
            return "already_refunded"
        _mark_refunded(
            payment,
            amount=stripe_gateway.from_cents(obj.get("amount_refunded")),
            reason="Refunded in Stripe dashboard",
            gateway_response={"charge_id": obj.get("id")},
        )
        return "refunded"

    return "ignored"


def _paypal_capture_order_id(resource: dict) -> str:
    related = ((resource.get("supplementary_data") or {}).get("related_ids") or {})
    return related.get("order_id") or ""


def _paypal_refund_capture_id(resource: dict) -> str:
    for link in resource.get("links") or []:
        if link.get("rel") == "up" and "/captures/" in (link.get("href") or ""):
            return link["href"].rstrip("/").rsplit("/", 1)[-1]
    return ""


def handle_paypal_event(event: dict) -> str:
    event_type = event.get("event_type") or ""
    resource = event.get("resource") or {}

    if event_type in ("PAYMENT.CAPTURE.COMPLETED", "PAYMENT.CAPTURE.DENIED"):
        payment = Payment.objects.filter(
            gateway=Payment.GATEWAY_PAYPAL, transaction_id=_paypal_capture_order_id(resource)
        ).first()
        if payment is None:
            return "unknown_reference"
        if event_type == "PAYMENT.CAPTURE.COMPLETED":
            if payment.is_completed:
                return "already_completed"
            payment = complete_payment(
                payment, gateway_response={"paypal_status": "COMPLETED", "capture_id": resource.get("id")}
            )
            return completion_outcome(payment)
        fail_payment(payment, gateway_response={"paypal_status": "DENIED"})
        return "failed"

    if event_type == "PAYMENT.CAPTURE.REFUNDED":
        capture_id = _paypal_refund_capture_id(resource) or resource.get("id")
        payment = Payment.objects.filter(
            gateway=Payment.GATEWAY_PAYPAL, gateway_response__capture_id=capture_id
        ).first()
        if payment is None:
            return "unknown_reference"
        if payment.status == Payment.STATUS_REFUNDED:
            return "already_refunded"
        amount = ((resource.get("amount") or {}).get("value")) or payment.amount
        _mark_refunded(payment, amount=amount, reason="Refunded in PayPal", gateway_response={"refund_id": resource.get("id")})
        return "refunded"

    return "ignored"
