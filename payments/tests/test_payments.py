# payments/tests/test_payments.py

from __future__ import annotations

from decimal import Decimal
from unittest import mock

from django.contrib.auth import get_user_model
from django.core.cache import cache
from django.test import TestCase, override_settings
from django.urls import reverse
from rest_framework.test import APIClient

from notifications.models import Notification
from orders.models import Invoice, Order
from orders.services import cancel_order, issue_invoice, mark_paid
from payments.models import Payment
from payments.services import AlreadyRefundedError, payment_flow

User = get_user_model()

PAYMENTS_ENABLED = {
    "STRIPE": {"PUBLIC_KEY": "pk_test_1", "SECRET_KEY": "sk_test_1", "WEBHOOK_SECRET": "whsec_1"},
    "PAYPAL": {"CLIENT_ID": "", "CLIENT_SECRET": "", "MODE": "sandbox", "WEBHOOK_ID": ""},
    "COD": {"MAX_AMOUNT": "500.00"},
}


def make_order(user, *, total="120.00", status=Order.STATUS_PENDING, currency="AUD") -> Order:
    return Order.objects.create(
        user=user,
        status=status,
        subtotal=Decimal(total),
        total=Decimal(total),
        currency=currency,
    )


@override_settings(PAYMENTS=PAYMENTS_ENABLED)
class StripePaymentTests(TestCase):
    """
    GUARANTEES:
    - process creates one pending Payment keyed by the PaymentIntent id
    - confirm on a succeeded intent completes the payment, confirms the order
      and marks the invoice paid
    - another customer's order is never payable
    """

    def setUp(self):
        cache.clear()
        self.addCleanup(cache.clear)
        self.client = APIClient()
        self.user = User.objects.create_user(email="cust@example.com", password="x")
        self.client.force_authenticate(self.user)
        self.order = make_order(self.user)

    @mock.patch("stripe.PaymentIntent.create")
    def test_process_creates_pending_payment(self, create):
        create.return_value = {"id": "pi_123", "client_secret": "pi_123_secret", "status": "requires_payment_method"}

        res = self.client.post(reverse("payments:stripe-process"), {"order_id": str(self.order.id)}, format="json")

        self.assertEqual(res.status_code, 200)
        self.assertEqual(res.data["data"]["client_secret"], "pi_123_secret")
        self.assertEqual(res.data["data"]["publishable_key"], "pk_test_1")
        self.assertEqual(create.call_args.kwargs["amount"], 12000)
        payment = Payment.objects.get(transaction_id="pi_123")
        self.assertEqual(payment.status, Payment.STATUS_PENDING)
        self.assertEqual(payment.amount, Decimal("120.00"))

    @mock.patch("stripe.PaymentIntent.retrieve")
    def test_confirm_completes_payment(self, retrieve):
        Payment.objects.create(
            order=self.order, gateway=Payment.GATEWAY_STRIPE, transaction_id="pi_9", amount=self.order.total
        )
        retrieve.return_value = {"id": "pi_9", "status": "succeeded"}

        res = self.client.post(reverse("payments:stripe-confirm"), {"payment_intent_id": "pi_9"}, format="json")

        self.assertEqual(res.status_code, 200)
        self.assertEqual(res.data["data"]["status"], Payment.STATUS_COMPLETED)
        self.order.refresh_from_db()
        self.assertEqual(self.order.status, Order.STATUS_CONFIRMED)
        self.assertEqual(self.order.invoice.status, Invoice.STATUS_PAID)

    def test_foreign_order_is_not_found(self):
        other = User.objects.create_user(email="other@example.com", password="x")
        foreign = make_order(other)
        res = self.client.post(reverse("payments:stripe-process"), {"order_id": str(foreign.id)}, format="json")
        self.assertEqual(res.status_code, 404)

    def test_confirm_foreign_payment_forbidden(self):
        other = User.objects.create_user(email="other@example.com", password="x")
        Payment.objects.create(
            order=make_order(other), gateway=Payment.GATEWAY_STRIPE, transaction_id="pi_x", amount=Decimal("10.00")
        )
        res = self.client.post(reverse("payments:stripe-confirm"), {"payment_intent_id": "pi_x"}, format="json")
        self.assertEqual(res.status_code, 403)

    def test_paid_order_cannot_be_paid_again(self):
        Payment.objects.create(
            order=self.order,
            gateway=Payment.GATEWAY_STRIPE,
            transaction_id="pi_done",
            amount=self.order.total,
            status=Payment.STATUS_COMPLETED,
        )
        res = self.client.post(reverse("payments:stripe-process"), {"order_id": str(self.order.id)}, format="json")
        self.assertEqual(res.status_code, 422)


@override_settings(PAYMENTS=PAYMENTS_ENABLED)
class CashOnDeliveryTests(TestCase):
    """
    GUARANTEES:
    - COD confirms the order and issues an unpaid invoice
    - orders above the COD limit are refused
    - delivery completes the pending COD payment
    """

    def setUp(self):
        cache.clear()
        self.addCleanup(cache.clear)
        self.client = APIClient()
        self.user = User.objects.create_user(email="cod@example.com", password="x")
        self.client.force_authenticate(self.user)

    def test_process_cod(self):
        order = make_order(self.user, total="80.00")
        res = self.client.post(reverse("payments:cod-process"), {"order_id": str(order.id)}, format="json")

        self.assertEqual(res.status_code, 200)
        self.assertEqual(res.data["data"]["amount_to_collect"], "80.00")
        order.refresh_from_db()
        self.assertEqual(order.status, Order.STATUS_CONFIRMED)
        self.assertEqual(order.invoice.status, Invoice.STATUS_PENDING)
        payment = Payment.objects.get(order=order)
        self.assertEqual(payment.transaction_id, f"COD_{order.order_number}")
        self.assertEqual(payment.status, Payment.STATUS_PENDING)

    def test_cod_over_limit_refused(self):
        order = make_order(self.user, total="650.00")
        res = self.client.post(reverse("payments:cod-process"), {"order_id": str(order.id)}, format="json")
        self.assertEqual(res.status_code, 422)
        self.assertEqual(res.data["error"]["code"], "COD_UNAVAILABLE")

    def test_delivery_collects_cod(self):
        order = make_order(self.user, total="80.00")
        payment_flow.process_cod(order, user=self.user)
        order.refresh_from_db()
        order.status = Order.STATUS_OUT_FOR_DELIVERY
        order.save(update_fields=["status"])

        payment_flow.complete_cod_on_delivery(order)

        payment = Payment.objects.get(order=order)
        self.assertEqual(payment.status, Payment.STATUS_COMPLETED)
        self.assertEqual(order.invoice.status, Invoice.STATUS_PAID)

    def test_status_endpoint(self):
        order = make_order(self.user, total="80.00")
        payment_flow.process_cod(order, user=self.user)
        res = self.client.get(reverse("payments:status", args=[order.id]))
        self.assertEqual(res.status_code, 200)
        self.assertEqual(res.data["data"]["payment"]["gateway"], Payment.GATEWAY_COD)


@override_settings(PAYMENTS=PAYMENTS_ENABLED)
class RefundTests(TestCase):
    """
    GUARANTEES:
    - refunds call the gateway, mark the payment refunded and cancel the order
    - a refunded payment cannot be refunded twice, also over HTTP
    """

    def setUp(self):
        cache.clear()
        self.addCleanup(cache.clear)
        self.user = User.objects.create_user(email="r@example.com", password="x")
        self.order = make_order(self.user, status=Order.STATUS_DELIVERED)
        self.payment = Payment.objects.create(
            order=self.order,
            gateway=Payment.GATEWAY_STRIPE,
            transaction_id="pi_r",
            amount=self.order.total,
            status=Payment.STATUS_COMPLETED,
        )

    @mock.patch("stripe.Refund.create")
    def test_refund_cancels_order(self, create):
        create.return_value = {"id": "re_1", "status": "succeeded"}

        payment = payment_flow.refund_order(self.order, reason="Spoiled")

        self.assertEqual(payment.status, Payment.STATUS_REFUNDED)
        self.assertEqual(payment.refunded_amount, Decimal("120.00"))
        self.order.refresh_from_db()
        self.assertEqual(self.order.status, Order.STATUS_CANCELLED)

        with self.assertRaises(AlreadyRefundedError):
            payment_flow.refund_order(self.order, reason="Again")

    def test_refund_endpoint_refuses_second_refund(self):
        admin = User.objects.create_user(email="boss@example.com", password="x", role=User.ROLE_ADMIN)
        self.payment.status = Payment.STATUS_REFUNDED
        self.payment.refunded_amount = self.payment.amount
        self.payment.save()
        client = APIClient()
        client.force_authenticate(admin)

        res = client.post(
            reverse("orders:admin-order-refund", args=[self.order.id]), {"reason": "Again"}, format="json"
        )

        self.assertEqual(res.status_code, 422)
        self.assertEqual(res.data["error"]["code"], "ALREADY_REFUNDED")


@override_settings(PAYMENTS=PAYMENTS_ENABLED)
class WebhookTests(TestCase):
    """
    GUARANTEES:
    - bad Stripe signatures are rejected with 400
    - payment_intent.succeeded completes the matching payment exactly once
    - unknown references are acknowledged
    """

    def setUp(self):
        cache.clear()
        self.addCleanup(cache.clear)
        self.client = APIClient()
        self.user = User.objects.create_user(email="w@example.com", password="x")
        self.order = make_order(self.user)
        self.payment = Payment.objects.create(
            order=self.order, gateway=Payment.GATEWAY_STRIPE, transaction_id="pi_w", amount=self.order.total
        )

    def _event(self, event_type, obj):
        return {"type": event_type, "data": {"object": obj}}

    def test_missing_signature_rejected(self):
        res = self.client.post(reverse("payments:webhook-stripe"), data=b"{}", content_type="application/json")
        self.assertEqual(res.status_code, 400)

    @mock.patch("stripe.Webhook.construct_event")
    def test_succeeded_event_completes_once(self, construct):
        construct.return_value = self._event("payment_intent.succeeded", {"id": "pi_w"})
        url = reverse("payments:webhook-stripe")

        first = self.client.post(url, data=b"{}", content_type="application/json", HTTP_STRIPE_SIGNATURE="t=1,v1=x")
        second = self.client.post(url, data=b"{}", content_type="application/json", HTTP_STRIPE_SIGNATURE="t=1,v1=x")

        self.assertEqual(first.data["data"]["outcome"], "completed")
        self.assertEqual(second.data["data"]["outcome"], "already_completed")
        self.payment.refresh_from_db()
        self.assertEqual(self.payment.status, Payment.STATUS_COMPLETED)
        self.assertEqual(self.order.status_history.filter(status=Order.STATUS_CONFIRMED).count(), 1)

    @mock.patch("stripe.Webhook.construct_event")
    def test_unknown_reference_acknowledged(self, construct):
        construct.return_value = self._event("payment_intent.succeeded", {"id": "pi_unknown"})
        res = self.client.post(
            reverse("payments:webhook-stripe"),
            data=b"{}",
            content_type="application/json",
            HTTP_STRIPE_SIGNATURE="t=1,v1=x",
        )
        self.assertEqual(res.status_code, 200)
        self.assertEqual(res.data["data"]["outcome"], "unknown_reference")

    def test_paypal_capture_completed(self):
        Payment.objects.create(
            order=make_order(self.user), gateway=Payment.GATEWAY_PAYPAL, transaction_id="PP-1", amount=Decimal("120.00")
        )
        event = {
            "event_type": "PAYMENT.CAPTURE.COMPLETED",
            "resource": {"id": "CAP-1", "supplementary_data": {"related_ids": {"order_id": "PP-1"}}},
        }
        res = self.client.post(reverse("payments:webhook-paypal"), event, format="json")

        self.assertEqual(res.status_code, 200)
        self.assertEqual(res.data["data"]["outcome"], "completed")
        payment = Payment.objects.get(transaction_id="PP-1")
        self.assertEqual(payment.gateway_response["capture_id"], "CAP-1")


@override_settings(PAYMENTS=PAYMENTS_ENABLED)
class RefundWebhookTests(TestCase):
    """
    GUARANTEES:
    - refunds made in the Stripe or PayPal dashboards mark the payment refunded
    - the order is cancelled once, repeats are acknowledged
    """

    def setUp(self):
        cache.clear()
        self.addCleanup(cache.clear)
        self.client = APIClient()
        self.user = User.objects.create_user(email="rw@example.com", password="x")

    def _paid(self, gateway, transaction_id, **response):
        order = make_order(self.user, status=Order.STATUS_CONFIRMED)
        return Payment.objects.create(
            order=order,
            gateway=gateway,
            transaction_id=transaction_id,
            amount=order.total,
            status=Payment.STATUS_COMPLETED,
            gateway_response=response,
        )

    @mock.patch("stripe.Webhook.construct_event")
    def test_stripe_charge_refunded(self, construct):
        payment = self._paid(Payment.GATEWAY_STRIPE, "pi_ref")
        construct.return_value = {
            "type": "charge.refunded",
            "data": {"object": {"id": "ch_1", "payment_intent": "pi_ref", "amount_refunded": 12000}},
        }
        url = reverse("payments:webhook-stripe")

        first = self.client.post(url, data=b"{}", content_type="application/json", HTTP_STRIPE_SIGNATURE="t=1,v1=x")
        second = self.client.post(url, data=b"{}", content_type="application/json", HTTP_STRIPE_SIGNATURE="t=1,v1=x")

        self.assertEqual(first.data["data"]["outcome"], "refunded")
        self.assertEqual(second.data["data"]["outcome"], "already_refunded")
        payment.refresh_from_db()
        self.assertEqual(payment.status, Payment.STATUS_REFUNDED)
        self.assertEqual(payment.refunded_amount, Decimal("120.00"))
        self.assertEqual(payment.order.status, Order.STATUS_CANCELLED)

    def test_paypal_capture_refunded(self):
        payment = self._paid(Payment.GATEWAY_PAYPAL, "PP-R", capture_id="CAP-R")
        event = {
            "event_type": "PAYMENT.CAPTURE.REFUNDED",
            "resource": {
                "id": "REF-1",
                "amount": {"value": "120.00", "currency_code": "AUD"},
                "links": [{"rel": "up", "href": "https://api.sandbox.paypal.com/v2/payments/captures/CAP-R"}],
            },
        }

        res = self.client.post(reverse("payments:webhook-paypal"), event, format="json")

        self.assertEqual(res.status_code, 200)
        self.assertEqual(res.data["data"]["outcome"], "refunded")
        payment.refresh_from_db()
        self.assertEqual(payment.status, Payment.STATUS_REFUNDED)
        self.assertEqual(payment.gateway_response["refund_id"], "REF-1")
        self.assertEqual(payment.order.status, Order.STATUS_CANCELLED)


@override_settings(PAYMENTS=PAYMENTS_ENABLED)
class PaidAfterCancelTests(TestCase):
    """
    GUARANTEES:
    - a payment that lands after the order was cancelled is recorded
    - the order and its invoice stay cancelled
    - staff are told a refund is needed
    """

    def setUp(self):
        cache.clear()
        self.addCleanup(cache.clear)
        self.client = APIClient()
        self.staff = User.objects.create_user(email="staff@example.com", password="x", role=User.ROLE_STAFF)
        self.user = User.objects.create_user(email="late@example.com", password="x")
        self.order = make_order(self.user)
        issue_invoice(self.order)

    def _assert_left_for_refund(self, payment):
        payment.refresh_from_db()
        self.assertEqual(payment.status, Payment.STATUS_COMPLETED)
        self.order.refresh_from_db()
        self.assertEqual(self.order.status, Order.STATUS_CANCELLED)
        self.assertEqual(self.order.invoice.status, Invoice.STATUS_CANCELLED)
        alert = Notification.objects.get(user=self.staff, type=Notification.TYPE_SYSTEM)
        self.assertIn(self.order.order_number, alert.title)

    @mock.patch("stripe.Webhook.construct_event")
    def test_stripe_success_after_cancel(self, construct):
        payment = Payment.objects.create(
            order=self.order, gateway=Payment.GATEWAY_STRIPE, transaction_id="pi_late", amount=self.order.total
        )
        cancel_order(self.order, user=self.user, reason="Changed my mind")
        construct.return_value = {"type": "payment_intent.succeeded", "data": {"object": {"id": "pi_late"}}}

        res = self.client.post(
            reverse("payments:webhook-stripe"),
            data=b"{}",
            content_type="application/json",
            HTTP_STRIPE_SIGNATURE="t=1,v1=x",
        )

        self.assertEqual(res.status_code, 200)
        self.assertEqual(res.data["data"]["outcome"], "refund_required")
        self._assert_left_for_refund(payment)

    def test_paypal_capture_after_cancel(self):
        payment = Payment.objects.create(
            order=self.order, gateway=Payment.GATEWAY_PAYPAL, transaction_id="PP-LATE", amount=self.order.total
        )
        cancel_order(self.order, user=self.user, reason="Changed my mind")
        event = {
            "event_type": "PAYMENT.CAPTURE.COMPLETED",
            "resource": {"id": "CAP-LATE", "supplementary_data": {"related_ids": {"order_id": "PP-LATE"}}},
        }

        res = self.client.post(reverse("payments:webhook-paypal"), event, format="json")

        self.assertEqual(res.data["data"]["outcome"], "refund_required")
        self._assert_left_for_refund(payment)

    def test_cancelled_invoice_is_never_marked_paid(self):
        cancel_order(self.order, user=self.user)

        invoice = mark_paid(self.order)

        self.assertEqual(invoice.status, Invoice.STATUS_CANCELLED)
        self.assertIsNone(invoice.paid_at)


class PayPalVerificationTests(TestCase):
    """
    GUARANTEES:
    - with PAYPAL_WEBHOOK_ID set, a transmission PayPal does not confirm is 400
    - missing PayPal credentials are a 400, never a 500
    """

    def setUp(self):
        cache.clear()
        self.addCleanup(cache.clear)
        self.client = APIClient()
        self.event = {"event_type": "PAYMENT.CAPTURE.COMPLETED", "resource": {"id": "CAP-X"}}

    @override_settings(
        PAYMENTS={
            **PAYMENTS_ENABLED,
            "PAYPAL": {"CLIENT_ID": "id", "CLIENT_SECRET": "secret", "MODE": "sandbox", "WEBHOOK_ID": "WH-1"},
        }
    )
    @mock.patch("payments.services.paypal._request_json")
    def test_failed_verification_rejected(self, request_json):
        request_json.return_value = {"verification_status": "FAILURE"}

        res = self.client.post(reverse("payments:webhook-paypal"), self.event, format="json")

        self.assertEqual(res.status_code, 400)
        self.assertEqual(res.data["error"]["code"], "INVALID_SIGNATURE")

    @override_settings(
        PAYMENTS={
            **PAYMENTS_ENABLED,
            "PAYPAL": {"CLIENT_ID": "", "CLIENT_SECRET": "", "MODE": "sandbox", "WEBHOOK_ID": "WH-1"},
        }
    )
    def test_missing_credentials_rejected(self):
        res = self.client.post(reverse("payments:webhook-paypal"), self.event, format="json")

        self.assertEqual(res.status_code, 400)
        self.assertEqual(res.data["error"]["code"], "INVALID_SIGNATURE")
