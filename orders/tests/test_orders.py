# orders/tests/test_orders.py

from __future__ import annotations

from datetime import timedelta
from decimal import Decimal

from django.contrib.auth import get_user_model
from django.core.cache import cache
from django.core.exceptions import ValidationError
from django.test import TestCase
from django.urls import reverse
from django.utils import timezone
from rest_framework.test import APIClient

from cart.models import CartItem
from inventory.models import InventoryLog
from inventory.services import deduct_for_order
from notifications.models import Notification
from orders.models import Invoice, Order, OrderItem
from orders.services import (
    InvoiceTransitionError,
    OrderTransitionError,
    can_transition,
    issue_invoice,
    mark_overdue_invoices,
    record_history,
    set_invoice_status,
    transition,
)
from payments.models import Payment
from products.models import Category, Product

User = get_user_model()


def make_product(name="Rump Steak", sku="BEEF-RUMP", *, price="30.00", stock=10, category=None) -> Product:
    category = category or Category.objects.get_or_create(name="Beef")[0]
    return Product.objects.create(category=category, name=name, sku=sku, price_aud=Decimal(price), stock=stock)


def place_order(user, product, *, quantity=2, method=Order.METHOD_DELIVERY, status=Order.STATUS_PENDING) -> Order:
    """Order with one line whose stock has already been taken off the shelf."""
    subtotal = Decimal(product.price_aud) * quantity
    order = Order.objects.create(
        user=user,
        subtotal=subtotal,
        total=subtotal,
        delivery_method=method,
        scheduled_date=timezone.localdate(),
    )
    OrderItem.objects.create(
        order=order,
        product=product,
        product_name=product.name,
        sku=product.sku,
        unit_price=product.price_aud,
        quantity=quantity,
    )
    deduct_for_order(order=order)
    record_history(order, Order.STATUS_PENDING, notes="Order placed")
    if status != Order.STATUS_PENDING:
        Order.objects.filter(pk=order.pk).update(status=status)
        order.refresh_from_db()
    return order


class OrderModelTests(TestCase):
    """
    GUARANTEES:
    - order numbers are ZM-YYYYMMDD-XXXX and unique
    - line totals are computed on save
    - status history rows are immutable
    """

    def setUp(self):
        self.user = User.objects.create_user(email="cust@example.com", password="x")

    def test_order_number_format(self):
        order = Order.objects.create(user=self.user)
        prefix, day, suffix = order.order_number.split("-")
        self.assertEqual(prefix, "ZM")
        self.assertEqual(day, f"{timezone.localdate():%Y%m%d}")
        self.assertEqual(len(suffix), 4)

    def test_line_total(self):
        order = Order.objects.create(user=self.user)
        item = OrderItem.objects.create(
            order=order, product_name="Lamb", unit_price=Decimal("12.50"), quantity=3, line_total=0
        )
        self.assertEqual(item.line_total, Decimal("37.50"))
        self.assertEqual(order.item_count, 3)

    def test_history_is_immutable(self):
        order = Order.objects.create(user=self.user)
        row = record_history(order, Order.STATUS_PENDING, notes="Order placed")
        row.notes = "changed"
        with self.assertRaises(ValidationError):
            row.save()
        with self.assertRaises(ValidationError):
            row.delete()


class OrderLifecycleTests(TestCase):
    """
    GUARANTEES:
    - only mapped transitions are accepted and terminal states stay terminal
    - every change writes a history row and notifies the customer
    - cancelling restores deducted stock once and cancels the invoice
    - delivering stamps delivered_at and collects a pending COD payment
    """

    def setUp(self):
        self.user = User.objects.create_user(email="cust@example.com", password="x")
        self.staff = User.objects.create_user(email="staff@example.com", password="x", role=User.ROLE_STAFF)
        self.product = make_product()

    def test_transition_map(self):
        self.assertTrue(can_transition(from_status=Order.STATUS_PENDING, to_status=Order.STATUS_CONFIRMED))
        self.assertTrue(can_transition(from_status=Order.STATUS_READY, to_status=Order.STATUS_DELIVERED))
        self.assertFalse(can_transition(from_status=Order.STATUS_PENDING, to_status=Order.STATUS_DELIVERED))
        self.assertFalse(can_transition(from_status=Order.STATUS_DELIVERED, to_status=Order.STATUS_CANCELLED))
        self.assertFalse(can_transition(from_status=Order.STATUS_CANCELLED, to_status=Order.STATUS_PENDING))

    def test_transition_writes_history_and_notifies(self):
        order = place_order(self.user, self.product)

        order = transition(order, Order.STATUS_CONFIRMED, user=self.staff, notes="Payment received")

        self.assertEqual(order.status, Order.STATUS_CONFIRMED)
        latest = order.status_history.last()
        self.assertEqual((latest.status, latest.notes, latest.changed_by), (Order.STATUS_CONFIRMED, "Payment received", self.staff))
        self.assertTrue(
            Notification.objects.filter(user=self.user, type=Notification.TYPE_ORDER_STATUS).exists()
        )

    def test_invalid_transition(self):
        order = place_order(self.user, self.product)
        with self.assertRaises(OrderTransitionError):
            transition(order, Order.STATUS_DELIVERED)
        order.refresh_from_db()
        self.assertEqual(order.status, Order.STATUS_PENDING)
        self.assertEqual(order.status_history.count(), 1)

    def test_cancel_restores_stock_and_invoice(self):
        order = place_order(self.user, self.product, quantity=3)
        issue_invoice(order)
        self.product.refresh_from_db()
        self.assertEqual(self.product.stock, 7)

        transition(order, Order.STATUS_CANCELLED, user=self.staff, notes="Customer called")

        self.product.refresh_from_db()
        self.assertEqual(self.product.stock, 10)
        order.refresh_from_db()
        self.assertIsNotNone(order.cancelled_at)
        self.assertEqual(order.cancellation_reason, "Customer called")
        self.assertEqual(order.invoice.status, Invoice.STATUS_CANCELLED)
        restock = InventoryLog.objects.get(order=order, type=InventoryLog.TYPE_ADDITION)
        self.assertEqual((restock.stock_before, restock.stock_after), (7, 10))

    def test_forced_cancel_after_delivery_restores_once(self):
        order = place_order(self.user, self.product, quantity=2, status=Order.STATUS_DELIVERED)

        transition(order, Order.STATUS_CANCELLED, notes="Refunded", force=True)
        with self.assertRaises(OrderTransitionError):
            transition(order, Order.STATUS_CANCELLED, force=True)

        self.product.refresh_from_db()
        self.assertEqual(self.product.stock, 10)
        self.assertEqual(InventoryLog.objects.filter(order=order, type=InventoryLog.TYPE_ADDITION).count(), 1)

    def test_delivery_collects_cod(self):
        order = place_order(self.user, self.product, status=Order.STATUS_OUT_FOR_DELIVERY)
        payment = Payment.objects.create(order=order, gateway=Payment.GATEWAY_COD, amount=order.total)

        order = transition(order, Order.STATUS_DELIVERED, user=self.staff)

        self.assertIsNotNone(order.delivered_at)
        payment.refresh_from_db()
        self.assertEqual(payment.status, Payment.STATUS_COMPLETED)


class InvoiceTests(TestCase):
    """
    GUARANTEES:
    - invoice numbers are INV-YYYYMM-NNNN, sequential within a month
    - issuing twice returns the same invoice
    """

    def test_sequential_numbers(self):
        user = User.objects.create_user(email="cust@example.com", password="x")
        first = issue_invoice(Order.objects.create(user=user, total=Decimal("50.00")))
        second = issue_invoice(Order.objects.create(user=user, total=Decimal("70.00")))

        prefix = f"INV-{timezone.localtime():%Y%m}-"
        self.assertEqual(first.invoice_number, f"{prefix}0001")
        self.assertEqual(second.invoice_number, f"{prefix}0002")
        self.assertEqual(second.total, Decimal("70.00"))
        self.assertEqual(issue_invoice(first.order).pk, first.pk)


class CustomerOrderApiTests(TestCase):
    """
    GUARANTEES:
    - customers only ever see their own orders (others are 404)
    - cancel is allowed while pending or confirmed only
    - reorder copies available lines into the cart
    """

    def setUp(self):
        cache.clear()
        self.addCleanup(cache.clear)
        self.client = APIClient()
        self.user = User.objects.create_user(email="cust@example.com", password="x")
        self.other = User.objects.create_user(email="other@example.com", password="x")
        self.client.force_authenticate(self.user)
        self.product = make_product()

    def test_list_and_detail_are_scoped(self):
        mine = place_order(self.user, self.product)
        theirs = place_order(self.other, self.product)

        res = self.client.get(reverse("orders:customer-orders"))
        self.assertEqual(res.status_code, 200)
        self.assertEqual([row["id"] for row in res.data["data"]], [str(mine.id)])
        self.assertEqual(res.data["meta"]["total"], 1)

        res = self.client.get(reverse("orders:customer-order-detail", args=[theirs.id]))
        self.assertEqual(res.status_code, 404)

        res = self.client.get(reverse("orders:customer-order-detail", args=[mine.id]))
        self.assertEqual(res.data["data"]["items"][0]["product_name"], "Rump Steak")
        self.assertEqual(res.data["data"]["status_history"][0]["notes"], "Order placed")

    def test_dashboard(self):
        place_order(self.user, self.product, status=Order.STATUS_DELIVERED)
        place_order(self.user, self.product)

        res = self.client.get(reverse("orders:customer-dashboard"))

        data = res.data["data"]
        self.assertEqual(data["total_orders"], 2)
        self.assertEqual(data["active_orders"], 1)
        self.assertEqual(data["total_spent"], "60.00")

    def test_cancel(self):
        order = place_order(self.user, self.product)
        res = self.client.post(
            reverse("orders:customer-order-cancel", args=[order.id]), {"reason": "Changed my mind"}, format="json"
        )
        self.assertEqual(res.status_code, 200)
        self.assertEqual(res.data["data"]["status"], Order.STATUS_CANCELLED)
        self.product.refresh_from_db()
        self.assertEqual(self.product.stock, 10)

    def test_cannot_cancel_once_processing(self):
        order = place_order(self.user, self.product, status=Order.STATUS_PROCESSING)
        res = self.client.post(reverse("orders:customer-order-cancel", args=[order.id]), {}, format="json")
        self.assertEqual(res.status_code, 422)
        self.assertEqual(res.data["error"]["code"], "NOT_CANCELLABLE")

    def test_reorder(self):
        order = place_order(self.user, self.product, quantity=2, status=Order.STATUS_DELIVERED)

        res = self.client.post(reverse("orders:customer-order-reorder", args=[order.id]))

        self.assertEqual(res.status_code, 200)
        item = CartItem.objects.get(cart__user=self.user)
        self.assertEqual(item.quantity, 2)

    def test_reorder_nothing_available(self):
        order = place_order(self.user, self.product, status=Order.STATUS_DELIVERED)
        Product.objects.filter(pk=self.product.pk).update(is_active=False)

        res = self.client.post(reverse("orders:customer-order-reorder", args=[order.id]))

        self.assertEqual(res.status_code, 422)
        self.assertEqual(res.data["error"]["code"], "NOTHING_TO_REORDER")

    def test_invoice(self):
        order = place_order(self.user, self.product)
        res = self.client.get(reverse("orders:customer-order-invoice", args=[order.id]))
        self.assertEqual(res.status_code, 404)

        invoice = issue_invoice(order)
        res = self.client.get(reverse("orders:customer-order-invoice", args=[order.id]))
        self.assertEqual(res.data["data"]["invoice_number"], invoice.invoice_number)
        self.assertEqual(len(res.data["data"]["items"]), 1)


class StaffOrderApiTests(TestCase):
    """
    GUARANTEES:
    - customers cannot reach the staff queue
    - staff move orders along and add notes
    - out-for-delivery and picked-up respect the delivery method
    """

    def setUp(self):
        cache.clear()
        self.addCleanup(cache.clear)
        self.client = APIClient()
        self.customer = User.objects.create_user(email="cust@example.com", password="x")
        self.staff = User.objects.create_user(email="staff@example.com", password="x", role=User.ROLE_STAFF)
        self.client.force_authenticate(self.staff)
        self.product = make_product()

    def test_customer_forbidden(self):
        self.client.force_authenticate(self.customer)
        res = self.client.get(reverse("orders:staff-orders"))
        self.assertEqual(res.status_code, 403)

    def test_status_update(self):
        order = place_order(self.customer, self.product)
        url = reverse("orders:staff-order-status", args=[order.id])

        res = self.client.post(url, {"status": "confirmed", "notes": "Checked"}, format="json")
        self.assertEqual(res.status_code, 200)
        self.assertEqual(res.data["data"]["status"], Order.STATUS_CONFIRMED)

        res = self.client.post(url, {"status": "delivered"}, format="json")
        self.assertEqual(res.status_code, 422)
        self.assertEqual(res.data["error"]["code"], "INVALID_TRANSITION")

    def test_notes(self):
        order = place_order(self.customer, self.product)
        res = self.client.post(
            reverse("orders:staff-order-notes", args=[order.id]), {"note": "Leave at back door"}, format="json"
        )
        self.assertEqual(res.status_code, 200)
        notes = res.data["data"]["staff_notes"]
        self.assertEqual(notes[0]["note"], "Leave at back door")
        self.assertEqual(notes[0]["user"], "staff@example.com")

    def test_out_for_delivery_and_pickup(self):
        delivery = place_order(self.customer, self.product, status=Order.STATUS_READY)
        pickup = place_order(self.customer, self.product, status=Order.STATUS_READY, method=Order.METHOD_PICKUP)

        res = self.client.post(reverse("orders:staff-order-picked-up", args=[delivery.id]))
        self.assertEqual(res.data["error"]["code"], "INVALID_DELIVERY_METHOD")

        res = self.client.post(reverse("orders:staff-order-out-for-delivery", args=[delivery.id]))
        self.assertEqual(res.data["data"]["status"], Order.STATUS_OUT_FOR_DELIVERY)

        res = self.client.post(reverse("orders:staff-order-picked-up", args=[pickup.id]))
        self.assertEqual(res.data["data"]["status"], Order.STATUS_DELIVERED)

    def test_today_lists(self):
        place_order(self.customer, self.product)
        place_order(self.customer, self.product, method=Order.METHOD_PICKUP)

        res = self.client.get(reverse("orders:staff-deliveries-today"))
        self.assertEqual(res.data["count"], 1)
        res = self.client.get(reverse("orders:staff-pickups-today"))
        self.assertEqual(res.data["count"], 1)


class AdminOrderApiTests(TestCase):
    """
    GUARANTEES:
    - staff can view orders but not assign or refund them
    - assignment only targets active staff members
    - the dashboard excludes pending and cancelled orders from revenue
    """

    def setUp(self):
        cache.clear()
        self.addCleanup(cache.clear)
        self.client = APIClient()
        self.admin = User.objects.create_user(email="admin@example.com", password="x", role=User.ROLE_ADMIN)
        self.staff = User.objects.create_user(email="staff@example.com", password="x", role=User.ROLE_STAFF)
        self.customer = User.objects.create_user(email="cust@example.com", password="x")
        self.client.force_authenticate(self.admin)
        self.product = make_product()

    def test_assign(self):
        order = place_order(self.customer, self.product)
        url = reverse("orders:admin-order-assign", args=[order.id])

        res = self.client.post(url, {"user_id": str(self.customer.id)}, format="json")
        self.assertEqual(res.status_code, 422)
        self.assertEqual(res.data["error"]["code"], "INVALID_ASSIGNEE")

        res = self.client.post(url, {"user_id": str(self.staff.id)}, format="json")
        self.assertEqual(res.status_code, 200)
        order.refresh_from_db()
        self.assertEqual(order.assigned_to, self.staff)
        self.assertTrue(Notification.objects.filter(user=self.staff, type=Notification.TYPE_DELIVERY).exists())

    def test_staff_cannot_assign_or_refund(self):
        order = place_order(self.customer, self.product)
        self.client.force_authenticate(self.staff)

        self.assertEqual(self.client.get(reverse("orders:admin-order-detail", args=[order.id])).status_code, 200)
        res = self.client.post(
            reverse("orders:admin-order-assign", args=[order.id]), {"user_id": str(self.staff.id)}, format="json"
        )
        self.assertEqual(res.status_code, 403)
        res = self.client.post(
            reverse("orders:admin-order-refund", args=[order.id]), {"reason": "Spoiled"}, format="json"
        )
        self.assertEqual(res.status_code, 403)

    def test_refund_without_payment(self):
        order = place_order(self.customer, self.product, status=Order.STATUS_DELIVERED)
        res = self.client.post(
            reverse("orders:admin-order-refund", args=[order.id]), {"reason": "Spoiled"}, format="json"
        )
        self.assertEqual(res.status_code, 422)
        self.assertEqual(res.data["error"]["code"], "NO_PAYMENT")

    def test_update_scheduling(self):
        order = place_order(self.customer, self.product)
        res = self.client.patch(
            reverse("orders:admin-order-detail", args=[order.id]),
            {"scheduled_slot": "9am - 12pm", "status": "delivered"},
            format="json",
        )
        self.assertEqual(res.status_code, 200)
        order.refresh_from_db()
        self.assertEqual(order.scheduled_slot, "9am - 12pm")
        self.assertEqual(order.status, Order.STATUS_PENDING)

    def test_dashboard_revenue(self):
        place_order(self.customer, self.product, status=Order.STATUS_DELIVERED)
        place_order(self.customer, self.product)
        place_order(self.customer, self.product, status=Order.STATUS_CANCELLED)

        res = self.client.get(reverse("orders:admin-dashboard"))

        data = res.data["data"]
        self.assertEqual(data["today_revenue"], "60.00")
        self.assertEqual(data["pending_orders"], 1)
        self.assertEqual(data["total_customers"], 1)

    def test_invoice_search(self):
        order = place_order(self.customer, self.product)
        invoice = issue_invoice(order)

        res = self.client.get(reverse("orders:admin-invoice-list"), {"search": order.order_number})

        self.assertEqual([row["id"] for row in res.data["data"]], [str(invoice.id)])


class InvoiceStatusTests(TestCase):
    """
    GUARANTEES:
    - manual changes follow the invoice transition table; paid and cancelled are final
    - marking paid stamps paid_at
    - pending invoices past their due date become overdue
    """

    def setUp(self):
        self.user = User.objects.create_user(email="cust@example.com", password="x")
        self.invoice = issue_invoice(Order.objects.create(user=self.user, total=Decimal("80.00")))

    def test_pending_to_paid(self):
        invoice = set_invoice_status(self.invoice, Invoice.STATUS_PAID)
        self.assertEqual(invoice.status, Invoice.STATUS_PAID)
        self.assertIsNotNone(invoice.paid_at)

    def test_final_states(self):
        set_invoice_status(self.invoice, Invoice.STATUS_CANCELLED)
        with self.assertRaises(InvoiceTransitionError):
            set_invoice_status(self.invoice, Invoice.STATUS_PAID)

    def test_overdue_sweep(self):
        Invoice.objects.filter(pk=self.invoice.pk).update(due_date=timezone.localdate() - timedelta(days=1))
        fresh = issue_invoice(Order.objects.create(user=self.user, total=Decimal("20.00")))

        self.assertEqual(mark_overdue_invoices(), 1)

        self.invoice.refresh_from_db()
        fresh.refresh_from_db()
        self.assertEqual(self.invoice.status, Invoice.STATUS_OVERDUE)
        self.assertEqual(fresh.status, Invoice.STATUS_PENDING)
        set_invoice_status(self.invoice, Invoice.STATUS_PAID)


class InvoiceApiTests(TestCase):
    """
    GUARANTEES:
    - staff and admin read invoices, stats and PDFs; only admin changes status
    - an invalid status change is 422 INVALID_TRANSITION
    - customers download the PDF of their own orders only
    """

    def setUp(self):
        cache.clear()
        self.addCleanup(cache.clear)
        self.client = APIClient()
        self.admin = User.objects.create_user(email="admin@example.com", password="x", role=User.ROLE_ADMIN)
        self.staff = User.objects.create_user(email="staff@example.com", password="x", role=User.ROLE_STAFF)
        self.customer = User.objects.create_user(
            email="cust@example.com", password="x", first_name="Tendai", last_name="Moyo"
        )
        self.other = User.objects.create_user(email="other@example.com", password="x")
        self.product = make_product()
        self.order = place_order(self.customer, self.product)
        self.invoice = issue_invoice(self.order)

    def test_admin_changes_status(self):
        self.client.force_authenticate(self.admin)
        url = reverse("orders:admin-invoice-change-status", args=[self.invoice.id])

        res = self.client.put(url, {"status": "paid"}, format="json")
        self.assertEqual(res.status_code, 200)
        self.assertEqual(res.data["data"]["status"], "paid")

        res = self.client.put(url, {"status": "pending"}, format="json")
        self.assertEqual(res.status_code, 422)
        self.assertEqual(res.data["error"]["code"], "INVALID_TRANSITION")

    def test_staff_reads_but_cannot_change_status(self):
        self.client.force_authenticate(self.staff)

        res = self.client.get(reverse("orders:staff-invoice-list"))
        self.assertEqual(res.data["meta"]["total"], 1)
        res = self.client.get(reverse("orders:staff-invoice-detail", args=[self.invoice.id]))
        self.assertEqual(res.data["data"]["items"][0]["product_name"], "Rump Steak")

        res = self.client.put(
            reverse("orders:admin-invoice-change-status", args=[self.invoice.id]), {"status": "paid"}, format="json"
        )
        self.assertEqual(res.status_code, 403)

        self.client.force_authenticate(self.customer)
        self.assertEqual(self.client.get(reverse("orders:staff-invoice-list")).status_code, 403)

    def test_stats(self):
        paid = issue_invoice(place_order(self.customer, self.product))
        set_invoice_status(paid, Invoice.STATUS_PAID)
        self.client.force_authenticate(self.admin)

        res = self.client.get(reverse("orders:admin-invoice-stats"))

        data = res.data["data"]
        self.assertEqual(data["total_invoices"], 2)
        self.assertEqual(data["by_status"]["paid"], 1)
        self.assertEqual(data["by_status"]["pending"], 1)
        self.assertEqual(data["paid_amount"], "60.00")
        self.assertEqual(data["outstanding_amount"], "60.00")

    def test_staff_pdf(self):
        self.client.force_authenticate(self.staff)

        res = self.client.get(reverse("orders:staff-invoice-pdf", args=[self.invoice.id]))

        self.assertEqual(res.status_code, 200)
        self.assertEqual(res["Content-Type"], "application/pdf")
        self.assertIn(self.invoice.invoice_number, res["Content-Disposition"])
        self.assertTrue(res.content.startswith(b"%PDF"))

    def test_customer_pdf_is_owner_scoped(self):
        url = reverse("orders:customer-order-invoice-pdf", args=[self.order.id])

        self.client.force_authenticate(self.other)
        self.assertEqual(self.client.get(url).status_code, 404)

        self.client.force_authenticate(self.customer)
        res = self.client.get(url)
        self.assertEqual(res.status_code, 200)
        self.assertTrue(res.content.startswith(b"%PDF"))

        without_invoice = place_order(self.customer, self.product)
        res = self.client.get(reverse("orders:customer-order-invoice-pdf", args=[without_invoice.id]))
        self.assertEqual(res.status_code, 404)
