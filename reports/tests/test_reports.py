# reports/tests/test_reports.py

from __future__ import annotations

from datetime import timedelta
from decimal import Decimal

from django.contrib.auth import get_user_model
from django.core.cache import cache
from django.test import TestCase
from django.urls import reverse
from django.utils import timezone
from rest_framework.test import APIClient

from delivery.models import DeliveryZone
from inventory.models import WasteLog
from inventory.services import log_waste, receive_stock
from orders.models import Order, OrderItem
from payments.models import Payment
from products.models import Category, Product
from reports.services import ReportRange, build_report

User = get_user_model()


class ReportFixtureMixin:
    def make_fixture(self):
        self.admin = User.objects.create_user(email="admin@example.com", password="x", role=User.ROLE_ADMIN)
        self.driver = User.objects.create_user(
            email="driver@example.com", password="x", role=User.ROLE_STAFF, first_name="Dan"
        )
        self.alice = User.objects.create_user(email="alice@example.com", password="x", first_name="Alice")
        self.bob = User.objects.create_user(email="bob@example.com", password="x", first_name="Bob")

        beef = Category.objects.create(name="Beef")
        lamb = Category.objects.create(name="Lamb")
        self.steak = Product.objects.create(
            category=beef, name="Rump Steak", sku="BEEF-RUMP", price_aud=Decimal("30.00"), stock=50
        )
        self.cutlets = Product.objects.create(
            category=lamb, name="Lamb Cutlets", sku="LAMB-CUT", price_aud=Decimal("20.00"), stock=3, min_stock=5
        )
        self.zone = DeliveryZone.objects.create(name="CBD", postcodes=["2000"], delivery_fee=Decimal("10.00"))

        self.delivered = self.order(
            self.alice, [(self.steak, 2)], status=Order.STATUS_DELIVERED, delivery_fee="10.00", discount="5.00"
        )
        Order.objects.filter(pk=self.delivered.pk).update(assigned_to=self.driver, delivered_at=timezone.now())
        self.confirmed = self.order(self.bob, [(self.cutlets, 1)], status=Order.STATUS_CONFIRMED)
        self.pending = self.order(self.bob, [(self.steak, 5)])
        self.refunded = self.order(self.alice, [(self.cutlets, 2)], status=Order.STATUS_CANCELLED)

        Payment.objects.create(
            order=self.delivered, gateway=Payment.GATEWAY_STRIPE, status=Payment.STATUS_COMPLETED, amount=Decimal("65.00")
        )
        Payment.objects.create(
            order=self.refunded,
            gateway=Payment.GATEWAY_PAYPAL,
            status=Payment.STATUS_REFUNDED,
            amount=Decimal("40.00"),
            refunded_amount=Decimal("40.00"),
        )
        log_waste(product=self.steak, quantity=1, reason=WasteLog.REASON_DAMAGED, user=self.driver)

    def order(self, user, lines, *, status=Order.STATUS_PENDING, delivery_fee="0.00", discount="0.00") -> Order:
        subtotal = sum((product.price_aud * qty for product, qty in lines), Decimal("0.00"))
        order = Order.objects.create(
            user=user,
            status=status,
            subtotal=subtotal,
            delivery_fee=Decimal(delivery_fee),
            discount=Decimal(discount),
            total=subtotal + Decimal(delivery_fee) - Decimal(discount),
            delivery_zone=self.zone,
            scheduled_date=timezone.localdate(),
        )
        for product, qty in lines:
            OrderItem.objects.create(
                order=order,
                product=product,
                product_name=product.name,
                sku=product.sku,
                unit_price=product.price_aud,
                quantity=qty,
                line_total=0,
            )
        return order


class ReportServiceTests(ReportFixtureMixin, TestCase):
    """
    GUARANTEES:
    - pending and cancelled orders never count as revenue
    - revenue periods add up to the totals
    - financial net = gross - refunds - waste cost
    """

    def setUp(self):
        self.make_fixture()
        today = timezone.localdate()
        self.rng = ReportRange(today - timedelta(days=29), today)

    def test_sales_summary(self):
        summary = build_report("sales-summary", self.rng)["summary"]
        self.assertEqual(summary["total_revenue"], "85.00")
        self.assertEqual(summary["total_orders"], 2)
        self.assertEqual(summary["avg_order_value"], "42.50")
        self.assertEqual(summary["total_items_sold"], 3)

    def test_revenue_grouping(self):
        data = build_report("revenue", self.rng, group_by="month")
        self.assertEqual(data["group_by"], "month")
        self.assertEqual(data["totals"]["revenue"], "85.00")
        self.assertEqual(data["totals"]["delivery_fees"], "10.00")
        self.assertEqual(data["totals"]["order_count"], 2)
        self.assertEqual(data["periods"][-1]["period"], f"{timezone.localdate():%Y-%m}")

    def test_products_and_categories(self):
        products = build_report("products", self.rng)["products"]
        self.assertEqual([p["sku"] for p in products], ["BEEF-RUMP", "LAMB-CUT"])
        self.assertEqual(products[0]["revenue"], "60.00")
        self.assertEqual(products[0]["share"], 75.0)

        categories = build_report("categories", self.rng)["categories"]
        self.assertEqual(categories[0]["category"], "Beef")

    def test_customers(self):
        data = build_report("customers", self.rng)
        self.assertEqual(data["summary"]["active_customers"], 2)
        self.assertEqual(data["summary"]["new_customers"], 2)
        self.assertEqual(data["top_customers"][0]["email"], "alice@example.com")

    def test_financial(self):
        summary = build_report("financial", self.rng)["summary"]
        self.assertEqual(summary["gross_revenue"], "125.00")
        self.assertEqual(summary["discounts"], "5.00")
        self.assertEqual(summary["refunds"], "40.00")
        self.assertEqual(summary["waste_cost"], "30.00")
        self.assertEqual(summary["net_revenue"], "55.00")

    def test_staff_and_deliveries(self):
        staff = {row["email"]: row for row in build_report("staff", self.rng)["staff"]}
        self.assertEqual(staff["driver@example.com"]["deliveries_completed"], 1)
        self.assertEqual(staff["driver@example.com"]["waste_logged"], 1)

        deliveries = build_report("deliveries", self.rng)["summary"]
        self.assertEqual(deliveries["completed_deliveries"], 1)
        self.assertEqual(deliveries["on_time_rate"], 100.0)

    def test_inventory(self):
        receive_stock(product=self.cutlets, quantity=1)
        data = build_report("inventory", self.rng)
        self.assertEqual(data["movements"]["stock_received"], 1)
        self.assertEqual(data["movements"]["stock_wasted"], 1)
        self.assertEqual([row["sku"] for row in data["stock_alerts"]], ["LAMB-CUT"])

    def test_payment_methods(self):
        data = build_report("payment-methods", self.rng)
        gateways = {row["gateway"]: row for row in data["by_gateway"]}
        self.assertEqual(gateways["stripe"]["collected"], "65.00")
        self.assertEqual(gateways["paypal"]["refunded_amount"], "40.00")

    def test_dashboard_change_against_previous_period(self):
        stats = build_report("dashboard", self.rng)["quick_stats"]
        self.assertEqual(stats["revenue"]["value"], "85.00")
        self.assertEqual(stats["revenue"]["change"], 100.0)


class ReportApiTests(ReportFixtureMixin, TestCase):
    """
    GUARANTEES:
    - reports are admin-only (reports.view)
    - bad or reversed dates are 422
    - every exportable report renders CSV; unknown types are 404
    """

    def setUp(self):
        cache.clear()
        self.addCleanup(cache.clear)
        self.make_fixture()
        self.client = APIClient()
        self.client.force_authenticate(self.admin)

    def test_staff_forbidden(self):
        self.client.force_authenticate(self.driver)
        self.assertEqual(self.client.get(reverse("reports:sales-summary")).status_code, 403)

    def test_report(self):
        res = self.client.get(reverse("reports:orders"))
        self.assertEqual(res.status_code, 200)
        data = res.data["data"]
        self.assertEqual(data["total_orders"], 4)
        self.assertEqual(data["date_range"]["period_days"], 30)

    def test_date_validation(self):
        res = self.client.get(reverse("reports:revenue"), {"date_from": "2026-13-01"})
        self.assertEqual(res.status_code, 422)

        res = self.client.get(reverse("reports:revenue"), {"date_from": "2026-02-01", "date_to": "2026-01-01"})
        self.assertEqual(res.status_code, 422)

        res = self.client.get(reverse("reports:revenue"), {"group_by": "year"})
        self.assertEqual(res.status_code, 422)

    def test_exports(self):
        for report_type in ("revenue", "products", "staff", "inventory", "payment-methods"):
            res = self.client.get(reverse("reports:export", args=[report_type]))
            self.assertEqual(res.status_code, 200, report_type)
            self.assertEqual(res["Content-Type"], "text/csv")

        res = self.client.get(reverse("reports:export", args=["products"]))
        lines = res.content.decode().splitlines()
        self.assertEqual(lines[0], "Product,SKU,Quantity sold,Orders,Revenue,Share %")
        self.assertTrue(lines[1].startswith("Rump Steak,BEEF-RUMP,2,1,60.00"))

    def test_unknown_export(self):
        res = self.client.get(reverse("reports:export", args=["nope"]))
        self.assertEqual(res.status_code, 404)
        self.assertEqual(res.data["error"]["code"], "NOT_FOUND")
