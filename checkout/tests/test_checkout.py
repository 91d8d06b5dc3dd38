# checkout/tests/test_checkout.py

from __future__ import annotations

from datetime import timedelta
from decimal import Decimal
from unittest.mock import patch

from django.contrib.auth import get_user_model
from django.core.cache import cache
from django.test import TestCase
from django.urls import reverse
from django.utils import timezone
from rest_framework.test import APIClient

from cart.models import CartItem
from cart.services import add_item
from checkout.models import Promotion
from delivery.models import DeliveryZone
from inventory.models import InventoryLog
from orders.models import Order
from products.models import Category, Product
from users.models import Address

User = get_user_model()


class PromotionModelTests(TestCase):
    """
    GUARANTEES:
    - percentage discounts round to cents, fixed discounts never exceed the total
    - nothing is discounted below min_order
    - usage limits and windows gate can_be_used
    """

    def test_percentage_and_fixed(self):
        pct = Promotion(code="TEN", name="10%", type=Promotion.TYPE_PERCENTAGE, value=Decimal("10"))
        fixed = Promotion(code="FIVE", name="$5", type=Promotion.TYPE_FIXED, value=Decimal("5.00"))
        self.assertEqual(pct.calculate_discount(Decimal("123.45")), Decimal("12.35"))
        self.assertEqual(fixed.calculate_discount(Decimal("3.00")), Decimal("3.00"))

    def test_min_order(self):
        promo = Promotion(code="BIG", name="Big", value=Decimal("10"), min_order=Decimal("200.00"))
        self.assertEqual(promo.calculate_discount(Decimal("150.00")), Decimal("0.00"))

    def test_can_be_used(self):
        now = timezone.now()
        promo = Promotion.objects.create(
            code="once", name="Once", value=Decimal("10"), max_uses=1, starts_at=now - timedelta(hours=1)
        )
        self.assertEqual(promo.code, "ONCE")
        self.assertTrue(promo.can_be_used(now))
        promo.uses_count = 1
        self.assertFalse(promo.can_be_used(now))

        future = Promotion(code="LATER", name="Later", value=Decimal("5"), starts_at=now + timedelta(days=1))
        self.assertFalse(future.can_be_used(now))


class CheckoutPricingApiTests(TestCase):
    """
    GUARANTEES:
    - unknown areas are 422 OUT_OF_AREA
    - the fee quote reports how far the order is from free delivery
    - promo codes: unknown 404, unusable 422, below minimum 422
    """

    def setUp(self):
        cache.clear()
        self.addCleanup(cache.clear)
        self.client = APIClient()
        self.user = User.objects.create_user(email="cust@example.com", password="x")
        self.client.force_authenticate(self.user)
        DeliveryZone.objects.create(
            name="Inner West",
            suburbs=["Newtown"],
            postcodes=["2042"],
            delivery_fee=Decimal("8.00"),
            free_delivery_threshold=Decimal("150.00"),
        )

    def test_validate_address(self):
        res = self.client.post(reverse("checkout:validate-address"), {"suburb": "NEWTOWN"}, format="json")
        self.assertEqual(res.status_code, 200)
        self.assertEqual(res.data["data"]["zone"]["name"], "Inner West")

        res = self.client.post(reverse("checkout:validate-address"), {"postcode": "6000"}, format="json")
        self.assertEqual(res.status_code, 422)
        self.assertEqual(res.data["error"]["code"], "OUT_OF_AREA")
        self.assertEqual(res.data["error"]["message"], "We don't deliver to this area yet.")

    def test_calculate_fee(self):
        res = self.client.post(
            reverse("checkout:calculate-fee"), {"postcode": "2042", "subtotal": "120.00"}, format="json"
        )
        data = res.data["data"]
        self.assertEqual(data["fee"], "8.00")
        self.assertFalse(data["is_free"])
        self.assertEqual(data["amount_to_free_delivery"], "30.00")
        self.assertEqual(data["message"], "Add $30.00 more for FREE delivery!")

        res = self.client.post(
            reverse("checkout:calculate-fee"), {"postcode": "2042", "subtotal": "150.00"}, format="json"
        )
        self.assertTrue(res.data["data"]["is_free"])

    def test_pickup_is_free(self):
        res = self.client.post(
            reverse("checkout:calculate-fee"), {"delivery_method": "pickup", "subtotal": "20.00"}, format="json"
        )
        self.assertEqual(res.data["data"]["fee"], "0.00")

    def test_validate_promo(self):
        Promotion.objects.create(code="SAVE10", name="Save 10", value=Decimal("10"), min_order=Decimal("100.00"))
        Promotion.objects.create(code="OFF", name="Off", value=Decimal("10"), is_active=False)
        url = reverse("checkout:validate-promo")

        res = self.client.post(url, {"code": "save10", "subtotal": "120.00"}, format="json")
        self.assertEqual(res.status_code, 200)
        self.assertEqual(res.data["data"]["discount"], "12.00")

        res = self.client.post(url, {"code": "NOPE", "subtotal": "120.00"}, format="json")
        self.assertEqual(res.status_code, 404)
        self.assertEqual(res.data["error"]["code"], "INVALID_PROMO")

        res = self.client.post(url, {"code": "OFF", "subtotal": "120.00"}, format="json")
        self.assertEqual(res.data["error"]["code"], "PROMO_UNAVAILABLE")

        res = self.client.post(url, {"code": "SAVE10", "subtotal": "50.00"}, format="json")
        self.assertEqual(res.status_code, 422)
        self.assertEqual(res.data["error"]["code"], "PROMO_MIN_ORDER")


class CreateOrderTests(TestCase):
    """
    GUARANTEES:
    - total = subtotal + fee - discount, computed on the server
    - stock is deducted with ledger rows pointing at the order
    - the promotion use is counted and the cart emptied
    - empty cart, minimum order and stock failures leave nothing behind
    """

    def setUp(self):
        cache.clear()
        self.addCleanup(cache.clear)
        self.client = APIClient()
        self.user = User.objects.create_user(email="cust@example.com", password="x")
        self.client.force_authenticate(self.user)

        self.zone = DeliveryZone.objects.create(
            name="CBD", postcodes=["2000"], delivery_fee=Decimal("8.00"), free_delivery_threshold=Decimal("200.00")
        )
        self.address = Address.objects.create(
            user=self.user, street="1 George St", suburb="Sydney", state="NSW", postcode="2000"
        )
        category = Category.objects.create(name="Beef")
        self.steak = Product.objects.create(
            category=category, name="Rump Steak", sku="BEEF-RUMP", price_aud=Decimal("30.00"), stock=10
        )

    def _create(self, **payload):
        body = {"delivery_method": "delivery", "address_id": str(self.address.id)}
        body.update(payload)
        return self.client.post(reverse("checkout:create-order"), body, format="json")

    def test_creates_order(self):
        promo = Promotion.objects.create(code="FIVE", name="$5", type=Promotion.TYPE_FIXED, value=Decimal("5.00"))
        add_item(self.user, product_id=self.steak.id, quantity=4)

        res = self._create(promo_code="five", notes="Ring the bell")

        self.assertEqual(res.status_code, 201)
        data = res.data["data"]
        self.assertEqual(data["subtotal"], "120.00")
        self.assertEqual(data["delivery_fee"], "8.00")
        self.assertEqual(data["discount"], "5.00")
        self.assertEqual(data["total"], "123.00")
        self.assertEqual(data["status"], Order.STATUS_PENDING)
        self.assertTrue(data["order_number"].startswith("ZM-"))

        order = Order.objects.get(pk=data["id"])
        self.assertEqual(order.delivery_zone, self.zone)
        self.assertEqual(order.items.get().product_name, "Rump Steak")
        self.steak.refresh_from_db()
        self.assertEqual(self.steak.stock, 6)
        log = InventoryLog.objects.get(order=order)
        self.assertEqual((log.stock_before, log.stock_after), (10, 6))
        promo.refresh_from_db()
        self.assertEqual(promo.uses_count, 1)
        self.assertFalse(CartItem.objects.filter(cart__user=self.user).exists())
        self.assertEqual(order.status_history.get().notes, "Order placed")

    def test_empty_cart(self):
        res = self._create()
        self.assertEqual(res.status_code, 422)
        self.assertEqual(res.data["error"]["code"], "EMPTY_CART")

    def test_minimum_order(self):
        add_item(self.user, product_id=self.steak.id, quantity=2)
        res = self._create()
        self.assertEqual(res.data["error"]["code"], "MINIMUM_ORDER")
        self.assertFalse(Order.objects.exists())

    def test_stock_changed_since_added(self):
        add_item(self.user, product_id=self.steak.id, quantity=4)
        Product.objects.filter(pk=self.steak.pk).update(stock=3)

        res = self._create()

        self.assertEqual(res.status_code, 422)
        self.assertEqual(res.data["error"]["code"], "INSUFFICIENT_STOCK")
        self.assertEqual(res.data["product"]["name"], "Rump Steak")
        self.assertFalse(Order.objects.exists())
        self.assertTrue(CartItem.objects.filter(cart__user=self.user).exists())

    def test_out_of_area_inline_address_rolls_back(self):
        add_item(self.user, product_id=self.steak.id, quantity=4)
        res = self.client.post(
            reverse("checkout:create-order"),
            {
                "delivery_method": "delivery",
                "address": {"street": "1 Hay St", "suburb": "Perth", "state": "WA", "postcode": "6000"},
            },
            format="json",
        )
        self.assertEqual(res.status_code, 422)
        self.assertEqual(res.data["error"]["code"], "OUT_OF_AREA")
        self.assertFalse(Address.objects.filter(suburb="Perth").exists())

    def test_pickup_has_no_fee(self):
        add_item(self.user, product_id=self.steak.id, quantity=4)
        res = self.client.post(reverse("checkout:create-order"), {"delivery_method": "pickup"}, format="json")
        self.assertEqual(res.status_code, 201)
        self.assertEqual(res.data["data"]["delivery_fee"], "0.00")
        self.assertEqual(res.data["data"]["total"], "120.00")

    def test_zone_without_threshold_charges_fee(self):
        Product.objects.filter(pk=self.steak.pk).update(stock=20)
        DeliveryZone.objects.filter(pk=self.zone.pk).update(
            delivery_fee=Decimal("15.00"), free_delivery_threshold=None
        )
        add_item(self.user, product_id=self.steak.id, quantity=4)

        res = self._create()

        self.assertEqual(res.status_code, 201)
        self.assertEqual(res.data["data"]["delivery_fee"], "15.00")
        self.assertEqual(res.data["data"]["total"], "135.00")

    def test_unknown_promo_is_unprocessable(self):
        add_item(self.user, product_id=self.steak.id, quantity=4)

        res = self._create(promo_code="NOPE")

        self.assertEqual(res.status_code, 422)
        self.assertEqual(res.data["error"]["code"], "INVALID_PROMO")
        self.assertFalse(Order.objects.exists())

    def test_promo_used_up_while_checking_out(self):
        promo = Promotion.objects.create(
            code="LAST", name="Last one", type=Promotion.TYPE_FIXED, value=Decimal("5.00"), max_uses=1
        )
        Promotion.objects.filter(pk=promo.pk).update(uses_count=1)
        add_item(self.user, product_id=self.steak.id, quantity=4)

        # the pre-lock read saw a free slot; the locked row does not
        with patch(
            "checkout.services.order_creation.validate_promotion",
            return_value=(promo, Decimal("5.00")),
        ):
            res = self._create(promo_code="LAST")

        self.assertEqual(res.status_code, 422)
        self.assertEqual(res.data["error"]["code"], "PROMO_UNAVAILABLE")
        self.assertFalse(Order.objects.exists())
        promo.refresh_from_db()
        self.assertEqual(promo.uses_count, 1)

    def test_session(self):
        add_item(self.user, product_id=self.steak.id, quantity=1)
        res = self.client.get(reverse("checkout:session"))
        data = res.data["data"]
        self.assertEqual(data["cart"]["subtotal"], "30.00")
        self.assertEqual(len(data["addresses"]), 1)
        self.assertEqual(data["minimum_order"], "100.00")
        self.assertIn("cod", [m["code"] for m in data["payment_methods"]])


class AdminPromotionTests(TestCase):
    """
    GUARANTEES:
    - promotions.manage is required
    - codes are unique case-insensitively and percentages cap at 100
    """

    def setUp(self):
        self.client = APIClient()
        self.admin = User.objects.create_user(email="admin@example.com", password="x", role=User.ROLE_ADMIN)
        self.staff = User.objects.create_user(email="staff@example.com", password="x", role=User.ROLE_STAFF)

    def test_staff_forbidden(self):
        self.client.force_authenticate(self.staff)
        self.assertEqual(self.client.get(reverse("checkout:admin-promotion-list")).status_code, 403)

    def test_create_and_validate(self):
        self.client.force_authenticate(self.admin)
        url = reverse("checkout:admin-promotion-list")
        res = self.client.post(url, {"code": "winter", "name": "Winter", "value": "15"}, format="json")
        self.assertEqual(res.status_code, 201)
        self.assertEqual(res.data["data"]["code"], "WINTER")

        res = self.client.post(url, {"code": "WINTER", "name": "Dup", "value": "5"}, format="json")
        self.assertEqual(res.status_code, 422)

        res = self.client.post(url, {"code": "HUGE", "name": "Huge", "value": "150"}, format="json")
        self.assertEqual(res.status_code, 422)
