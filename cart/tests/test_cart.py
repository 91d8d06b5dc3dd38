# cart/tests/test_cart.py

from __future__ import annotations

from decimal import Decimal

from django.contrib.auth import get_user_model
from django.core.cache import cache
from django.test import TestCase
from django.urls import reverse
from rest_framework.test import APIClient

from cart.models import CartItem, WishlistItem
from cart.services import add_item, get_cart
from products.models import Category, Product
from store.services import settings as site_settings

User = get_user_model()


class CartApiTests(TestCase):
    """
    GUARANTEES:
    - re-adding a product merges quantities into one row
    - quantities never exceed stock (422 INSUFFICIENT_STOCK with available)
    - inactive products cannot be added (404)
    - the summary reports progress towards the minimum order
    - users only touch their own cart lines
    """

    def setUp(self):
        cache.clear()
        self.addCleanup(cache.clear)
        self.client = APIClient()
        self.user = User.objects.create_user(email="cust@example.com", password="x")
        self.client.force_authenticate(self.user)

        category = Category.objects.create(name="Beef")
        self.steak = Product.objects.create(
            category=category, name="Rump Steak", sku="BEEF-RUMP", price_aud=Decimal("30.00"), stock=10
        )
        self.mince = Product.objects.create(
            category=category, name="Mince", sku="BEEF-MINCE", price_aud=Decimal("12.00"), stock=2
        )

    def _add(self, product, quantity):
        return self.client.post(
            reverse("cart:items"), {"product_id": str(product.id), "quantity": quantity}, format="json"
        )

    def test_add_merges_quantities(self):
        self._add(self.steak, 2)
        res = self._add(self.steak, 1)

        self.assertEqual(res.status_code, 201)
        self.assertEqual(CartItem.objects.filter(cart__user=self.user).count(), 1)
        summary = res.data["data"]["summary"]
        self.assertEqual(summary["item_count"], 3)
        self.assertEqual(summary["subtotal"], "90.00")
        self.assertFalse(summary["meets_minimum"])
        self.assertEqual(summary["amount_to_minimum"], "10.00")

    def test_add_beyond_stock(self):
        res = self._add(self.mince, 3)
        self.assertEqual(res.status_code, 422)
        self.assertEqual(res.data["error"]["code"], "INSUFFICIENT_STOCK")
        self.assertEqual(res.data["available"], 2)

    def test_inactive_product_not_found(self):
        self.steak.is_active = False
        self.steak.save()
        res = self._add(self.steak, 1)
        self.assertEqual(res.status_code, 404)

    def test_update_and_remove(self):
        item = add_item(self.user, product_id=self.steak.id, quantity=1)
        url = reverse("cart:item-detail", args=[item.id])

        res = self.client.put(url, {"quantity": 4}, format="json")
        self.assertEqual(res.data["data"]["summary"]["item_count"], 4)

        res = self.client.put(url, {"quantity": 11}, format="json")
        self.assertEqual(res.status_code, 422)

        res = self.client.delete(url)
        self.assertEqual(res.data["data"]["items"], [])

    def test_foreign_item_not_found(self):
        other = User.objects.create_user(email="other@example.com", password="x")
        item = add_item(other, product_id=self.steak.id, quantity=1)
        res = self.client.delete(reverse("cart:item-detail", args=[item.id]))
        self.assertEqual(res.status_code, 404)

    def test_validate_reports_issues(self):
        add_item(self.user, product_id=self.steak.id, quantity=1)
        add_item(self.user, product_id=self.mince.id, quantity=2)
        Product.objects.filter(pk=self.steak.pk).update(sale_price_aud=Decimal("25.00"))
        Product.objects.filter(pk=self.mince.pk).update(stock=1)

        res = self.client.post(reverse("cart:validate"))

        data = res.data["data"]
        self.assertFalse(data["valid"])
        types = sorted(issue["type"] for issue in data["issues"])
        self.assertEqual(types, ["insufficient_stock", "price_changed"])
        self.assertEqual(data["valid_items"], 1)
        self.assertEqual(
            CartItem.objects.get(cart__user=self.user, product=self.steak).unit_price, Decimal("25.00")
        )

    def test_sync_takes_larger_quantity_capped_at_stock(self):
        add_item(self.user, product_id=self.steak.id, quantity=3)
        res = self.client.post(
            reverse("cart:sync"),
            {
                "items": [
                    {"product_id": str(self.steak.id), "quantity": 1},
                    {"product_id": str(self.mince.id), "quantity": 5},
                ]
            },
            format="json",
        )
        self.assertEqual(res.status_code, 200)
        quantities = dict(
            CartItem.objects.filter(cart__user=self.user).values_list("product__sku", "quantity")
        )
        self.assertEqual(quantities, {"BEEF-RUMP": 3, "BEEF-MINCE": 2})

    def test_clear_cart(self):
        add_item(self.user, product_id=self.steak.id, quantity=1)
        res = self.client.delete(reverse("cart:cart"))
        self.assertEqual(res.status_code, 200)
        self.assertFalse(get_cart(self.user).items.exists())


class WishlistTests(TestCase):
    """
    GUARANTEES:
    - save-for-later moves a cart line into the wishlist
    - adding twice keeps a single row
    - with the wishlist feature off, every wishlist call is 404 FEATURE_DISABLED
    """

    def setUp(self):
        cache.clear()
        self.addCleanup(cache.clear)
        self.client = APIClient()
        self.user = User.objects.create_user(email="cust@example.com", password="x")
        self.client.force_authenticate(self.user)
        self.product = Product.objects.create(
            category=Category.objects.create(name="Lamb"),
            name="Lamb Chops",
            sku="LAMB-CHOP",
            price_aud=Decimal("28.00"),
            stock=5,
        )

    def test_save_for_later(self):
        item = add_item(self.user, product_id=self.product.id, quantity=1)
        res = self.client.post(reverse("cart:save-for-later", args=[item.id]))
        self.assertEqual(res.status_code, 200)
        self.assertFalse(CartItem.objects.filter(pk=item.pk).exists())
        self.assertTrue(WishlistItem.objects.filter(user=self.user, product=self.product).exists())

    def test_add_list_remove(self):
        url = reverse("cart:wishlist")
        self.assertEqual(self.client.post(url, {"product_id": str(self.product.id)}, format="json").status_code, 201)
        self.assertEqual(self.client.post(url, {"product_id": str(self.product.id)}, format="json").status_code, 200)

        res = self.client.get(url)
        self.assertEqual(res.data["meta"]["total"], 1)

        res = self.client.delete(reverse("cart:wishlist-item", args=[self.product.id]))
        self.assertEqual(res.status_code, 200)
        res = self.client.delete(reverse("cart:wishlist-item", args=[self.product.id]))
        self.assertEqual(res.status_code, 404)

    def test_disabled_feature(self):
        site_settings.update_group("features", {"wishlist_enabled": False})
        url = reverse("cart:wishlist")

        res = self.client.get(url)
        self.assertEqual(res.status_code, 404)
        self.assertEqual(res.data["error"]["code"], "FEATURE_DISABLED")

        res = self.client.post(url, {"product_id": str(self.product.id)}, format="json")
        self.assertEqual(res.status_code, 404)
        self.assertFalse(WishlistItem.objects.exists())
