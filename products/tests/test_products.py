# products/tests/test_products.py

from decimal import Decimal

from django.contrib.auth import get_user_model
from django.db import IntegrityError
from django.test import TestCase
from django.urls import reverse
from rest_framework.test import APIClient

from inventory.models import InventoryLog
from products.models import Category, Product

User = get_user_model()


class ProductModelTests(TestCase):
    """
    Product model tests.

    GUARANTEES:
    - SKU uniqueness is enforced (and SKUs are upper-cased)
    - Slugs are generated and kept unique
    - Sale price drives current_price / discount_percentage
    - stock_status follows min_stock
    """

    def setUp(self):
        self.category = Category.objects.create(name="Beef")

    def _product(self, **kwargs):
        data = {
            "category": self.category,
            "name": "Rump Steak",
            "sku": "beef-rump",
            "price_aud": Decimal("30.00"),
        }
        data.update(kwargs)
        return Product.objects.create(**data)

    def test_sku_is_upper_cased_and_unique(self):
        product = self._product()
        self.assertEqual(product.sku, "BEEF-RUMP")

        with self.assertRaises(IntegrityError):
            self._product(name="Other", sku="BEEF-RUMP")

    def test_slug_is_generated_unique(self):
        first = self._product()
        second = self._product(sku="BEEF-RUMP-2")
        self.assertEqual(first.slug, "rump-steak")
        self.assertEqual(second.slug, "rump-steak-2")

    def test_sale_price_pricing(self):
        product = self._product(sale_price_aud=Decimal("24.00"))
        self.assertTrue(product.is_on_sale)
        self.assertEqual(product.current_price, Decimal("24.00"))
        self.assertEqual(product.discount_percentage, 20)

    def test_stock_status(self):
        product = self._product(stock=0, min_stock=5)
        self.assertEqual(product.stock_status, "out")
        product.stock = 5
        self.assertEqual(product.stock_status, "low")
        product.stock = 6
        self.assertEqual(product.stock_status, "normal")


class PublicCatalogTests(TestCase):
    """
    GUARANTEES:
    - Inactive products are invisible (list and detail 404)
    - Search needs at least 2 characters (422)
    - Price filters use the sale-aware price
    """

    def setUp(self):
        self.client = APIClient()
        self.beef = Category.objects.create(name="Beef")
        self.lamb = Category.objects.create(name="Lamb")
        self.rump = Product.objects.create(
            category=self.beef, name="Rump Steak", sku="R1", price_aud="30.00", stock=10, is_featured=True
        )
        self.mince = Product.objects.create(
            category=self.beef, name="Beef Mince", sku="M1", price_aud="20.00", sale_price_aud="12.00", stock=5
        )
        self.hidden = Product.objects.create(
            category=self.lamb, name="Lamb Shank", sku="L1", price_aud="18.00", stock=3, is_active=False
        )

    def test_list_hides_inactive(self):
        res = self.client.get(reverse("products:product-list"))
        self.assertEqual(res.status_code, 200)
        slugs = {row["slug"] for row in res.data["data"]}
        self.assertEqual(slugs, {"rump-steak", "beef-mince"})
        self.assertEqual(res.data["meta"]["total"], 2)

    def test_inactive_detail_is_404(self):
        res = self.client.get(reverse("products:product-detail", args=[self.hidden.slug]))
        self.assertEqual(res.status_code, 404)
        self.assertEqual(res.data["error"]["code"], "NOT_FOUND")

    def test_filter_by_category_slug_and_max_price(self):
        res = self.client.get(reverse("products:product-list"), {"category": "beef", "max_price": "15"})
        slugs = [row["slug"] for row in res.data["data"]]
        self.assertEqual(slugs, ["beef-mince"])

    def test_sort_price_asc(self):
        res = self.client.get(reverse("products:product-list"), {"sort": "price_asc"})
        slugs = [row["slug"] for row in res.data["data"]]
        self.assertEqual(slugs, ["beef-mince", "rump-steak"])

    def test_short_search_is_422(self):
        res = self.client.get(reverse("products:product-search"), {"q": "r"})
        self.assertEqual(res.status_code, 422)

    def test_search(self):
        res = self.client.get(reverse("products:product-search"), {"q": "mince"})
        self.assertEqual(res.status_code, 200)
        self.assertEqual(res.data["data"][0]["price"], "12.00")

    def test_featured(self):
        res = self.client.get(reverse("products:product-featured"))
        self.assertEqual([row["slug"] for row in res.data["data"]], ["rump-steak"])

    def test_categories_have_active_counts(self):
        res = self.client.get(reverse("products:category-list"))
        counts = {row["slug"]: row["products_count"] for row in res.data["data"]}
        self.assertEqual(counts, {"beef": 2, "lamb": 0})


class AdminCatalogTests(TestCase):
    """
    GUARANTEES:
    - Only catalog.manage holders can write products
    - Initial stock is written through the ledger
    - adjust-stock semantics: increase / decrease floored at 0 / absolute
    - A category with products cannot be deleted (422)
    - Deleting a product with stock history only deactivates it
    """

    def setUp(self):
        self.client = APIClient()
        self.admin = User.objects.create_user(email="admin@example.com", password="x", role=User.ROLE_ADMIN)
        self.staff = User.objects.create_user(email="staff@example.com", password="x", role=User.ROLE_STAFF)
        self.category = Category.objects.create(name="Beef")
        self.product = Product.objects.create(
            category=self.category, name="Rump", sku="R1", price_aud="30.00", stock=10
        )

    def test_staff_cannot_create_products(self):
        self.client.force_authenticate(self.staff)
        res = self.client.post(reverse("products:admin-product-list"), {}, format="json")
        self.assertEqual(res.status_code, 403)

    def test_create_product_with_initial_stock_logs_addition(self):
        self.client.force_authenticate(self.admin)
        res = self.client.post(
            reverse("products:admin-product-list"),
            {
                "name": "T-Bone",
                "sku": "tb-1",
                "category_id": str(self.category.id),
                "price_aud": "38.50",
                "stock": 12,
            },
            format="json",
        )
        self.assertEqual(res.status_code, 201)
        self.assertEqual(res.data["data"]["stock"], 12)
        self.assertEqual(res.data["data"]["sku"], "TB-1")

        product = Product.objects.get(sku="TB-1")
        log = InventoryLog.objects.get(product=product)
        self.assertEqual(log.type, InventoryLog.TYPE_ADDITION)
        self.assertEqual((log.stock_before, log.stock_after), (0, 12))

    def test_sale_price_must_be_lower(self):
        self.client.force_authenticate(self.admin)
        res = self.client.patch(
            reverse("products:admin-product-detail", args=[self.product.id]),
            {"sale_price_aud": "31.00"},
            format="json",
        )
        self.assertEqual(res.status_code, 422)

    def test_adjust_stock_variants(self):
        self.client.force_authenticate(self.admin)
        url = reverse("products:admin-product-adjust-stock", args=[self.product.id])

        res = self.client.post(url, {"quantity": 5, "type": "increase", "reason": "Delivery"}, format="json")
        self.assertEqual((res.data["data"]["stock_before"], res.data["data"]["stock_after"]), (10, 15))

        res = self.client.post(url, {"quantity": 40, "type": "decrease", "reason": "Count"}, format="json")
        self.assertEqual(res.data["data"]["stock_after"], 0)

        res = self.client.post(url, {"quantity": -7, "type": "adjustment", "reason": "Stock take"}, format="json")
        self.assertEqual(res.data["data"]["stock_after"], 7)

        self.assertEqual(InventoryLog.objects.filter(product=self.product).count(), 3)

    def test_zero_quantity_is_422(self):
        self.client.force_authenticate(self.admin)
        res = self.client.post(
            reverse("products:admin-product-adjust-stock", args=[self.product.id]),
            {"quantity": 0, "type": "increase", "reason": "x"},
            format="json",
        )
        self.assertEqual(res.status_code, 422)

    def test_category_with_products_cannot_be_deleted(self):
        self.client.force_authenticate(self.admin)
        res = self.client.delete(reverse("products:admin-category-detail", args=[self.category.id]))
        self.assertEqual(res.status_code, 422)
        self.assertEqual(res.data["error"]["code"], "CATEGORY_HAS_PRODUCTS")

    def test_delete_with_stock_history_deactivates(self):
        self.client.force_authenticate(self.admin)
        url = reverse("products:admin-product-adjust-stock", args=[self.product.id])
        self.client.post(url, {"quantity": 2, "type": "increase", "reason": "Delivery"}, format="json")

        res = self.client.delete(reverse("products:admin-product-detail", args=[self.product.id]))

        self.assertEqual(res.status_code, 200)
        self.product.refresh_from_db()
        self.assertFalse(self.product.is_active)
        self.assertEqual(InventoryLog.objects.filter(product=self.product).count(), 1)

    def test_delete_without_history(self):
        self.client.force_authenticate(self.admin)
        res = self.client.delete(reverse("products:admin-product-detail", args=[self.product.id]))
        self.assertEqual(res.status_code, 200)
        self.assertFalse(Product.objects.filter(pk=self.product.pk).exists())

    def test_export_is_csv(self):
        self.client.force_authenticate(self.admin)
        res = self.client.get(reverse("products:admin-product-export"))
        self.assertEqual(res.status_code, 200)
        self.assertEqual(res["Content-Type"], "text/csv")
        self.assertIn(b"R1", res.content)
