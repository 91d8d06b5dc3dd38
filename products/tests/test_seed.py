# products/tests/test_seed.py

from io import StringIO

from django.contrib.auth import get_user_model
from django.core.management import call_command
from django.core.management.base import CommandError
from django.test import TestCase

from inventory.models import InventoryLog
from products.models import Category, Product

User = get_user_model()


class SeedCommandTests(TestCase):
    """
    GUARANTEES:
    - seeding is idempotent
    - opening stock goes through the inventory ledger
    - seeded staff accounts carry the right flags
    """

    def test_seed_users_then_products(self):
        call_command("seed_users", stdout=StringIO())
        admin = User.objects.get(email="admin@zambezimeats.com.au")
        self.assertTrue(admin.is_superuser)
        self.assertTrue(User.objects.get(email="staff@zambezimeats.com.au").is_staff)

        call_command("seed_products", stdout=StringIO())
        call_command("seed_products", stdout=StringIO())

        self.assertEqual(Category.objects.count(), 6)
        self.assertEqual(Product.objects.count(), 10)
        rump = Product.objects.get(sku="BEEF-RUMP")
        self.assertEqual(rump.stock, 40)
        self.assertEqual(InventoryLog.objects.filter(product=rump).count(), 1)

    def test_seed_users_rejects_short_password(self):
        with self.assertRaises(CommandError):
            call_command("seed_users", password="short", stdout=StringIO())
