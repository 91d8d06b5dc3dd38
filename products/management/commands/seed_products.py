from decimal import Decimal

from django.contrib.auth import get_user_model
from django.core.management.base import BaseCommand
from django.db import transaction

from inventory.services import receive_stock
from products.models import Category, Product

User = get_user_model()


CATEGORIES = [
    ("Beef", 1),
    ("Lamb", 2),
    ("Chicken", 3),
    ("Pork", 4),
    ("Sausages", 5),
    ("BBQ Packs", 6),
]

# sku, name, category, price, sale price, unit, opening stock
PRODUCTS = [
    ("BEEF-RUMP", "Rump Steak", "Beef", "32.99", None, "kg", 40),
    ("BEEF-MINCE", "Premium Beef Mince", "Beef", "16.99", "14.99", "kg", 60),
    ("BEEF-TBONE", "T-Bone Steak", "Beef", "38.50", None, "kg", 25),
    ("LAMB-CHOPS", "Lamb Loin Chops", "Lamb", "34.99", None, "kg", 30),
    ("LAMB-LEG", "Lamb Leg (Bone In)", "Lamb", "19.99", "17.99", "kg", 20),
    ("CHKN-THIGH", "Chicken Thigh Fillets", "Chicken", "15.49", None, "kg", 50),
    ("CHKN-WHOLE", "Whole Chicken", "Chicken", "12.00", None, "piece", 35),
    ("PORK-BELLY", "Pork Belly", "Pork", "24.99", None, "kg", 15),
    ("SAUS-BOER", "Boerewors", "Sausages", "18.99", None, "kg", 45),
    ("BBQ-FAMILY", "Family BBQ Pack", "BBQ Packs", "89.00", "79.00", "pack", 12),
]


class Command(BaseCommand):
    help = "Seed categories and products with opening stock (idempotent)"

    @transaction.atomic
    def handle(self, *args, **options):
        self.stdout.write(self.style.WARNING("Seeding catalog and stock..."))

        # -------------------------------
        # CATEGORIES
        # -------------------------------
        category_objs = {}
        for name, order in CATEGORIES:
            obj, _ = Category.objects.get_or_create(name=name, defaults={"sort_order": order})
            category_objs[name] = obj

        # -------------------------------
        # PRODUCTS + OPENING STOCK
        # -------------------------------
        seeder = User.objects.filter(role="admin").first()
        created_count = 0

        for sku, name, cat, price, sale, unit, stock in PRODUCTS:
            product, created = Product.objects.get_or_create(
                sku=sku,
                defaults={
                    "name": name,
                    "category": category_objs[cat],
                    "price_aud": Decimal(price),
                    "sale_price_aud": Decimal(sale) if sale else None,
                    "unit": unit,
                    "is_featured": sale is not None,
                },
            )
            if created:
                created_count += 1
                receive_stock(product=product, quantity=stock, user=seeder, notes="Opening stock")

        self.stdout.write(
            self.style.SUCCESS(f"Catalog seeded ({created_count} new products).")
        )
