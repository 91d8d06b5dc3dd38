# products/models/product.py

import uuid
from decimal import ROUND_HALF_UP, Decimal

from django.core.exceptions import ValidationError
from django.db import models

from .category import Category, unique_slug


class Product(models.Model):
    """
    Represents a sellable cut of meat (or pack).

    STOCK MODEL (IMPORTANT):
    - Product.stock is the on-hand count.
    - It only moves through inventory.services.stock, which writes one
      InventoryLog row per change (the ledger is the audit trail).

    PRICING:
    - price_aud is the shelf price.
    - sale_price_aud (optional) must be lower than price_aud and wins when set.
    """

    UNIT_KG = "kg"
    UNIT_PIECE = "piece"
    UNIT_PACK = "pack"

    UNIT_CHOICES = [
        (UNIT_KG, "Per kg"),
        (UNIT_PIECE, "Per piece"),
        (UNIT_PACK, "Per pack"),
    ]

    STOCK_OUT = "out"
    STOCK_LOW = "low"
    STOCK_NORMAL = "normal"

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    category = models.ForeignKey(
        Category,
        on_delete=models.PROTECT,
        related_name="products",
    )

    name = models.CharField(max_length=255, db_index=True)
    slug = models.SlugField(max_length=255, unique=True, blank=True)
    sku = models.CharField(max_length=64, unique=True)

    description = models.TextField(blank=True, default="")
    short_description = models.CharField(max_length=500, blank=True, default="")

    price_aud = models.DecimalField(max_digits=10, decimal_places=2)
    sale_price_aud = models.DecimalField(max_digits=10, decimal_places=2, null=True, blank=True)

    stock = models.PositiveIntegerField(default=0)
    min_stock = models.PositiveIntegerField(default=10)

    unit = models.CharField(max_length=10, choices=UNIT_CHOICES, default=UNIT_KG)
    weight_kg = models.DecimalField(max_digits=8, decimal_places=3, null=True, blank=True)
    image_url = models.URLField(max_length=500, blank=True, default="")

    is_featured = models.BooleanField(default=False)
    is_active = models.BooleanField(default=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["-created_at"]
        indexes = [
            models.Index(fields=["is_active", "is_featured"], name="product_active_featured_idx"),
            models.Index(fields=["category", "is_active"], name="product_category_active_idx"),
        ]

    def __str__(self):
        return f"{self.name} ({self.sku})"

    def clean(self):
        if self.price_aud is None or Decimal(self.price_aud) <= 0:
            raise ValidationError({"price_aud": "Price must be greater than zero"})

        if self.sale_price_aud is not None and Decimal(self.sale_price_aud) >= Decimal(self.price_aud):
            raise ValidationError({"sale_price_aud": "Sale price must be lower than the regular price"})

    def save(self, *args, **kwargs):
        self.sku = (self.sku or "").strip().upper()
        if not self.slug:
            self.slug = unique_slug(Product, self.name, instance_pk=self.pk)
        super().save(*args, **kwargs)

    # -----------------------------
    # Pricing
    # -----------------------------
    @property
    def is_on_sale(self) -> bool:
        return self.sale_price_aud is not None and self.sale_price_aud < self.price_aud

    @property
    def current_price(self) -> Decimal:
        return self.sale_price_aud if self.is_on_sale else self.price_aud

    @property
    def discount_percentage(self) -> int:
        if not self.is_on_sale:
            return 0
        pct = (Decimal(self.price_aud) - Decimal(self.sale_price_aud)) / Decimal(self.price_aud) * 100
        return int(pct.quantize(Decimal("1"), rounding=ROUND_HALF_UP))

    # -----------------------------
    # Stock
    # -----------------------------
    @property
    def is_in_stock(self) -> bool:
        return self.stock > 0

    @property
    def stock_status(self) -> str:
        if self.stock <= 0:
            return self.STOCK_OUT
        if self.stock <= self.min_stock:
            return self.STOCK_LOW
        return self.STOCK_NORMAL
