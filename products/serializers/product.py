# products/serializers/product.py

"""
PRODUCT SERIALIZERS

ProductSerializer       public storefront shape (read-only)
AdminProductSerializer  catalog management (writable; stock is read-only
                        after creation and moves through the stock service)
"""

from decimal import Decimal

from rest_framework import serializers

from products.models import Category, Product
from products.serializers.category import CategorySummarySerializer


class ProductSerializer(serializers.ModelSerializer):
    category = CategorySummarySerializer(read_only=True)
    current_price = serializers.DecimalField(max_digits=10, decimal_places=2, read_only=True)
    is_on_sale = serializers.BooleanField(read_only=True)
    discount_percentage = serializers.IntegerField(read_only=True)
    is_in_stock = serializers.BooleanField(read_only=True)
    stock_status = serializers.CharField(read_only=True)

    class Meta:
        model = Product
        fields = [
            "id",
            "name",
            "slug",
            "sku",
            "category",
            "description",
            "short_description",
            "price_aud",
            "sale_price_aud",
            "current_price",
            "is_on_sale",
            "discount_percentage",
            "unit",
            "weight_kg",
            "image_url",
            "stock",
            "is_in_stock",
            "stock_status",
            "is_featured",
            "created_at",
        ]
        read_only_fields = fields


class ProductSearchResultSerializer(serializers.ModelSerializer):
    price = serializers.DecimalField(source="current_price", max_digits=10, decimal_places=2, read_only=True)

    class Meta:
        model = Product
        fields = ["id", "name", "slug", "price", "unit", "image_url", "stock"]
        read_only_fields = fields


class AdminProductSerializer(serializers.ModelSerializer):
    category = CategorySummarySerializer(read_only=True)
    category_id = serializers.PrimaryKeyRelatedField(
        source="category",
        queryset=Category.objects.all(),
        write_only=True,
    )
    slug = serializers.SlugField(required=False, allow_blank=True, max_length=255)
    stock = serializers.IntegerField(required=False, min_value=0, default=0)
    current_price = serializers.DecimalField(max_digits=10, decimal_places=2, read_only=True)
    stock_status = serializers.CharField(read_only=True)

    class Meta:
        model = Product
        fields = [
            "id",
            "name",
            "slug",
            "sku",
            "category",
            "category_id",
            "description",
            "short_description",
            "price_aud",
            "sale_price_aud",
            "current_price",
            "stock",
            "min_stock",
            "stock_status",
            "unit",
            "weight_kg",
            "image_url",
            "is_featured",
            "is_active",
            "created_at",
            "updated_at",
        ]
        read_only_fields = ["id", "category", "current_price", "stock_status", "created_at", "updated_at"]

    def validate_sku(self, value):
        value = (value or "").strip().upper()
        if not value:
            raise serializers.ValidationError("SKU is required")
        qs = Product.objects.filter(sku=value)
        if self.instance is not None:
            qs = qs.exclude(pk=self.instance.pk)
        if qs.exists():
            raise serializers.ValidationError("A product with this SKU already exists.")
        return value

    def validate_slug(self, value):
        v = (value or "").strip().lower()
        if not v:
            return ""
        qs = Product.objects.filter(slug=v)
        if self.instance is not None:
            qs = qs.exclude(pk=self.instance.pk)
        if qs.exists():
            raise serializers.ValidationError("A product with this slug already exists.")
        return v

    def validate_price_aud(self, value):
        if value is None or value <= Decimal("0"):
            raise serializers.ValidationError("Price must be greater than zero")
        return value

    def validate(self, attrs):
        price = attrs.get("price_aud", getattr(self.instance, "price_aud", None))
        sale = attrs.get("sale_price_aud", getattr(self.instance, "sale_price_aud", None))
        if sale is not None and price is not None and sale >= price:
            raise serializers.ValidationError(
                {"sale_price_aud": ["Sale price must be lower than the regular price."]}
            )
        return attrs

    def update(self, instance, validated_data):
        # Stock only moves through adjust-stock / inventory endpoints.
        validated_data.pop("stock", None)
        return super().update(instance, validated_data)
