# inventory/serializers/__init__.py

from rest_framework import serializers

from inventory.models import InventoryLog, WasteLog
from inventory.services import CHANGE_ADJUSTMENT, CHANGE_DECREASE, CHANGE_INCREASE
from products.models import Product


class InventoryLogSerializer(serializers.ModelSerializer):
    product_name = serializers.CharField(source="product.name", read_only=True)
    user_name = serializers.SerializerMethodField()
    order_number = serializers.CharField(source="order.order_number", read_only=True, default=None)

    class Meta:
        model = InventoryLog
        fields = [
            "id",
            "product",
            "product_name",
            "type",
            "quantity",
            "stock_before",
            "stock_after",
            "reason",
            "order",
            "order_number",
            "user",
            "user_name",
            "created_at",
        ]
        read_only_fields = fields

    def get_user_name(self, obj):
        return obj.user.full_name if obj.user_id else None


class WasteLogSerializer(serializers.ModelSerializer):
    product_name = serializers.CharField(source="product.name", read_only=True)
    logged_by_name = serializers.SerializerMethodField()
    reviewed_by_name = serializers.SerializerMethodField()

    class Meta:
        model = WasteLog
        fields = [
            "id",
            "product",
            "product_name",
            "quantity",
            "reason",
            "notes",
            "unit_cost",
            "total_cost",
            "status",
            "logged_by",
            "logged_by_name",
            "reviewed_by",
            "reviewed_by_name",
            "reviewed_at",
            "rejection_notes",
            "created_at",
        ]
        read_only_fields = fields

    def get_logged_by_name(self, obj):
        return obj.logged_by.full_name if obj.logged_by_id else None

    def get_reviewed_by_name(self, obj):
        return obj.reviewed_by.full_name if obj.reviewed_by_id else None


class InventoryProductSerializer(serializers.ModelSerializer):
    category_name = serializers.CharField(source="category.name", read_only=True)
    stock_status = serializers.CharField(read_only=True)

    class Meta:
        model = Product
        fields = [
            "id",
            "name",
            "sku",
            "category_name",
            "unit",
            "stock",
            "min_stock",
            "stock_status",
            "price_aud",
            "is_active",
            "updated_at",
        ]
        read_only_fields = fields


# ---------------- INPUT ----------------
class StockChangeInputSerializer(serializers.Serializer):
    quantity = serializers.IntegerField()
    type = serializers.ChoiceField(choices=[CHANGE_INCREASE, CHANGE_DECREASE, CHANGE_ADJUSTMENT])
    reason = serializers.CharField(max_length=255)

    def validate_quantity(self, value):
        if value == 0:
            raise serializers.ValidationError("Quantity cannot be zero.")
        return value


class ReceiveStockInputSerializer(serializers.Serializer):
    quantity = serializers.IntegerField(min_value=1)
    supplier = serializers.CharField(max_length=255, required=False, allow_blank=True, default="")
    notes = serializers.CharField(max_length=500, required=False, allow_blank=True, default="")


class AdjustStockInputSerializer(serializers.Serializer):
    new_quantity = serializers.IntegerField(min_value=0)
    reason = serializers.CharField(max_length=255)


class MinStockInputSerializer(serializers.Serializer):
    min_stock = serializers.IntegerField(min_value=0)


class WasteInputSerializer(serializers.Serializer):
    product_id = serializers.PrimaryKeyRelatedField(queryset=Product.objects.all(), source="product")
    quantity = serializers.IntegerField(min_value=1)
    reason = serializers.ChoiceField(choices=WasteLog.REASON_CHOICES)
    notes = serializers.CharField(required=False, allow_blank=True, default="")


class WasteReviewInputSerializer(serializers.Serializer):
    approved = serializers.BooleanField()
    notes = serializers.CharField(required=False, allow_blank=True, default="")
