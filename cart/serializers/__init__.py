# cart/serializers/__init__.py

from rest_framework import serializers

from cart.models import CartItem, WishlistItem
from products.serializers import ProductSearchResultSerializer, ProductSerializer


class CartItemSerializer(serializers.ModelSerializer):
    product = ProductSearchResultSerializer(read_only=True)
    line_total = serializers.DecimalField(max_digits=12, decimal_places=2, read_only=True)

    class Meta:
        model = CartItem
        fields = ["id", "product", "quantity", "unit_price", "line_total", "updated_at"]
        read_only_fields = fields


class AddCartItemSerializer(serializers.Serializer):
    product_id = serializers.UUIDField()
    quantity = serializers.IntegerField(min_value=1, default=1)


class UpdateCartItemSerializer(serializers.Serializer):
    quantity = serializers.IntegerField(min_value=1)


class GuestCartLineSerializer(serializers.Serializer):
    product_id = serializers.UUIDField()
    quantity = serializers.IntegerField(min_value=0)


class SyncCartSerializer(serializers.Serializer):
    items = GuestCartLineSerializer(many=True, allow_empty=True)


class WishlistItemSerializer(serializers.ModelSerializer):
    product = ProductSerializer(read_only=True)

    class Meta:
        model = WishlistItem
        fields = ["id", "product", "created_at"]
        read_only_fields = fields


class AddWishlistItemSerializer(serializers.Serializer):
    product_id = serializers.UUIDField()
