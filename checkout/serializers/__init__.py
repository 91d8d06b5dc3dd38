# checkout/serializers/__init__.py

from decimal import Decimal

from django.utils import timezone
from rest_framework import serializers

from checkout.models import Promotion
from orders.models import Order
from users.serializers import AddressSerializer


class AddressLookupSerializer(serializers.Serializer):
    suburb = serializers.CharField(required=False, allow_blank=True, default="")
    postcode = serializers.CharField(required=False, allow_blank=True, default="")

    def validate(self, attrs):
        attrs["suburb"] = attrs["suburb"].strip()
        attrs["postcode"] = attrs["postcode"].strip()
        if not attrs["suburb"] and not attrs["postcode"]:
            raise serializers.ValidationError({"postcode": ["Suburb or postcode is required."]})
        return attrs


class DeliveryFeeSerializer(serializers.Serializer):
    delivery_method = serializers.ChoiceField(choices=Order.METHOD_CHOICES, default=Order.METHOD_DELIVERY)
    suburb = serializers.CharField(required=False, allow_blank=True, default="")
    postcode = serializers.CharField(required=False, allow_blank=True, default="")
    subtotal = serializers.DecimalField(max_digits=12, decimal_places=2, min_value=Decimal("0"))

    def validate(self, attrs):
        if attrs["delivery_method"] == Order.METHOD_DELIVERY and not (
            attrs["suburb"].strip() or attrs["postcode"].strip()
        ):
            raise serializers.ValidationError({"postcode": ["Suburb or postcode is required."]})
        return attrs


class PromoCheckSerializer(serializers.Serializer):
    code = serializers.CharField(max_length=50)
    subtotal = serializers.DecimalField(max_digits=12, decimal_places=2, min_value=Decimal("0"))


class CreateOrderSerializer(serializers.Serializer):
    delivery_method = serializers.ChoiceField(choices=Order.METHOD_CHOICES, default=Order.METHOD_DELIVERY)
    address_id = serializers.UUIDField(required=False, allow_null=True)
    address = AddressSerializer(required=False)
    promo_code = serializers.CharField(required=False, allow_blank=True, default="", max_length=50)
    notes = serializers.CharField(required=False, allow_blank=True, default="", max_length=2000)
    delivery_instructions = serializers.CharField(required=False, allow_blank=True, default="", max_length=2000)
    scheduled_date = serializers.DateField(required=False, allow_null=True)
    scheduled_slot = serializers.CharField(required=False, allow_blank=True, default="", max_length=50)

    def validate_scheduled_date(self, value):
        if value is not None and value < timezone.localdate():
            raise serializers.ValidationError("Scheduled date cannot be in the past.")
        return value

    def validate(self, attrs):
        if attrs["delivery_method"] == Order.METHOD_DELIVERY and not (
            attrs.get("address_id") or attrs.get("address")
        ):
            raise serializers.ValidationError({"address_id": ["A delivery address is required."]})
        return attrs


class PromotionSerializer(serializers.ModelSerializer):
    is_usable = serializers.SerializerMethodField()

    class Meta:
        model = Promotion
        fields = [
            "id",
            "code",
            "name",
            "description",
            "type",
            "value",
            "min_order",
            "max_uses",
            "uses_count",
            "starts_at",
            "ends_at",
            "is_active",
            "is_usable",
            "created_at",
            "updated_at",
        ]
        read_only_fields = ["id", "uses_count", "is_usable", "created_at", "updated_at"]

    def get_is_usable(self, obj) -> bool:
        return obj.can_be_used()

    def validate_code(self, value):
        value = (value or "").strip().upper()
        qs = Promotion.objects.filter(code=value)
        if self.instance is not None:
            qs = qs.exclude(pk=self.instance.pk)
        if qs.exists():
            raise serializers.ValidationError("A promotion with this code already exists.")
        return value

    def validate(self, attrs):
        promo_type = attrs.get("type", getattr(self.instance, "type", Promotion.TYPE_PERCENTAGE))
        value = attrs.get("value", getattr(self.instance, "value", None))
        starts_at = attrs.get("starts_at", getattr(self.instance, "starts_at", None))
        ends_at = attrs.get("ends_at", getattr(self.instance, "ends_at", None))

        if value is None or value <= 0:
            raise serializers.ValidationError({"value": ["Value must be greater than zero."]})
        if promo_type == Promotion.TYPE_PERCENTAGE and value > 100:
            raise serializers.ValidationError({"value": ["Percentage cannot exceed 100."]})
        if ends_at and starts_at and ends_at <= starts_at:
            raise serializers.ValidationError({"ends_at": ["End must be after start."]})
        return attrs
