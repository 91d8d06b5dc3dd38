# delivery/serializers/__init__.py

from decimal import Decimal

from rest_framework import serializers

from delivery.models import DeliveryProof, DeliveryZone
from store.services import settings as site_settings


def _clean_list(values) -> list[str]:
    seen: list[str] = []
    for value in values or []:
        text = str(value).strip()
        if text and text not in seen:
            seen.append(text)
    return seen


class DeliveryZoneSerializer(serializers.ModelSerializer):
    suburbs = serializers.ListField(child=serializers.CharField(max_length=100), required=False)
    postcodes = serializers.ListField(child=serializers.CharField(max_length=10), required=False)

    class Meta:
        model = DeliveryZone
        fields = [
            "id",
            "name",
            "description",
            "suburbs",
            "postcodes",
            "delivery_fee",
            "free_delivery_threshold",
            "estimated_days",
            "is_active",
            "sort_order",
            "created_at",
            "updated_at",
        ]
        read_only_fields = ["id", "created_at", "updated_at"]

    def validate_suburbs(self, value):
        return _clean_list(value)

    def validate_postcodes(self, value):
        return _clean_list(value)

    def validate_delivery_fee(self, value):
        if value is not None and value < Decimal("0"):
            raise serializers.ValidationError("Delivery fee cannot be negative.")
        return value

    def validate_free_delivery_threshold(self, value):
        if value is not None and value < Decimal("0"):
            raise serializers.ValidationError("Threshold cannot be negative.")
        return value

    def validate(self, attrs):
        suburbs = attrs.get("suburbs", getattr(self.instance, "suburbs", None))
        postcodes = attrs.get("postcodes", getattr(self.instance, "postcodes", None))
        if not suburbs and not postcodes:
            raise serializers.ValidationError({"suburbs": ["A zone needs at least one suburb or postcode."]})
        return attrs

    def create(self, validated_data):
        # omitted threshold -> store default; an explicit null means no free delivery
        if "free_delivery_threshold" not in self.initial_data:
            validated_data["free_delivery_threshold"] = site_settings.free_delivery_threshold()
        return super().create(validated_data)


class PublicDeliveryZoneSerializer(serializers.ModelSerializer):
    class Meta:
        model = DeliveryZone
        fields = [
            "id",
            "name",
            "description",
            "suburbs",
            "postcodes",
            "delivery_fee",
            "free_delivery_threshold",
            "estimated_days",
        ]
        read_only_fields = fields


class DeliveryProofSerializer(serializers.ModelSerializer):
    photo_url = serializers.SerializerMethodField()
    captured_by = serializers.SerializerMethodField()

    class Meta:
        model = DeliveryProof
        fields = [
            "id",
            "order",
            "photo_url",
            "signature_data",
            "recipient_name",
            "notes",
            "left_at_door",
            "captured_by",
            "captured_at",
        ]
        read_only_fields = fields

    def get_photo_url(self, obj):
        if not obj.photo:
            return None
        request = self.context.get("request")
        return request.build_absolute_uri(obj.photo.url) if request else obj.photo.url

    def get_captured_by(self, obj):
        if obj.captured_by_id is None:
            return None
        return {"id": str(obj.captured_by_id), "name": obj.captured_by.full_name}


class ProofCaptureSerializer(serializers.Serializer):
    photo = serializers.FileField(required=False, allow_null=True)
    signature_data = serializers.CharField(required=False, allow_blank=True, default="")
    recipient_name = serializers.CharField(required=False, allow_blank=True, default="", max_length=255)
    notes = serializers.CharField(required=False, allow_blank=True, default="")
    left_at_door = serializers.BooleanField(required=False, default=False)


class DeliveryIssueSerializer(serializers.Serializer):
    """issue to report; resolved=true clears it."""

    issue = serializers.CharField(required=False, allow_blank=True, default="")
    resolved = serializers.BooleanField(required=False, default=False)
    resolution = serializers.CharField(required=False, allow_blank=True, default="")

    def validate(self, attrs):
        if not attrs["resolved"] and not attrs["issue"].strip():
            raise serializers.ValidationError({"issue": ["Describe the issue."]})
        return attrs


class DeliverySettingsSerializer(serializers.Serializer):
    settings = serializers.DictField()
