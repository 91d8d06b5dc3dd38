# users/serializers/address.py

from rest_framework import serializers

from users.models import Address


class AddressSerializer(serializers.ModelSerializer):
    full_address = serializers.CharField(read_only=True)

    class Meta:
        model = Address
        fields = [
            "id",
            "label",
            "street",
            "suburb",
            "city",
            "state",
            "postcode",
            "country",
            "is_default",
            "full_address",
            "created_at",
        ]
        read_only_fields = ["id", "full_address", "created_at"]

    def validate_postcode(self, value):
        value = (value or "").strip()
        if not value.isdigit() or len(value) != 4:
            raise serializers.ValidationError("Postcode must be 4 digits.")
        return value

    def validate_suburb(self, value):
        value = (value or "").strip()
        if not value:
            raise serializers.ValidationError("Suburb is required.")
        return value
