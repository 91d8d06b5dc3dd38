# payments/serializers/__init__.py

from rest_framework import serializers

from payments.models import Payment


class PaymentSerializer(serializers.ModelSerializer):
    order_number = serializers.CharField(source="order.order_number", read_only=True)

    class Meta:
        model = Payment
        fields = [
            "id",
            "order_number",
            "gateway",
            "transaction_id",
            "status",
            "amount",
            "currency",
            "refunded_amount",
            "refund_reason",
            "completed_at",
            "created_at",
        ]
        read_only_fields = fields


class ProcessPaymentSerializer(serializers.Serializer):
    order_id = serializers.UUIDField()


class PayPalProcessSerializer(ProcessPaymentSerializer):
    return_url = serializers.URLField(required=False, allow_blank=True, default="")
    cancel_url = serializers.URLField(required=False, allow_blank=True, default="")


class StripeConfirmSerializer(serializers.Serializer):
    payment_intent_id = serializers.CharField(max_length=255)


class PayPalConfirmSerializer(serializers.Serializer):
    paypal_order_id = serializers.CharField(max_length=255)
