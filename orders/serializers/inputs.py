# orders/serializers/inputs.py

from rest_framework import serializers

from orders.models import Invoice, Order


class InvoiceStatusSerializer(serializers.Serializer):
    status = serializers.ChoiceField(choices=Invoice.STATUS_CHOICES)


class StatusUpdateSerializer(serializers.Serializer):
    status = serializers.ChoiceField(choices=Order.STATUS_CHOICES)
    notes = serializers.CharField(required=False, allow_blank=True, default="")


class CancelOrderSerializer(serializers.Serializer):
    reason = serializers.CharField(required=False, allow_blank=True, default="")


class StaffNoteSerializer(serializers.Serializer):
    note = serializers.CharField(max_length=2000)


class AssignOrderSerializer(serializers.Serializer):
    user_id = serializers.UUIDField()


class RefundSerializer(serializers.Serializer):
    amount = serializers.DecimalField(max_digits=12, decimal_places=2, required=False, min_value=0)
    reason = serializers.CharField(max_length=1000)
