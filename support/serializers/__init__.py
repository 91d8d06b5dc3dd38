# support/serializers/__init__.py

from rest_framework import serializers

from support.models import SupportTicket, TicketReply


class TicketReplySerializer(serializers.ModelSerializer):
    user_name = serializers.CharField(source="user.full_name", read_only=True)
    is_staff_reply = serializers.BooleanField(read_only=True)

    class Meta:
        model = TicketReply
        fields = ["id", "user_name", "is_staff_reply", "message", "created_at"]
        read_only_fields = fields


class SupportTicketSerializer(serializers.ModelSerializer):
    order_number = serializers.CharField(source="order.order_number", read_only=True, default=None)
    reply_count = serializers.IntegerField(read_only=True, default=0)

    class Meta:
        model = SupportTicket
        fields = [
            "id",
            "subject",
            "message",
            "status",
            "priority",
            "order_number",
            "reply_count",
            "cancelled_at",
            "cancelled_by_user",
            "created_at",
            "updated_at",
        ]
        read_only_fields = fields


class SupportTicketDetailSerializer(SupportTicketSerializer):
    replies = TicketReplySerializer(many=True, read_only=True)
    customer_name = serializers.CharField(source="user.full_name", read_only=True)
    customer_email = serializers.EmailField(source="user.email", read_only=True)

    class Meta(SupportTicketSerializer.Meta):
        fields = SupportTicketSerializer.Meta.fields + ["customer_name", "customer_email", "replies"]
        read_only_fields = fields


class TicketCreateSerializer(serializers.Serializer):
    subject = serializers.CharField(max_length=255)
    message = serializers.CharField(max_length=5000)
    order_id = serializers.UUIDField(required=False, allow_null=True)
    priority = serializers.ChoiceField(
        choices=SupportTicket.PRIORITY_CHOICES, required=False, default=SupportTicket.PRIORITY_MEDIUM
    )


class TicketReplyCreateSerializer(serializers.Serializer):
    message = serializers.CharField(max_length=5000)


class TicketStatusSerializer(serializers.Serializer):
    status = serializers.ChoiceField(choices=SupportTicket.STATUS_CHOICES)
