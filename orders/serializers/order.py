# orders/serializers/order.py

"""
ORDER SERIALIZERS

OrderListSerializer     list rows (customer / staff / admin)
OrderDetailSerializer   customer view: items, history, address, invoice
StaffOrderSerializer    detail plus customer contact, staff notes, assignment
"""

from rest_framework import serializers

from orders.models import Invoice, Order, OrderItem, OrderStatusHistory
from users.serializers import AddressSerializer


class OrderItemSerializer(serializers.ModelSerializer):
    product_id = serializers.UUIDField(read_only=True, allow_null=True)

    class Meta:
        model = OrderItem
        fields = ["id", "product_id", "product_name", "sku", "unit_price", "quantity", "line_total"]
        read_only_fields = fields


class OrderStatusHistorySerializer(serializers.ModelSerializer):
    changed_by = serializers.CharField(source="changed_by.full_name", read_only=True, default=None)

    class Meta:
        model = OrderStatusHistory
        fields = ["id", "status", "notes", "changed_by", "created_at"]
        read_only_fields = fields


class InvoiceSerializer(serializers.ModelSerializer):
    order_number = serializers.CharField(source="order.order_number", read_only=True)
    customer_email = serializers.EmailField(source="order.user.email", read_only=True)

    class Meta:
        model = Invoice
        fields = [
            "id",
            "invoice_number",
            "order_number",
            "customer_email",
            "status",
            "subtotal",
            "delivery_fee",
            "discount",
            "total",
            "issued_at",
            "due_date",
            "paid_at",
        ]
        read_only_fields = fields


class OrderListSerializer(serializers.ModelSerializer):
    item_count = serializers.IntegerField(read_only=True)
    customer_name = serializers.CharField(source="user.full_name", read_only=True)
    payment_status = serializers.CharField(read_only=True, allow_null=True)

    class Meta:
        model = Order
        fields = [
            "id",
            "order_number",
            "status",
            "customer_name",
            "item_count",
            "subtotal",
            "delivery_fee",
            "discount",
            "total",
            "currency",
            "delivery_method",
            "scheduled_date",
            "scheduled_slot",
            "payment_status",
            "created_at",
        ]
        read_only_fields = fields


class OrderDetailSerializer(serializers.ModelSerializer):
    items = OrderItemSerializer(many=True, read_only=True)
    status_history = OrderStatusHistorySerializer(many=True, read_only=True)
    address = AddressSerializer(read_only=True)
    zone_name = serializers.CharField(source="delivery_zone.name", read_only=True, default=None)
    can_be_cancelled = serializers.BooleanField(read_only=True)
    payment_status = serializers.CharField(read_only=True, allow_null=True)

    class Meta:
        model = Order
        fields = [
            "id",
            "order_number",
            "status",
            "items",
            "subtotal",
            "delivery_fee",
            "discount",
            "total",
            "currency",
            "promotion_code",
            "notes",
            "delivery_method",
            "delivery_instructions",
            "scheduled_date",
            "scheduled_slot",
            "address",
            "zone_name",
            "can_be_cancelled",
            "payment_status",
            "status_history",
            "delivered_at",
            "cancelled_at",
            "cancellation_reason",
            "created_at",
            "updated_at",
        ]
        read_only_fields = fields


class StaffOrderSerializer(OrderDetailSerializer):
    customer = serializers.SerializerMethodField()
    assigned_to = serializers.SerializerMethodField()

    class Meta(OrderDetailSerializer.Meta):
        fields = OrderDetailSerializer.Meta.fields + [
            "customer",
            "staff_notes",
            "assigned_to",
            "assigned_at",
            "delivery_issue",
            "delivery_issue_reported_at",
        ]
        read_only_fields = fields

    def get_customer(self, obj):
        return {
            "id": str(obj.user_id),
            "name": obj.user.full_name,
            "email": obj.user.email,
            "phone": obj.user.phone,
        }

    def get_assigned_to(self, obj):
        if obj.assigned_to_id is None:
            return None
        return {"id": str(obj.assigned_to_id), "name": obj.assigned_to.full_name}


class AdminOrderUpdateSerializer(serializers.ModelSerializer):
    """Editable scheduling fields; status and money move through services."""

    class Meta:
        model = Order
        fields = ["delivery_instructions", "scheduled_date", "scheduled_slot", "notes"]
