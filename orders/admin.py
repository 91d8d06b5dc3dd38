# orders/admin.py

from django.contrib import admin

from orders.models import Invoice, Order, OrderItem, OrderStatusHistory


class OrderItemInline(admin.TabularInline):
    model = OrderItem
    extra = 0
    readonly_fields = ("product", "product_name", "sku", "unit_price", "quantity", "line_total")
    can_delete = False


class OrderStatusHistoryInline(admin.TabularInline):
    model = OrderStatusHistory
    extra = 0
    readonly_fields = ("status", "notes", "changed_by", "created_at")
    can_delete = False

    def has_add_permission(self, request, obj=None):
        return False


@admin.register(Order)
class OrderAdmin(admin.ModelAdmin):
    list_display = ("order_number", "user", "status", "delivery_method", "total", "created_at")
    list_filter = ("status", "delivery_method", "created_at")
    search_fields = ("order_number", "user__email", "user__first_name", "user__last_name")
    readonly_fields = (
        "order_number",
        "status",
        "subtotal",
        "delivery_fee",
        "discount",
        "total",
        "promotion_code",
        "created_at",
        "updated_at",
    )
    inlines = [OrderItemInline, OrderStatusHistoryInline]


@admin.register(Invoice)
class InvoiceAdmin(admin.ModelAdmin):
    list_display = ("invoice_number", "order", "status", "total", "issued_at", "paid_at")
    list_filter = ("status",)
    search_fields = ("invoice_number", "order__order_number")
    readonly_fields = ("invoice_number", "order", "subtotal", "delivery_fee", "discount", "total", "issued_at")
