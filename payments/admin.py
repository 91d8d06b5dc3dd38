# payments/admin.py

from django.contrib import admin

from payments.models import Payment


@admin.register(Payment)
class PaymentAdmin(admin.ModelAdmin):
    list_display = ("order", "gateway", "status", "amount", "currency", "completed_at", "created_at")
    list_filter = ("gateway", "status")
    search_fields = ("transaction_id", "order__order_number")
    readonly_fields = (
        "order",
        "gateway",
        "transaction_id",
        "amount",
        "currency",
        "gateway_response",
        "refunded_amount",
        "completed_at",
        "created_at",
    )
