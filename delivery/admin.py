# delivery/admin.py

from django.contrib import admin

from delivery.models import DeliveryProof, DeliveryZone


@admin.register(DeliveryZone)
class DeliveryZoneAdmin(admin.ModelAdmin):
    list_display = ("name", "delivery_fee", "free_delivery_threshold", "estimated_days", "is_active", "sort_order")
    list_filter = ("is_active",)
    search_fields = ("name",)
    ordering = ("sort_order", "name")


@admin.register(DeliveryProof)
class DeliveryProofAdmin(admin.ModelAdmin):
    list_display = ("order", "recipient_name", "left_at_door", "captured_by", "captured_at")
    search_fields = ("order__order_number", "recipient_name")
    readonly_fields = ("captured_at",)
