from django.contrib import admin

from inventory.models import InventoryLog, WasteLog


@admin.register(InventoryLog)
class InventoryLogAdmin(admin.ModelAdmin):
    """Read-only: the ledger is append-only."""

    list_display = ("product", "type", "quantity", "stock_before", "stock_after", "order", "user", "created_at")
    list_filter = ("type",)
    search_fields = ("product__name", "product__sku", "reason")

    def has_add_permission(self, request):
        return False

    def has_change_permission(self, request, obj=None):
        return False

    def has_delete_permission(self, request, obj=None):
        return False


@admin.register(WasteLog)
class WasteLogAdmin(admin.ModelAdmin):
    list_display = ("product", "quantity", "reason", "total_cost", "status", "logged_by", "created_at")
    list_filter = ("status", "reason")
    readonly_fields = ("total_cost", "reviewed_by", "reviewed_at", "created_at")
