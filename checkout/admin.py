# checkout/admin.py

from django.contrib import admin

from checkout.models import Promotion


@admin.register(Promotion)
class PromotionAdmin(admin.ModelAdmin):
    list_display = ("code", "name", "type", "value", "min_order", "uses_count", "max_uses", "is_active", "ends_at")
    list_filter = ("type", "is_active")
    search_fields = ("code", "name")
    readonly_fields = ("uses_count", "created_at", "updated_at")
