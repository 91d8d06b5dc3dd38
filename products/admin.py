# products/admin.py
"""
=====================================================
PATH: products/admin.py
=====================================================

Admin rules:
- Product.stock is read-only here; stock moves through the inventory
  endpoints so every change lands in the ledger.
"""

from __future__ import annotations

from django.contrib import admin

from products.models import Category, Product


@admin.register(Category)
class CategoryAdmin(admin.ModelAdmin):
    list_display = ("name", "slug", "sort_order", "is_active")
    list_editable = ("sort_order", "is_active")
    search_fields = ("name", "slug")
    prepopulated_fields = {"slug": ("name",)}


@admin.register(Product)
class ProductAdmin(admin.ModelAdmin):
    list_display = (
        "name",
        "sku",
        "category",
        "price_aud",
        "sale_price_aud",
        "stock",
        "min_stock",
        "is_featured",
        "is_active",
    )
    list_filter = ("category", "unit", "is_featured", "is_active")
    search_fields = ("name", "sku", "slug")
    readonly_fields = ("stock", "created_at", "updated_at")
    prepopulated_fields = {"slug": ("name",)}
