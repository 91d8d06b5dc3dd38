# products/filters.py

"""
Catalog list filtering (django-filter).

Query params:
- category   slug or UUID
- min_price / max_price  on the current (sale-aware) price
- in_stock   true|false
- featured   true|false
- unit       kg|piece|pack
- search     name / description / short description / sku
- status     low|out|normal   (stock status; admin + inventory lists)
"""

import uuid

import django_filters
from django.db.models import Case, DecimalField, F, Q, When

from products.models import Product

TRUTHY = {"1", "true", "yes", "on"}


def with_effective_price(queryset):
    if "effective_price" in queryset.query.annotations:
        return queryset
    return queryset.annotate(
        effective_price=Case(
            When(sale_price_aud__isnull=False, sale_price_aud__lt=F("price_aud"), then=F("sale_price_aud")),
            default=F("price_aud"),
            output_field=DecimalField(max_digits=10, decimal_places=2),
        )
    )


class ProductFilter(django_filters.FilterSet):
    category = django_filters.CharFilter(method="filter_category", label="Category slug or id")
    min_price = django_filters.NumberFilter(method="filter_min_price", label="Minimum price")
    max_price = django_filters.NumberFilter(method="filter_max_price", label="Maximum price")
    in_stock = django_filters.CharFilter(method="filter_in_stock", label="In stock")
    featured = django_filters.CharFilter(method="filter_featured", label="Featured")
    unit = django_filters.ChoiceFilter(choices=Product.UNIT_CHOICES)
    search = django_filters.CharFilter(method="filter_search", label="Search")
    status = django_filters.CharFilter(method="filter_status", label="Stock status")

    class Meta:
        model = Product
        fields = ["category", "min_price", "max_price", "in_stock", "featured", "unit", "search", "status"]

    def filter_category(self, queryset, name, value):
        value = (value or "").strip()
        if not value:
            return queryset
        try:
            return queryset.filter(category_id=uuid.UUID(value))
        except ValueError:
            return queryset.filter(category__slug=value)

    def filter_min_price(self, queryset, name, value):
        return with_effective_price(queryset).filter(effective_price__gte=value)

    def filter_max_price(self, queryset, name, value):
        return with_effective_price(queryset).filter(effective_price__lte=value)

    def filter_in_stock(self, queryset, name, value):
        if (value or "").strip().lower() in TRUTHY:
            return queryset.filter(stock__gt=0)
        return queryset

    def filter_featured(self, queryset, name, value):
        if (value or "").strip().lower() in TRUTHY:
            return queryset.filter(is_featured=True)
        return queryset

    def filter_search(self, queryset, name, value):
        value = (value or "").strip()
        if not value:
            return queryset
        return queryset.filter(
            Q(name__icontains=value)
            | Q(description__icontains=value)
            | Q(short_description__icontains=value)
            | Q(sku__icontains=value)
        )

    def filter_status(self, queryset, name, value):
        value = (value or "").strip().lower()
        if value == Product.STOCK_OUT:
            return queryset.filter(stock=0)
        if value == Product.STOCK_LOW:
            return queryset.filter(stock__gt=0, stock__lte=F("min_stock"))
        if value == Product.STOCK_NORMAL:
            return queryset.filter(stock__gt=F("min_stock"))
        return queryset


SORTS = {
    "newest": ("-created_at",),
    "price_asc": ("effective_price", "name"),
    "price_desc": ("-effective_price", "name"),
    "name": ("name",),
    "featured": ("-is_featured", "-created_at"),
}


def apply_sort(queryset, sort: str | None):
    key = (sort or "newest").strip().lower()
    ordering = SORTS.get(key, SORTS["newest"])
    if key in {"price_asc", "price_desc"}:
        queryset = with_effective_price(queryset)
    return queryset.order_by(*ordering)
