# products/views/public.py

"""
PUBLIC CATALOG (ONLINE STORE)

GET /products/                     filtered, sorted, paginated
GET /products/featured/?limit=8
GET /products/search/?q=
GET /products/{slug}/
GET /products/{slug}/related/
GET /categories/                   with active product counts
GET /categories/{slug}/
GET /categories/{slug}/products/

Rules:
- AllowAny (public), throttled to reduce scraping
- Only active products / categories are ever visible
"""

from __future__ import annotations

from django.db.models import Count, Q
from drf_spectacular.utils import OpenApiParameter, extend_schema
from rest_framework.decorators import action
from rest_framework.exceptions import ValidationError
from rest_framework.permissions import AllowAny

from backend.responses import success_response
from backend.throttles import PublicCatalogThrottle
from backend.viewsets import EnvelopeReadOnlyModelViewSet
from products.filters import ProductFilter, apply_sort
from products.models import Category, Product
from products.serializers import (
    CategorySerializer,
    ProductSearchResultSerializer,
    ProductSerializer,
)


def _limit(request, default: int, maximum: int) -> int:
    raw = (request.query_params.get("limit") or "").strip()
    try:
        value = int(raw) if raw else default
    except ValueError:
        value = default
    return max(1, min(value, maximum))


@extend_schema(tags=["Catalog"])
class ProductViewSet(EnvelopeReadOnlyModelViewSet):
    serializer_class = ProductSerializer
    permission_classes = [AllowAny]
    throttle_classes = [PublicCatalogThrottle]
    filterset_class = ProductFilter
    lookup_field = "slug"

    def get_queryset(self):
        qs = Product.objects.select_related("category").filter(is_active=True)
        if self.action == "list":
            qs = apply_sort(qs, self.request.query_params.get("sort"))
        return qs

    @extend_schema(
        parameters=[
            OpenApiParameter("sort", str, OpenApiParameter.QUERY, required=False,
                             enum=["newest", "price_asc", "price_desc", "name", "featured"]),
        ]
    )
    def list(self, request, *args, **kwargs):
        return super().list(request, *args, **kwargs)

    @extend_schema(parameters=[OpenApiParameter("limit", int, OpenApiParameter.QUERY, required=False)])
    @action(detail=False, methods=["get"])
    def featured(self, request):
        qs = (
            Product.objects.select_related("category")
            .filter(is_active=True, is_featured=True, stock__gt=0)
            .order_by("-created_at")[: _limit(request, 8, 24)]
        )
        return success_response(ProductSerializer(qs, many=True).data)

    @extend_schema(parameters=[OpenApiParameter("q", str, OpenApiParameter.QUERY, required=True)])
    @action(detail=False, methods=["get"])
    def search(self, request):
        q = (request.query_params.get("q") or "").strip()
        if len(q) < 2:
            raise ValidationError({"q": ["Search term must be at least 2 characters."]})

        qs = Product.objects.filter(is_active=True).filter(
            Q(name__icontains=q) | Q(description__icontains=q) | Q(sku__icontains=q)
        ).order_by("name")[:10]
        return success_response(ProductSearchResultSerializer(qs, many=True).data)

    @action(detail=True, methods=["get"])
    def related(self, request, slug=None):
        product = self.get_object()
        qs = (
            Product.objects.select_related("category")
            .filter(is_active=True, category_id=product.category_id, stock__gt=0)
            .exclude(pk=product.pk)
            .order_by("?")[: _limit(request, 4, 12)]
        )
        return success_response(ProductSerializer(qs, many=True).data)


@extend_schema(tags=["Catalog"])
class CategoryViewSet(EnvelopeReadOnlyModelViewSet):
    serializer_class = CategorySerializer
    permission_classes = [AllowAny]
    throttle_classes = [PublicCatalogThrottle]
    pagination_class = None
    lookup_field = "slug"

    def get_queryset(self):
        return Category.objects.filter(is_active=True).annotate(
            products_count=Count("products", filter=Q(products__is_active=True))
        )

    @action(detail=True, methods=["get"])
    def products(self, request, slug=None):
        category = self.get_object()
        qs = apply_sort(
            Product.objects.select_related("category").filter(is_active=True, category=category),
            request.query_params.get("sort"),
        )
        qs = ProductFilter(request.query_params, queryset=qs, request=request).qs

        paginator = ProductViewSet.pagination_class()
        page = paginator.paginate_queryset(qs, request, view=self)
        data = ProductSerializer(page, many=True).data
        return paginator.get_paginated_response(data, category=CategorySerializer(category).data)
