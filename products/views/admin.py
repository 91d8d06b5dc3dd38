# products/views/admin.py

"""
ADMIN CATALOG MANAGEMENT

/admin/products/                      CRUD             catalog.manage
/admin/products/low-stock/            GET              inventory.view
/admin/products/{id}/adjust-stock/    POST             inventory.adjust
/admin/products/{id}/stock-history/   GET              inventory.view
/admin/products/export/               GET (CSV)        catalog.manage
/admin/categories/                    CRUD             catalog.manage

Rules:
- Stock never changes through the product form: initial stock on create
  and adjust-stock both go through inventory.services (ledger row each).
- A product that appears on any order is deactivated instead of deleted.
- A category that still has products cannot be deleted (422).
"""

from __future__ import annotations

import logging

from django.db.models import Count, F
from drf_spectacular.utils import extend_schema
from rest_framework import status
from rest_framework.decorators import action
from rest_framework.permissions import IsAuthenticated

from backend.exports import csv_response
from backend.pagination import StandardPagination
from backend.responses import domain_error_response, error_response, success_response
from backend.viewsets import EnvelopeModelViewSet
from inventory.models import InventoryLog
from inventory.serializers import InventoryLogSerializer, StockChangeInputSerializer
from inventory.services import StockError, change_stock, receive_stock
from permissions.roles import (
    CAP_CATALOG_MANAGE,
    CAP_INVENTORY_ADJUST,
    CAP_INVENTORY_VIEW,
    HasCapability,
)
from products.filters import ProductFilter
from products.models import Category, Product
from products.serializers import AdminProductSerializer, CategorySerializer

logger = logging.getLogger(__name__)


@extend_schema(tags=["Admin Catalog"])
class AdminProductViewSet(EnvelopeModelViewSet):
    serializer_class = AdminProductSerializer
    permission_classes = [IsAuthenticated, HasCapability]
    filterset_class = ProductFilter
    resource_name = "Product"

    ACTION_CAPABILITIES = {
        "low_stock": CAP_INVENTORY_VIEW,
        "stock_history": CAP_INVENTORY_VIEW,
        "adjust_stock": CAP_INVENTORY_ADJUST,
    }

    @property
    def required_capability(self):
        return self.ACTION_CAPABILITIES.get(self.action, CAP_CATALOG_MANAGE)

    def get_queryset(self):
        qs = Product.objects.select_related("category").order_by("-created_at")
        active = (self.request.query_params.get("is_active") or "").strip().lower()
        if active in ("true", "1"):
            qs = qs.filter(is_active=True)
        elif active in ("false", "0"):
            qs = qs.filter(is_active=False)
        return qs

    def perform_create(self, serializer):
        initial_stock = serializer.validated_data.pop("stock", 0) or 0
        product = serializer.save(stock=0)
        if initial_stock:
            receive_stock(
                product=product,
                quantity=initial_stock,
                user=self.request.user,
                notes="Initial stock",
            )
            product.refresh_from_db()
        logger.info("Product created", extra={"product_id": str(product.id), "sku": product.sku})

    def destroy(self, request, *args, **kwargs):
        product = self.get_object()
        # the stock ledger and order lines keep their product
        if product.order_items.exists() or product.inventory_logs.exists() or product.waste_logs.exists():
            product.is_active = False
            product.save(update_fields=["is_active", "updated_at"])
            logger.info("Product deactivated instead of deleted", extra={"product_id": str(product.id)})
            return success_response(message="Product has stock history and was deactivated instead of deleted.")

        product.delete()
        return success_response(message="Product deleted successfully.")

    @action(detail=False, methods=["get"], url_path="low-stock")
    def low_stock(self, request):
        qs = (
            Product.objects.select_related("category")
            .filter(is_active=True, stock__lte=F("min_stock"))
            .order_by("stock", "name")
        )
        data = AdminProductSerializer(qs, many=True).data
        return success_response(data, count=len(data))

    @extend_schema(request=StockChangeInputSerializer, responses={200: dict})
    @action(detail=True, methods=["post"], url_path="adjust-stock")
    def adjust_stock(self, request, pk=None):
        product = self.get_object()
        serializer = StockChangeInputSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        try:
            change = change_stock(
                product=product,
                quantity=data["quantity"],
                change_type=data["type"],
                reason=data["reason"],
                user=request.user,
            )
        except StockError as exc:
            return domain_error_response(exc)

        return success_response(
            {
                "product_id": str(product.id),
                "stock_before": change.stock_before,
                "stock_after": change.stock_after,
                "type": change.type,
                "quantity": change.quantity,
            },
            message="Stock adjusted successfully.",
        )

    @action(detail=True, methods=["get"], url_path="stock-history")
    def stock_history(self, request, pk=None):
        product = self.get_object()
        qs = InventoryLog.objects.filter(product=product).select_related("user", "order", "product")
        paginator = StandardPagination()
        page = paginator.paginate_queryset(qs, request, view=self)
        return paginator.get_paginated_response(InventoryLogSerializer(page, many=True).data)

    @action(detail=False, methods=["get"], url_path="export")
    def export(self, request):
        qs = self.filter_queryset(self.get_queryset())
        rows = (
            [
                p.sku,
                p.name,
                p.category.name,
                f"{p.price_aud:.2f}",
                f"{p.sale_price_aud:.2f}" if p.sale_price_aud is not None else "",
                p.unit,
                p.stock,
                p.min_stock,
                p.stock_status,
                "yes" if p.is_active else "no",
            ]
            for p in qs
        )
        return csv_response(
            "products",
            ["SKU", "Name", "Category", "Price", "Sale price", "Unit", "Stock", "Min stock", "Status", "Active"],
            rows,
        )


@extend_schema(tags=["Admin Catalog"])
class AdminCategoryViewSet(EnvelopeModelViewSet):
    serializer_class = CategorySerializer
    permission_classes = [IsAuthenticated, HasCapability]
    required_capability = CAP_CATALOG_MANAGE
    pagination_class = None
    resource_name = "Category"

    def get_queryset(self):
        return Category.objects.annotate(products_count=Count("products"))

    def destroy(self, request, *args, **kwargs):
        category = self.get_object()
        if category.products.exists():
            return error_response(
                code="CATEGORY_HAS_PRODUCTS",
                message="Cannot delete a category that still has products.",
                http_status=status.HTTP_422_UNPROCESSABLE_ENTITY,
            )
        category.delete()
        return success_response(message="Category deleted successfully.")
