# inventory/views/stock.py

"""
INVENTORY (ADMIN / STAFF)

Mounted under /api/v1/admin/inventory/

Reads need inventory.view; receive and min-stock need inventory.edit;
absolute adjustments need inventory.adjust.
"""

from __future__ import annotations

from decimal import Decimal

from django.db.models import Count, F, Sum
from django.db.models.functions import Coalesce
from django.shortcuts import get_object_or_404
from django.utils import timezone
from drf_spectacular.utils import OpenApiParameter, extend_schema
from rest_framework.permissions import IsAuthenticated
from rest_framework.views import APIView

from backend.dates import date_range_from_request, day_bounds, parse_report_date, range_bounds
from backend.exports import csv_response
from backend.pagination import paginate
from backend.responses import domain_error_response, money_str, success_response
from inventory.models import InventoryLog, WasteLog
from inventory.serializers import (
    AdjustStockInputSerializer,
    InventoryLogSerializer,
    InventoryProductSerializer,
    MinStockInputSerializer,
    ReceiveStockInputSerializer,
    WasteLogSerializer,
)
from inventory.services import StockError, receive_stock, set_stock_level
from permissions.roles import (
    CAP_INVENTORY_ADJUST,
    CAP_INVENTORY_EDIT,
    CAP_INVENTORY_VIEW,
    HasCapability,
)
from products.filters import ProductFilter
from products.models import Product


class _InventoryView(APIView):
    permission_classes = [IsAuthenticated, HasCapability]
    required_capability = CAP_INVENTORY_VIEW


def _low_stock_qs():
    return Product.objects.filter(is_active=True, stock__gt=0, stock__lte=F("min_stock"))


def _out_of_stock_qs():
    return Product.objects.filter(is_active=True, stock=0)


class InventoryDashboardView(_InventoryView):
    @extend_schema(tags=["Inventory"], responses={200: dict})
    def get(self, request):
        today = timezone.localdate()
        month_start, _ = day_bounds(today.replace(day=1))

        totals = Product.objects.filter(is_active=True).aggregate(
            total_products=Count("id"),
            total_units=Coalesce(Sum("stock"), 0),
        )
        waste = WasteLog.objects.filter(created_at__gte=month_start).exclude(
            status=WasteLog.STATUS_REJECTED
        ).aggregate(
            quantity=Coalesce(Sum("quantity"), 0),
            value=Coalesce(Sum("total_cost"), Decimal("0.00")),
        )
        recent = InventoryLog.objects.select_related("product", "user", "order")[:10]

        return success_response(
            {
                "total_products": totals["total_products"],
                "total_stock_units": totals["total_units"],
                "low_stock_count": _low_stock_qs().count(),
                "out_of_stock_count": _out_of_stock_qs().count(),
                "waste_this_month": {
                    "quantity": waste["quantity"],
                    "value": money_str(waste["value"]),
                },
                "recent_movements": InventoryLogSerializer(recent, many=True).data,
            }
        )


class InventoryListView(_InventoryView):
    @extend_schema(
        tags=["Inventory"],
        parameters=[
            OpenApiParameter("category", str, OpenApiParameter.QUERY, required=False),
            OpenApiParameter("status", str, OpenApiParameter.QUERY, required=False, enum=["low", "out", "normal"]),
            OpenApiParameter("search", str, OpenApiParameter.QUERY, required=False),
        ],
        responses={200: InventoryProductSerializer(many=True)},
    )
    def get(self, request):
        qs = Product.objects.select_related("category").order_by("name")
        qs = ProductFilter(request.query_params, queryset=qs, request=request).qs
        return paginate(self, qs, InventoryProductSerializer)


class InventoryDetailView(_InventoryView):
    @extend_schema(tags=["Inventory"], responses={200: dict})
    def get(self, request, product_id):
        product = get_object_or_404(Product.objects.select_related("category"), pk=product_id)
        history = InventoryLog.objects.filter(product=product).select_related("user", "order", "product")[:20]
        waste = WasteLog.objects.filter(product=product).select_related("logged_by", "reviewed_by", "product")[:20]

        return success_response(
            {
                "product": InventoryProductSerializer(product).data,
                "history": InventoryLogSerializer(history, many=True).data,
                "waste_logs": WasteLogSerializer(waste, many=True).data,
            }
        )


class ReceiveStockView(_InventoryView):
    required_capability = CAP_INVENTORY_EDIT

    @extend_schema(tags=["Inventory"], request=ReceiveStockInputSerializer, responses={200: dict})
    def post(self, request, product_id):
        product = get_object_or_404(Product, pk=product_id)
        serializer = ReceiveStockInputSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        try:
            change = receive_stock(
                product=product,
                quantity=data["quantity"],
                user=request.user,
                supplier=data.get("supplier", ""),
                notes=data.get("notes", ""),
            )
        except StockError as exc:
            return domain_error_response(exc)

        return success_response(
            {"stock_before": change.stock_before, "stock_after": change.stock_after},
            message="Stock received successfully.",
        )


class AdjustStockView(_InventoryView):
    required_capability = CAP_INVENTORY_ADJUST

    @extend_schema(tags=["Inventory"], request=AdjustStockInputSerializer, responses={200: dict})
    def post(self, request, product_id):
        product = get_object_or_404(Product, pk=product_id)
        serializer = AdjustStockInputSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        try:
            change = set_stock_level(
                product=product,
                new_quantity=data["new_quantity"],
                reason=data["reason"],
                user=request.user,
            )
        except StockError as exc:
            return domain_error_response(exc)

        return success_response(
            {
                "stock_before": change.stock_before,
                "stock_after": change.stock_after,
                "difference": change.stock_after - change.stock_before,
            },
            message="Stock adjusted successfully.",
        )


class MinStockView(_InventoryView):
    required_capability = CAP_INVENTORY_EDIT

    @extend_schema(tags=["Inventory"], request=MinStockInputSerializer, responses={200: dict})
    def put(self, request, product_id):
        product = get_object_or_404(Product, pk=product_id)
        serializer = MinStockInputSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        product.min_stock = serializer.validated_data["min_stock"]
        product.save(update_fields=["min_stock", "updated_at"])

        return success_response(InventoryProductSerializer(product).data, message="Minimum stock updated.")


class InventoryHistoryView(_InventoryView):
    @extend_schema(
        tags=["Inventory"],
        parameters=[
            OpenApiParameter("product", str, OpenApiParameter.QUERY, required=False),
            OpenApiParameter("type", str, OpenApiParameter.QUERY, required=False),
            OpenApiParameter("user", str, OpenApiParameter.QUERY, required=False),
            OpenApiParameter("date_from", str, OpenApiParameter.QUERY, required=False),
            OpenApiParameter("date_to", str, OpenApiParameter.QUERY, required=False),
        ],
        responses={200: InventoryLogSerializer(many=True)},
    )
    def get(self, request):
        params = request.query_params
        qs = InventoryLog.objects.select_related("product", "user", "order")

        if params.get("product"):
            qs = qs.filter(product_id=params["product"])
        if params.get("type"):
            qs = qs.filter(type=params["type"])
        if params.get("user"):
            qs = qs.filter(user_id=params["user"])

        date_from = parse_report_date(params.get("date_from"), field="date_from")
        date_to = parse_report_date(params.get("date_to"), field="date_to")
        if date_from:
            qs = qs.filter(created_at__gte=day_bounds(date_from)[0])
        if date_to:
            qs = qs.filter(created_at__lt=day_bounds(date_to)[1])

        return paginate(self, qs, InventoryLogSerializer)


class LowStockView(_InventoryView):
    @extend_schema(tags=["Inventory"], responses={200: InventoryProductSerializer(many=True)})
    def get(self, request):
        qs = Product.objects.select_related("category").filter(
            is_active=True, stock__lte=F("min_stock")
        ).order_by("stock", "name")
        data = InventoryProductSerializer(qs, many=True).data
        return success_response(data, count=len(data))


class StockAlertsView(_InventoryView):
    @extend_schema(tags=["Inventory"], responses={200: dict})
    def get(self, request):
        out = _out_of_stock_qs().select_related("category").order_by("name")
        low = _low_stock_qs().select_related("category").order_by("stock", "name")
        return success_response(
            {
                "out_of_stock": InventoryProductSerializer(out, many=True).data,
                "low_stock": InventoryProductSerializer(low, many=True).data,
                "total_alerts": out.count() + low.count(),
            }
        )


class InventoryReportView(_InventoryView):
    @extend_schema(tags=["Inventory"], responses={200: dict})
    def get(self, request):
        date_from, date_to = date_range_from_request(request)
        start, end = range_bounds(date_from, date_to)

        movements = {
            row["type"]: {"total_quantity": row["total_quantity"], "count": row["count"]}
            for row in InventoryLog.objects.filter(created_at__gte=start, created_at__lt=end)
            .order_by()
            .values("type")
            .annotate(total_quantity=Sum("quantity"), count=Count("id"))
        }
        empty = {"total_quantity": 0, "count": 0}

        waste_by_reason = list(
            WasteLog.objects.filter(created_at__gte=start, created_at__lt=end)
            .exclude(status=WasteLog.STATUS_REJECTED)
            .values("reason")
            .annotate(total_quantity=Sum("quantity"), total_value=Sum("total_cost"), count=Count("id"))
            .order_by("reason")
        )

        by_category = list(
            Product.objects.filter(is_active=True)
            .values("category__name")
            .annotate(total_stock=Coalesce(Sum("stock"), 0), product_count=Count("id"))
            .order_by("category__name")
        )

        return success_response(
            {
                "period": {"date_from": date_from.isoformat(), "date_to": date_to.isoformat()},
                "current_stock": {
                    "by_category": [
                        {
                            "category": row["category__name"],
                            "total_stock": row["total_stock"],
                            "product_count": row["product_count"],
                        }
                        for row in by_category
                    ],
                    "low_stock_count": _low_stock_qs().count(),
                    "out_of_stock_count": _out_of_stock_qs().count(),
                },
                "movements": {
                    "additions": movements.get(InventoryLog.TYPE_ADDITION, empty),
                    "deductions": movements.get(InventoryLog.TYPE_DEDUCTION, empty),
                    "adjustments": movements.get(InventoryLog.TYPE_ADJUSTMENT, empty),
                    "waste": movements.get(InventoryLog.TYPE_WASTE, empty),
                },
                "waste": {
                    "by_reason": [
                        {
                            "reason": row["reason"],
                            "total_quantity": row["total_quantity"],
                            "total_value": money_str(row["total_value"]),
                            "count": row["count"],
                        }
                        for row in waste_by_reason
                    ],
                    "total_quantity": sum(row["total_quantity"] or 0 for row in waste_by_reason),
                    "total_value": money_str(sum((row["total_value"] or 0) for row in waste_by_reason)),
                },
            }
        )


class InventoryExportView(_InventoryView):
    @extend_schema(tags=["Inventory"], responses={(200, "text/csv"): str})
    def get(self, request):
        qs = Product.objects.select_related("category").order_by("category__name", "name")
        rows = (
            [
                p.sku,
                p.name,
                p.category.name,
                p.unit,
                p.stock,
                p.min_stock,
                p.stock_status,
                f"{p.price_aud:.2f}",
                money_str(p.price_aud * p.stock),
            ]
            for p in qs
        )
        return csv_response(
            "inventory",
            ["SKU", "Name", "Category", "Unit", "Stock", "Min stock", "Status", "Price", "Stock value"],
            rows,
        )
