# inventory/views/waste.py

"""
WASTE MANAGEMENT

GET  /admin/inventory/waste/               inventory.view (filters + summary)
POST /admin/inventory/waste/               waste.log      (stock leaves immediately)
POST /admin/inventory/waste/{id}/review/   waste.approve  (reject puts stock back)
"""

from __future__ import annotations

from decimal import Decimal

from django.db.models import Count, Sum
from django.db.models.functions import Coalesce
from django.shortcuts import get_object_or_404
from drf_spectacular.utils import OpenApiParameter, extend_schema
from rest_framework import status
from rest_framework.permissions import IsAuthenticated
from rest_framework.views import APIView

from backend.dates import day_bounds, parse_report_date
from backend.pagination import paginate
from backend.responses import domain_error_response, money_str, success_response
from inventory.models import WasteLog
from inventory.serializers import WasteInputSerializer, WasteLogSerializer, WasteReviewInputSerializer
from inventory.services import StockError, WasteAlreadyReviewedError, log_waste, review_waste
from permissions.roles import (
    CAP_INVENTORY_VIEW,
    CAP_WASTE_APPROVE,
    CAP_WASTE_LOG,
    HasCapability,
)


class WasteListCreateView(APIView):
    permission_classes = [IsAuthenticated, HasCapability]

    @property
    def required_capability(self):
        return CAP_WASTE_LOG if self.request.method == "POST" else CAP_INVENTORY_VIEW

    @extend_schema(
        tags=["Inventory"],
        parameters=[
            OpenApiParameter("status", str, OpenApiParameter.QUERY, required=False),
            OpenApiParameter("reason", str, OpenApiParameter.QUERY, required=False),
            OpenApiParameter("date_from", str, OpenApiParameter.QUERY, required=False),
            OpenApiParameter("date_to", str, OpenApiParameter.QUERY, required=False),
        ],
        responses={200: WasteLogSerializer(many=True)},
    )
    def get(self, request):
        params = request.query_params
        qs = WasteLog.objects.select_related("product", "logged_by", "reviewed_by")

        if params.get("status"):
            qs = qs.filter(status=params["status"])
        if params.get("reason"):
            qs = qs.filter(reason=params["reason"])

        date_from = parse_report_date(params.get("date_from"), field="date_from")
        date_to = parse_report_date(params.get("date_to"), field="date_to")
        if date_from:
            qs = qs.filter(created_at__gte=day_bounds(date_from)[0])
        if date_to:
            qs = qs.filter(created_at__lt=day_bounds(date_to)[1])

        summary = qs.aggregate(
            total_entries=Count("id"),
            total_quantity=Coalesce(Sum("quantity"), 0),
            total_value=Coalesce(Sum("total_cost"), Decimal("0.00")),
        )
        summary["total_value"] = money_str(summary["total_value"])
        summary["pending_count"] = qs.filter(status=WasteLog.STATUS_PENDING).count()

        return paginate(self, qs, WasteLogSerializer, summary=summary)

    @extend_schema(tags=["Inventory"], request=WasteInputSerializer, responses={201: WasteLogSerializer})
    def post(self, request):
        serializer = WasteInputSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        try:
            waste = log_waste(
                product=data["product"],
                quantity=data["quantity"],
                reason=data["reason"],
                notes=data.get("notes", ""),
                user=request.user,
            )
        except StockError as exc:
            return domain_error_response(exc)

        return success_response(
            WasteLogSerializer(waste).data,
            message="Waste logged successfully.",
            http_status=status.HTTP_201_CREATED,
        )


class WasteReviewView(APIView):
    permission_classes = [IsAuthenticated, HasCapability]
    required_capability = CAP_WASTE_APPROVE

    @extend_schema(tags=["Inventory"], request=WasteReviewInputSerializer, responses={200: WasteLogSerializer})
    def post(self, request, waste_id):
        waste = get_object_or_404(WasteLog, pk=waste_id)
        serializer = WasteReviewInputSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        try:
            waste = review_waste(
                waste_log=waste,
                approved=serializer.validated_data["approved"],
                reviewer=request.user,
                notes=serializer.validated_data.get("notes", ""),
            )
        except WasteAlreadyReviewedError as exc:
            return domain_error_response(exc, http_status=status.HTTP_400_BAD_REQUEST)
        except StockError as exc:
            return domain_error_response(exc)

        message = "Waste log approved." if waste.status == WasteLog.STATUS_APPROVED else "Waste log rejected."
        return success_response(WasteLogSerializer(waste).data, message=message)
