# orders/views/admin.py

"""
ADMIN ORDER MANAGEMENT

/admin/dashboard/                 revenue, counts, customers, low stock
/admin/orders/                    list (status, date range, search, payment status)
/admin/orders/{id}/               detail / PATCH scheduling fields
/admin/orders/{id}/status/        transition                 orders.manage
/admin/orders/{id}/assign/        assign to staff            deliveries.assign
/admin/orders/{id}/refund/        refund via gateway         orders.refund
"""

from __future__ import annotations

import logging
from decimal import Decimal

from django.contrib.auth import get_user_model
from django.db.models import Count, F, Sum
from django.db.models.functions import Coalesce
from django.utils import timezone
from drf_spectacular.utils import extend_schema
from rest_framework import status
from rest_framework.decorators import action
from rest_framework.permissions import IsAuthenticated
from rest_framework.views import APIView

from backend.dates import day_bounds
from backend.responses import domain_error_response, money_str, success_response
from backend.viewsets import EnvelopeReadOnlyModelViewSet
from orders.filters import OrderFilter
from orders.models import Order
from orders.serializers import (
    AdminOrderUpdateSerializer,
    AssignOrderSerializer,
    OrderListSerializer,
    RefundSerializer,
    StaffOrderSerializer,
    StatusUpdateSerializer,
)
from orders.services import OrderError, assign_order, transition
from orders.views.staff import order_queryset
from payments.services import PaymentError
from payments.services.payment_flow import refund_order
from permissions.roles import (
    CAP_DELIVERIES_ASSIGN,
    CAP_ORDERS_MANAGE,
    CAP_ORDERS_REFUND,
    CAP_ORDERS_VIEW,
    CAP_REPORTS_VIEW,
    HasCapability,
)
from products.models import Product

logger = logging.getLogger(__name__)
User = get_user_model()


def revenue_orders():
    return Order.objects.exclude(status__in=Order.NON_REVENUE_STATUSES)


class AdminDashboardView(APIView):
    permission_classes = [IsAuthenticated, HasCapability]
    required_capability = CAP_REPORTS_VIEW

    @extend_schema(tags=["Admin Orders"], responses={200: dict})
    def get(self, request):
        today = timezone.localdate()
        today_start, today_end = day_bounds(today)
        month_start, _ = day_bounds(today.replace(day=1))

        def revenue(qs):
            return money_str(qs.aggregate(v=Coalesce(Sum("total"), Decimal("0.00")))["v"])

        by_status = {
            row["status"]: row["n"]
            for row in Order.objects.order_by().values("status").annotate(n=Count("id"))
        }

        recent = order_queryset()[:10]

        return success_response(
            {
                "today_revenue": revenue(revenue_orders().filter(created_at__gte=today_start, created_at__lt=today_end)),
                "month_revenue": revenue(revenue_orders().filter(created_at__gte=month_start)),
                "today_orders": Order.objects.filter(created_at__gte=today_start, created_at__lt=today_end).count(),
                "orders_by_status": by_status,
                "pending_orders": by_status.get(Order.STATUS_PENDING, 0),
                "total_customers": User.objects.filter(role=User.ROLE_CUSTOMER).count(),
                "new_customers_this_month": User.objects.filter(
                    role=User.ROLE_CUSTOMER, created_at__gte=month_start
                ).count(),
                "low_stock_count": Product.objects.filter(is_active=True, stock__lte=F("min_stock")).count(),
                "recent_orders": OrderListSerializer(recent, many=True).data,
            }
        )


@extend_schema(tags=["Admin Orders"])
class AdminOrderViewSet(EnvelopeReadOnlyModelViewSet):
    permission_classes = [IsAuthenticated, HasCapability]
    filterset_class = OrderFilter

    ACTION_CAPABILITIES = {
        "partial_update": CAP_ORDERS_MANAGE,
        "change_status": CAP_ORDERS_MANAGE,
        "assign": CAP_DELIVERIES_ASSIGN,
        "refund": CAP_ORDERS_REFUND,
    }

    @property
    def required_capability(self):
        return self.ACTION_CAPABILITIES.get(self.action, CAP_ORDERS_VIEW)

    def get_queryset(self):
        return order_queryset()

    def get_serializer_class(self):
        if self.action == "list":
            return OrderListSerializer
        return StaffOrderSerializer

    def _detail(self, order, *, message=None):
        return success_response(StaffOrderSerializer(self.get_queryset().get(pk=order.pk)).data, message=message)

    @extend_schema(request=AdminOrderUpdateSerializer, responses={200: StaffOrderSerializer})
    def partial_update(self, request, *args, **kwargs):
        order = self.get_object()
        serializer = AdminOrderUpdateSerializer(order, data=request.data, partial=True)
        serializer.is_valid(raise_exception=True)
        serializer.save()
        return self._detail(order, message="Order updated successfully.")

    @extend_schema(request=StatusUpdateSerializer, responses={200: StaffOrderSerializer})
    @action(detail=True, methods=["post", "put"], url_path="status")
    def change_status(self, request, pk=None):
        order = self.get_object()
        serializer = StatusUpdateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        try:
            transition(
                order,
                serializer.validated_data["status"],
                user=request.user,
                notes=serializer.validated_data["notes"],
            )
        except OrderError as exc:
            return domain_error_response(exc)
        return self._detail(order, message="Order status updated successfully.")

    @extend_schema(request=AssignOrderSerializer, responses={200: StaffOrderSerializer})
    @action(detail=True, methods=["post"], url_path="assign")
    def assign(self, request, pk=None):
        order = self.get_object()
        serializer = AssignOrderSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        assignee = User.objects.filter(pk=serializer.validated_data["user_id"]).first()
        try:
            assign_order(order, assignee, user=request.user)
        except OrderError as exc:
            return domain_error_response(exc)
        return self._detail(order, message="Order assigned successfully.")

    @extend_schema(request=RefundSerializer, responses={200: StaffOrderSerializer})
    @action(detail=True, methods=["post"], url_path="refund")
    def refund(self, request, pk=None):
        order = self.get_object()
        serializer = RefundSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        try:
            payment = refund_order(order, reason=data["reason"], amount=data.get("amount"), user=request.user)
        except PaymentError as exc:
            http_status = (
                status.HTTP_502_BAD_GATEWAY if exc.code == "GATEWAY_ERROR" else status.HTTP_422_UNPROCESSABLE_ENTITY
            )
            return domain_error_response(exc, http_status=http_status)
        except OrderError as exc:
            return domain_error_response(exc)

        logger.info(
            "Order refunded",
            extra={"order_id": str(order.pk), "amount": str(payment.refunded_amount), "by": str(request.user.pk)},
        )
        return self._detail(order, message=f"Refund of ${payment.refunded_amount:.2f} processed.")
