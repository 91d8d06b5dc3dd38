# orders/views/customer.py

"""
CUSTOMER ORDERS

/customer/dashboard/               counts, total spent, recent orders
/customer/orders/                  own orders (?status=)
/customer/orders/{id}/             detail (another user's order -> 404)
/customer/orders/{id}/cancel/      POST, pending/confirmed only
/customer/orders/{id}/reorder/     POST, copy available lines to the cart
/customer/orders/{id}/invoice/     GET
/customer/orders/{id}/invoice/pdf/ GET, PDF download
"""

from __future__ import annotations

from decimal import Decimal

from django.db.models import Count, Sum
from django.db.models.functions import Coalesce
from django.shortcuts import get_object_or_404
from drf_spectacular.utils import OpenApiTypes, extend_schema
from rest_framework import status
from rest_framework.permissions import IsAuthenticated
from rest_framework.views import APIView

from backend.exports import pdf_response
from backend.pagination import paginate
from backend.responses import domain_error_response, error_response, money_str, success_response
from cart.services import reorder_into_cart
from orders.filters import OrderFilter
from orders.models import Invoice, Order
from orders.serializers import (
    CancelOrderSerializer,
    InvoiceSerializer,
    OrderDetailSerializer,
    OrderListSerializer,
)
from orders.services import OrderError, cancel_order, render_invoice_pdf


def _own_orders(user):
    return Order.objects.filter(user=user).prefetch_related("items", "payments")


def _own_order(user, order_id) -> Order:
    return get_object_or_404(
        Order.objects.filter(user=user).select_related("address", "delivery_zone").prefetch_related(
            "items", "status_history__changed_by", "payments"
        ),
        pk=order_id,
    )


class CustomerDashboardView(APIView):
    permission_classes = [IsAuthenticated]

    @extend_schema(tags=["Customer Orders"], responses={200: dict})
    def get(self, request):
        orders = Order.objects.filter(user=request.user)
        counts = {
            row["status"]: row["n"] for row in orders.order_by().values("status").annotate(n=Count("id"))
        }
        spent = orders.exclude(status__in=Order.NON_REVENUE_STATUSES).aggregate(
            total=Coalesce(Sum("total"), Decimal("0.00"))
        )["total"]
        active = orders.exclude(status__in=[Order.STATUS_DELIVERED, Order.STATUS_CANCELLED]).count()
        recent = _own_orders(request.user)[:5]

        return success_response(
            {
                "total_orders": sum(counts.values()),
                "active_orders": active,
                "orders_by_status": counts,
                "total_spent": money_str(spent),
                "recent_orders": OrderListSerializer(recent, many=True).data,
                "addresses_count": request.user.addresses.count(),
                "wishlist_count": request.user.wishlist_items.count(),
            }
        )


class CustomerOrderListView(APIView):
    permission_classes = [IsAuthenticated]

    @extend_schema(tags=["Customer Orders"], responses={200: OrderListSerializer(many=True)})
    def get(self, request):
        qs = OrderFilter(request.query_params, queryset=_own_orders(request.user), request=request).qs
        return paginate(self, qs, OrderListSerializer)


class CustomerOrderDetailView(APIView):
    permission_classes = [IsAuthenticated]

    @extend_schema(tags=["Customer Orders"], responses={200: OrderDetailSerializer})
    def get(self, request, order_id):
        return success_response(OrderDetailSerializer(_own_order(request.user, order_id)).data)


class CustomerCancelOrderView(APIView):
    permission_classes = [IsAuthenticated]

    @extend_schema(tags=["Customer Orders"], request=CancelOrderSerializer, responses={200: OrderDetailSerializer})
    def post(self, request, order_id):
        order = _own_order(request.user, order_id)
        serializer = CancelOrderSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        try:
            cancel_order(order, user=request.user, reason=serializer.validated_data["reason"])
        except OrderError as exc:
            return domain_error_response(exc)

        return success_response(
            OrderDetailSerializer(_own_order(request.user, order_id)).data,
            message="Order cancelled successfully.",
        )


class CustomerReorderView(APIView):
    permission_classes = [IsAuthenticated]

    @extend_schema(tags=["Customer Orders"], responses={200: dict})
    def post(self, request, order_id):
        order = _own_order(request.user, order_id)
        result = reorder_into_cart(request.user, order)
        if not result["added"]:
            return error_response(
                code="NOTHING_TO_REORDER",
                message="None of the items in this order are currently available.",
                http_status=status.HTTP_422_UNPROCESSABLE_ENTITY,
                skipped=result["skipped"],
            )
        return success_response(result, message="Items added to your cart.")


class CustomerInvoiceView(APIView):
    permission_classes = [IsAuthenticated]

    @extend_schema(tags=["Customer Orders"], responses={200: InvoiceSerializer})
    def get(self, request, order_id):
        order = _own_order(request.user, order_id)
        invoice = get_object_or_404(Invoice.objects.select_related("order__user"), order=order)
        data = InvoiceSerializer(invoice).data
        data["items"] = OrderDetailSerializer(order).data["items"]
        return success_response(data)


class CustomerInvoicePdfView(APIView):
    permission_classes = [IsAuthenticated]

    @extend_schema(tags=["Customer Orders"], responses={(200, "application/pdf"): OpenApiTypes.BINARY})
    def get(self, request, order_id):
        order = _own_order(request.user, order_id)
        invoice = get_object_or_404(Invoice.objects.select_related("order__user", "order__address"), order=order)
        return pdf_response(invoice.invoice_number, render_invoice_pdf(invoice))
