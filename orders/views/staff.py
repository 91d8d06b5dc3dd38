# orders/views/staff.py

"""
STAFF ORDER QUEUE

/staff/dashboard/                       today's workload
/staff/orders/                          queue (status, date, assigned_to_me, search)
/staff/orders/{id}/                     detail
/staff/orders/{id}/status/              transition
/staff/orders/{id}/notes/               append a staff note
/staff/orders/{id}/out-for-delivery/    ready -> out_for_delivery
/staff/orders/{id}/picked-up/           pickup orders: ready -> delivered
/staff/deliveries/today/
/staff/pickups/today/

Reads need orders.view, changes orders.manage.
"""

from __future__ import annotations

from django.db.models import Count
from django.shortcuts import get_object_or_404
from django.utils import timezone
from drf_spectacular.utils import extend_schema
from rest_framework.permissions import IsAuthenticated
from rest_framework.views import APIView

from backend.pagination import paginate
from backend.responses import domain_error_response, success_response
from orders.filters import OrderFilter
from orders.models import Order
from orders.serializers import (
    OrderListSerializer,
    StaffNoteSerializer,
    StaffOrderSerializer,
    StatusUpdateSerializer,
)
from orders.services import (
    OrderError,
    add_staff_note,
    mark_out_for_delivery,
    mark_picked_up,
    transition,
)
from permissions.roles import CAP_ORDERS_MANAGE, CAP_ORDERS_VIEW, HasCapability

ACTIVE_STATUSES = [
    Order.STATUS_PENDING,
    Order.STATUS_CONFIRMED,
    Order.STATUS_PROCESSING,
    Order.STATUS_READY,
    Order.STATUS_OUT_FOR_DELIVERY,
]


def order_queryset():
    return Order.objects.select_related("user", "address", "delivery_zone", "assigned_to").prefetch_related(
        "items", "payments", "status_history__changed_by"
    )


def get_order(order_id) -> Order:
    return get_object_or_404(order_queryset(), pk=order_id)


def staff_order_response(order_id, *, message: str | None = None):
    return success_response(StaffOrderSerializer(get_order(order_id)).data, message=message)


class StaffOrderView(APIView):
    """GET needs orders.view; anything else orders.manage."""

    permission_classes = [IsAuthenticated, HasCapability]

    @property
    def required_capability(self):
        if self.request.method in ("GET", "HEAD", "OPTIONS"):
            return CAP_ORDERS_VIEW
        return CAP_ORDERS_MANAGE


class StaffDashboardView(StaffOrderView):
    @extend_schema(tags=["Staff Orders"], responses={200: dict})
    def get(self, request):
        today = timezone.localdate()
        active = Order.objects.filter(status__in=ACTIVE_STATUSES)
        by_status = {
            row["status"]: row["n"] for row in active.order_by().values("status").annotate(n=Count("id"))
        }
        mine = active.filter(assigned_to=request.user)

        return success_response(
            {
                "orders_by_status": by_status,
                "pending_orders": by_status.get(Order.STATUS_PENDING, 0),
                "todays_deliveries": active.filter(
                    delivery_method=Order.METHOD_DELIVERY, scheduled_date=today
                ).count(),
                "todays_pickups": active.filter(delivery_method=Order.METHOD_PICKUP, scheduled_date=today).count(),
                "assigned_to_me": mine.count(),
                "my_queue": OrderListSerializer(mine.prefetch_related("items", "payments")[:10], many=True).data,
            }
        )


class StaffOrderListView(StaffOrderView):
    @extend_schema(tags=["Staff Orders"], responses={200: OrderListSerializer(many=True)})
    def get(self, request):
        qs = OrderFilter(request.query_params, queryset=order_queryset(), request=request).qs
        return paginate(self, qs, OrderListSerializer)


class StaffOrderDetailView(StaffOrderView):
    @extend_schema(tags=["Staff Orders"], responses={200: StaffOrderSerializer})
    def get(self, request, order_id):
        return staff_order_response(order_id)


class OrderStatusView(StaffOrderView):
    """Shared by staff and admin routes."""

    @extend_schema(tags=["Staff Orders"], request=StatusUpdateSerializer, responses={200: StaffOrderSerializer})
    def post(self, request, order_id):
        order = get_order(order_id)
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

        return staff_order_response(order_id, message="Order status updated successfully.")

    put = post
    patch = post


class StaffOrderNoteView(StaffOrderView):
    @extend_schema(tags=["Staff Orders"], request=StaffNoteSerializer, responses={200: StaffOrderSerializer})
    def post(self, request, order_id):
        order = get_order(order_id)
        serializer = StaffNoteSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        add_staff_note(order, serializer.validated_data["note"], user=request.user)
        return staff_order_response(order_id, message="Note added.")


class StaffOutForDeliveryView(StaffOrderView):
    @extend_schema(tags=["Staff Orders"], request=None, responses={200: StaffOrderSerializer})
    def post(self, request, order_id):
        try:
            mark_out_for_delivery(get_order(order_id), user=request.user)
        except OrderError as exc:
            return domain_error_response(exc)
        return staff_order_response(order_id, message="Order is out for delivery.")


class StaffPickedUpView(StaffOrderView):
    @extend_schema(tags=["Staff Orders"], request=None, responses={200: StaffOrderSerializer})
    def post(self, request, order_id):
        try:
            mark_picked_up(get_order(order_id), user=request.user)
        except OrderError as exc:
            return domain_error_response(exc)
        return staff_order_response(order_id, message="Order marked as picked up.")


class _TodayView(StaffOrderView):
    delivery_method = Order.METHOD_DELIVERY

    @extend_schema(tags=["Staff Orders"], responses={200: OrderListSerializer(many=True)})
    def get(self, request):
        qs = order_queryset().filter(
            delivery_method=self.delivery_method,
            scheduled_date=timezone.localdate(),
        ).exclude(status=Order.STATUS_CANCELLED).order_by("scheduled_slot", "created_at")
        return success_response(StaffOrderSerializer(qs, many=True).data, count=qs.count())


class StaffTodayDeliveriesView(_TodayView):
    delivery_method = Order.METHOD_DELIVERY


class StaffTodayPickupsView(_TodayView):
    delivery_method = Order.METHOD_PICKUP
