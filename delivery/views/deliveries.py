# delivery/views/deliveries.py

"""
DELIVERY OPERATIONS

/admin/deliveries/dashboard/          today's numbers
/admin/deliveries/                    delivery orders (status, date, assigned_to, search)
/admin/deliveries/{id}/               detail with proof
/admin/deliveries/{id}/assign/        deliveries.assign
/admin/deliveries/{id}/pod/           proof of delivery (GET)
/admin/deliveries/{id}/issue/         report / resolve an issue
/admin/deliveries/report/             performance for a date range
/admin/deliveries/export/             CSV

/staff/orders/{id}/pod/               GET proof, POST capture (multipart)
"""

from __future__ import annotations

import logging

from django.contrib.auth import get_user_model
from django.shortcuts import get_object_or_404
from django.utils import timezone
from drf_spectacular.utils import extend_schema
from rest_framework import status
from rest_framework.decorators import action
from rest_framework.parsers import FormParser, JSONParser, MultiPartParser
from rest_framework.permissions import IsAuthenticated
from rest_framework.views import APIView

from backend.dates import date_range_from_request
from backend.exports import csv_response
from backend.responses import domain_error_response, error_response, success_response
from backend.viewsets import EnvelopeReadOnlyModelViewSet
from delivery.models import DeliveryProof
from delivery.serializers import DeliveryIssueSerializer, DeliveryProofSerializer, ProofCaptureSerializer
from delivery.services import DeliveryError, capture_proof, dashboard, delivered_in_range, performance_report
from orders.filters import OrderFilter
from orders.models import Order
from orders.serializers import AssignOrderSerializer, OrderListSerializer, StaffOrderSerializer
from orders.services import OrderError, assign_order, report_delivery_issue, resolve_delivery_issue
from orders.views.staff import order_queryset
from permissions.roles import CAP_DELIVERIES_ASSIGN, CAP_DELIVERIES_MANAGE, HasCapability

logger = logging.getLogger(__name__)
User = get_user_model()


def delivery_queryset():
    return order_queryset().filter(delivery_method=Order.METHOD_DELIVERY).select_related("delivery_proof")


def _proof_not_found():
    return error_response(
        code="NOT_FOUND", message="No proof of delivery for this order.", http_status=status.HTTP_404_NOT_FOUND
    )


@extend_schema(tags=["Admin Delivery"])
class AdminDeliveryViewSet(EnvelopeReadOnlyModelViewSet):
    permission_classes = [IsAuthenticated, HasCapability]
    filterset_class = OrderFilter

    @property
    def required_capability(self):
        if self.action == "assign":
            return CAP_DELIVERIES_ASSIGN
        return CAP_DELIVERIES_MANAGE

    def get_queryset(self):
        qs = delivery_queryset().order_by("scheduled_date", "scheduled_slot", "-created_at")
        assigned_to = (self.request.query_params.get("assigned_to") or "").strip()
        if assigned_to == "none":
            qs = qs.filter(assigned_to__isnull=True)
        elif assigned_to:
            qs = qs.filter(assigned_to_id=assigned_to)
        return qs

    def get_serializer_class(self):
        if self.action == "list":
            return OrderListSerializer
        return StaffOrderSerializer

    def _detail(self, order, *, message=None):
        order = self.get_queryset().get(pk=order.pk)
        data = StaffOrderSerializer(order).data
        proof = getattr(order, "delivery_proof", None)
        data["delivery_proof"] = (
            DeliveryProofSerializer(proof, context={"request": self.request}).data if proof else None
        )
        return success_response(data, message=message)

    def retrieve(self, request, *args, **kwargs):
        return self._detail(self.get_object())

    @extend_schema(responses={200: dict})
    @action(detail=False, methods=["get"], url_path="dashboard")
    def dashboard(self, request):
        return success_response(dashboard())

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
        return self._detail(order, message="Delivery assigned successfully.")

    @extend_schema(responses={200: DeliveryProofSerializer})
    @action(detail=True, methods=["get"], url_path="pod")
    def pod(self, request, pk=None):
        order = self.get_object()
        proof = DeliveryProof.objects.select_related("captured_by").filter(order=order).first()
        if proof is None:
            return _proof_not_found()
        return success_response(DeliveryProofSerializer(proof, context={"request": request}).data)

    @extend_schema(request=DeliveryIssueSerializer, responses={200: StaffOrderSerializer})
    @action(detail=True, methods=["post"], url_path="issue")
    def issue(self, request, pk=None):
        order = self.get_object()
        serializer = DeliveryIssueSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        if data["resolved"]:
            resolve_delivery_issue(order, user=request.user, resolution=data["resolution"])
            return self._detail(order, message="Delivery issue resolved.")

        report_delivery_issue(order, data["issue"], user=request.user)
        return self._detail(order, message="Delivery issue reported.")

    @extend_schema(responses={200: dict})
    @action(detail=False, methods=["get"], url_path="report")
    def report(self, request):
        date_from, date_to = date_range_from_request(request)
        return success_response(performance_report(date_from, date_to))

    @action(detail=False, methods=["get"], url_path="export")
    def export(self, request):
        date_from, date_to = date_range_from_request(request)
        orders = delivered_in_range(date_from, date_to).select_related("user", "address")

        def rows():
            for order in orders:
                yield [
                    order.order_number,
                    order.user.full_name,
                    order.address.full_address if order.address_id else "",
                    order.delivery_zone.name if order.delivery_zone_id else "",
                    order.scheduled_date.isoformat() if order.scheduled_date else "",
                    order.scheduled_slot,
                    timezone.localtime(order.delivered_at).strftime("%Y-%m-%d %H:%M") if order.delivered_at else "",
                    order.assigned_to.full_name if order.assigned_to_id else "",
                    f"{order.delivery_fee:.2f}",
                    f"{order.total:.2f}",
                ]

        return csv_response(
            "deliveries",
            [
                "Order",
                "Customer",
                "Address",
                "Zone",
                "Scheduled date",
                "Slot",
                "Delivered at",
                "Driver",
                "Delivery fee",
                "Total",
            ],
            rows(),
        )


class StaffProofOfDeliveryView(APIView):
    permission_classes = [IsAuthenticated, HasCapability]
    required_capability = CAP_DELIVERIES_MANAGE
    parser_classes = [MultiPartParser, FormParser, JSONParser]

    @extend_schema(tags=["Staff Orders"], responses={200: DeliveryProofSerializer})
    def get(self, request, order_id):
        order = get_object_or_404(Order, pk=order_id)
        proof = DeliveryProof.objects.select_related("captured_by").filter(order=order).first()
        if proof is None:
            return _proof_not_found()
        return success_response(DeliveryProofSerializer(proof, context={"request": request}).data)

    @extend_schema(tags=["Staff Orders"], request=ProofCaptureSerializer, responses={200: DeliveryProofSerializer})
    def post(self, request, order_id):
        order = get_object_or_404(Order, pk=order_id)
        serializer = ProofCaptureSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        try:
            proof = capture_proof(
                order,
                user=request.user,
                photo=data.get("photo"),
                signature_data=data["signature_data"],
                recipient_name=data["recipient_name"],
                notes=data["notes"],
                left_at_door=data["left_at_door"],
            )
        except (DeliveryError, OrderError) as exc:
            return domain_error_response(exc)

        return success_response(
            DeliveryProofSerializer(proof, context={"request": request}).data,
            message="Delivery completed.",
        )
