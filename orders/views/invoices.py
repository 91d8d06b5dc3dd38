# orders/views/invoices.py

"""
INVOICES (staff and admin)

/staff/invoices/                  list (?status=, ?search=)     orders.view
/staff/invoices/stats/            counts and amounts            orders.view
/staff/invoices/{id}/             detail with lines             orders.view
/staff/invoices/{id}/pdf/         PDF download                  orders.view
/admin/invoices/...               same, plus
/admin/invoices/{id}/status/      PUT manual status change      invoices.manage

Lists and stats first flip pending invoices past their due date to overdue.
"""

from __future__ import annotations

from django.db.models import Q
from drf_spectacular.utils import OpenApiParameter, OpenApiTypes, extend_schema
from rest_framework.decorators import action
from rest_framework.permissions import IsAuthenticated

from backend.exports import pdf_response
from backend.responses import domain_error_response, success_response
from backend.viewsets import EnvelopeReadOnlyModelViewSet
from orders.models import Invoice
from orders.serializers import InvoiceSerializer, InvoiceStatusSerializer, OrderItemSerializer
from orders.services import (
    InvoiceError,
    invoice_stats,
    mark_overdue_invoices,
    render_invoice_pdf,
    set_invoice_status,
)
from permissions.roles import CAP_INVOICES_MANAGE, CAP_ORDERS_VIEW, HasCapability


@extend_schema(tags=["Invoices"])
class StaffInvoiceViewSet(EnvelopeReadOnlyModelViewSet):
    serializer_class = InvoiceSerializer
    permission_classes = [IsAuthenticated, HasCapability]
    required_capability = CAP_ORDERS_VIEW

    def get_queryset(self):
        qs = Invoice.objects.select_related("order__user", "order__address").prefetch_related("order__items")
        if self.action != "list":
            return qs
        invoice_status = (self.request.query_params.get("status") or "").strip()
        if invoice_status:
            qs = qs.filter(status=invoice_status)
        search = (self.request.query_params.get("search") or "").strip()
        if search:
            qs = qs.filter(
                Q(invoice_number__icontains=search)
                | Q(order__order_number__icontains=search)
                | Q(order__user__email__icontains=search)
            )
        return qs

    @extend_schema(
        parameters=[
            OpenApiParameter("status", str, OpenApiParameter.QUERY, required=False),
            OpenApiParameter("search", str, OpenApiParameter.QUERY, required=False),
        ]
    )
    def list(self, request, *args, **kwargs):
        mark_overdue_invoices()
        return super().list(request, *args, **kwargs)

    def retrieve(self, request, *args, **kwargs):
        invoice = self.get_object()
        data = self.get_serializer(invoice).data
        data["items"] = OrderItemSerializer(invoice.order.items.all(), many=True).data
        return success_response(data)

    @extend_schema(responses={200: dict})
    @action(detail=False, methods=["get"], url_path="stats")
    def stats(self, request):
        mark_overdue_invoices()
        return success_response(invoice_stats())

    @extend_schema(responses={(200, "application/pdf"): OpenApiTypes.BINARY})
    @action(detail=True, methods=["get"], url_path="pdf")
    def pdf(self, request, pk=None):
        invoice = self.get_object()
        return pdf_response(invoice.invoice_number, render_invoice_pdf(invoice))


class AdminInvoiceViewSet(StaffInvoiceViewSet):
    @property
    def required_capability(self):
        if self.action == "change_status":
            return CAP_INVOICES_MANAGE
        return CAP_ORDERS_VIEW

    @extend_schema(request=InvoiceStatusSerializer, responses={200: InvoiceSerializer})
    @action(detail=True, methods=["put", "post"], url_path="status")
    def change_status(self, request, pk=None):
        invoice = self.get_object()
        serializer = InvoiceStatusSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        try:
            invoice = set_invoice_status(invoice, serializer.validated_data["status"], user=request.user)
        except InvoiceError as exc:
            return domain_error_response(exc)
        return success_response(InvoiceSerializer(invoice).data, message="Invoice status updated successfully.")
