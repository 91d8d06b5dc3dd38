# support/views/customer.py

"""
CUSTOMER SUPPORT TICKETS

/customer/tickets/              GET own tickets (?status=), POST open one
/customer/tickets/{id}/         GET detail with replies, DELETE cancels
/customer/tickets/{id}/reply/   POST (closed -> 422, resolved reopens)

Customer accounts only; someone else's ticket or order is a 404.
"""

from __future__ import annotations

from django.db.models import Count
from django.shortcuts import get_object_or_404
from drf_spectacular.utils import extend_schema
from rest_framework import status
from rest_framework.permissions import IsAuthenticated
from rest_framework.views import APIView

from backend.pagination import paginate
from backend.responses import domain_error_response, success_response
from orders.models import Order
from permissions.roles import IsCustomer
from support.models import SupportTicket
from support.serializers import (
    SupportTicketDetailSerializer,
    SupportTicketSerializer,
    TicketCreateSerializer,
    TicketReplyCreateSerializer,
)
from support.services import TicketError, add_reply, cancel_ticket, open_ticket


def _own_tickets(user):
    return (
        SupportTicket.objects.filter(user=user)
        .select_related("order", "user")
        .annotate(reply_count=Count("replies"))
    )


def _own_ticket(user, ticket_id) -> SupportTicket:
    return get_object_or_404(_own_tickets(user).prefetch_related("replies__user"), pk=ticket_id)


class CustomerTicketView(APIView):
    permission_classes = [IsAuthenticated, IsCustomer]


class CustomerTicketListView(CustomerTicketView):
    @extend_schema(tags=["Support"], responses={200: SupportTicketSerializer(many=True)})
    def get(self, request):
        qs = _own_tickets(request.user)
        ticket_status = (request.query_params.get("status") or "").strip()
        if ticket_status:
            qs = qs.filter(status=ticket_status)
        return paginate(self, qs, SupportTicketSerializer)

    @extend_schema(tags=["Support"], request=TicketCreateSerializer, responses={201: SupportTicketDetailSerializer})
    def post(self, request):
        serializer = TicketCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        order = None
        if data.get("order_id"):
            order = get_object_or_404(Order, pk=data["order_id"], user=request.user)

        ticket = open_ticket(
            request.user,
            subject=data["subject"],
            message=data["message"],
            order=order,
            priority=data["priority"],
        )
        return success_response(
            SupportTicketDetailSerializer(_own_ticket(request.user, ticket.pk)).data,
            message="Support ticket created successfully.",
            http_status=status.HTTP_201_CREATED,
        )


class CustomerTicketDetailView(CustomerTicketView):
    @extend_schema(tags=["Support"], responses={200: SupportTicketDetailSerializer})
    def get(self, request, ticket_id):
        return success_response(SupportTicketDetailSerializer(_own_ticket(request.user, ticket_id)).data)

    @extend_schema(tags=["Support"], responses={200: SupportTicketDetailSerializer})
    def delete(self, request, ticket_id):
        ticket = _own_ticket(request.user, ticket_id)
        try:
            cancel_ticket(ticket, request.user)
        except TicketError as exc:
            return domain_error_response(exc)
        return success_response(
            SupportTicketDetailSerializer(_own_ticket(request.user, ticket_id)).data,
            message="Support ticket cancelled.",
        )


class CustomerTicketReplyView(CustomerTicketView):
    @extend_schema(tags=["Support"], request=TicketReplyCreateSerializer, responses={201: SupportTicketDetailSerializer})
    def post(self, request, ticket_id):
        ticket = _own_ticket(request.user, ticket_id)
        serializer = TicketReplyCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        try:
            add_reply(ticket, request.user, serializer.validated_data["message"])
        except TicketError as exc:
            return domain_error_response(exc)
        return success_response(
            SupportTicketDetailSerializer(_own_ticket(request.user, ticket_id)).data,
            message="Reply added successfully.",
            http_status=status.HTTP_201_CREATED,
        )
