# support/views/admin.py

"""
ADMIN SUPPORT DESK (tickets.manage)

/admin/tickets/                 list (?status=, ?priority=, ?search=)
/admin/tickets/stats/           counts by status and open priority
/admin/tickets/{id}/            detail with replies, DELETE
/admin/tickets/{id}/status/     PUT
/admin/tickets/{id}/reply/      POST (closed -> 422)
"""

from __future__ import annotations

import logging

from django.db.models import Count, Q
from drf_spectacular.utils import OpenApiParameter, extend_schema
from rest_framework import status
from rest_framework.decorators import action
from rest_framework.permissions import IsAuthenticated

from backend.responses import domain_error_response, success_response
from backend.viewsets import EnvelopeReadOnlyModelViewSet
from permissions.roles import CAP_TICKETS_MANAGE, HasCapability
from support.models import SupportTicket
from support.serializers import (
    SupportTicketDetailSerializer,
    SupportTicketSerializer,
    TicketReplyCreateSerializer,
    TicketStatusSerializer,
)
from support.services import TicketError, add_reply, set_ticket_status, ticket_stats

logger = logging.getLogger(__name__)


@extend_schema(tags=["Support"])
class AdminTicketViewSet(EnvelopeReadOnlyModelViewSet):
    permission_classes = [IsAuthenticated, HasCapability]
    required_capability = CAP_TICKETS_MANAGE

    def get_queryset(self):
        qs = (
            SupportTicket.objects.select_related("user", "order")
            .prefetch_related("replies__user")
            .annotate(reply_count=Count("replies"))
        )
        if self.action != "list":
            return qs
        params = self.request.query_params
        for field in ("status", "priority"):
            value = (params.get(field) or "").strip()
            if value:
                qs = qs.filter(**{field: value})
        search = (params.get("search") or "").strip()
        if search:
            qs = qs.filter(
                Q(subject__icontains=search) | Q(user__email__icontains=search) | Q(message__icontains=search)
            )
        return qs

    def get_serializer_class(self):
        if self.action == "list":
            return SupportTicketSerializer
        return SupportTicketDetailSerializer

    def _detail(self, ticket, *, message=None, http_status=status.HTTP_200_OK):
        return success_response(
            SupportTicketDetailSerializer(self.get_queryset().get(pk=ticket.pk)).data,
            message=message,
            http_status=http_status,
        )

    @extend_schema(
        parameters=[
            OpenApiParameter("status", str, OpenApiParameter.QUERY, required=False),
            OpenApiParameter("priority", str, OpenApiParameter.QUERY, required=False),
            OpenApiParameter("search", str, OpenApiParameter.QUERY, required=False),
        ]
    )
    def list(self, request, *args, **kwargs):
        return super().list(request, *args, **kwargs)

    def destroy(self, request, *args, **kwargs):
        ticket = self.get_object()
        logger.info("Support ticket deleted", extra={"ticket_id": str(ticket.pk), "by": str(request.user.pk)})
        ticket.delete()
        return success_response(message="Support ticket deleted successfully.")

    @extend_schema(responses={200: dict})
    @action(detail=False, methods=["get"], url_path="stats")
    def stats(self, request):
        return success_response(ticket_stats())

    @extend_schema(request=TicketStatusSerializer, responses={200: SupportTicketDetailSerializer})
    @action(detail=True, methods=["put", "post"], url_path="status")
    def change_status(self, request, pk=None):
        ticket = self.get_object()
        serializer = TicketStatusSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        set_ticket_status(ticket, serializer.validated_data["status"], user=request.user)
        return self._detail(ticket, message="Ticket status updated successfully.")

    @extend_schema(request=TicketReplyCreateSerializer, responses={201: SupportTicketDetailSerializer})
    @action(detail=True, methods=["post"], url_path="reply")
    def reply(self, request, pk=None):
        ticket = self.get_object()
        serializer = TicketReplyCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        try:
            add_reply(ticket, request.user, serializer.validated_data["message"])
        except TicketError as exc:
            return domain_error_response(exc)
        return self._detail(ticket, message="Reply added successfully.", http_status=status.HTTP_201_CREATED)
