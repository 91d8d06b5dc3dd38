# notifications/views/__init__.py

from __future__ import annotations

from django.utils import timezone
from drf_spectacular.utils import OpenApiParameter, extend_schema
from rest_framework import mixins, viewsets
from rest_framework.decorators import action
from rest_framework.permissions import IsAuthenticated

from backend.responses import success_response
from notifications.models import Notification
from notifications.serializers import NotificationSerializer


@extend_schema(tags=["Notifications"])
class NotificationViewSet(
    mixins.ListModelMixin,
    mixins.DestroyModelMixin,
    viewsets.GenericViewSet,
):
    """
    /notifications/

    Owner-scoped: someone else's notification is a 404.
    """

    serializer_class = NotificationSerializer
    permission_classes = [IsAuthenticated]

    def get_queryset(self):
        qs = Notification.objects.filter(user=self.request.user)
        if self.action == "list":
            unread = (self.request.query_params.get("unread") or "").strip().lower()
            if unread in ("1", "true", "yes"):
                qs = qs.filter(read_at__isnull=True)
        return qs

    @extend_schema(
        parameters=[OpenApiParameter("unread", bool, OpenApiParameter.QUERY, required=False)]
    )
    def list(self, request, *args, **kwargs):
        page = self.paginate_queryset(self.get_queryset())
        data = self.get_serializer(page, many=True).data
        unread_count = Notification.objects.filter(user=request.user, read_at__isnull=True).count()
        return self.paginator.get_paginated_response(data, unread_count=unread_count)

    def destroy(self, request, *args, **kwargs):
        self.get_object().delete()
        return success_response(message="Notification deleted.")

    @action(detail=False, methods=["get"], url_path="unread-count")
    def unread_count(self, request):
        count = Notification.objects.filter(user=request.user, read_at__isnull=True).count()
        return success_response({"count": count})

    @action(detail=True, methods=["post"], url_path="read")
    def mark_read(self, request, pk=None):
        notification = self.get_object()
        notification.mark_read()
        return success_response(NotificationSerializer(notification).data)

    @action(detail=False, methods=["post"], url_path="read-all")
    def mark_all_read(self, request):
        updated = Notification.objects.filter(user=request.user, read_at__isnull=True).update(
            read_at=timezone.now()
        )
        return success_response({"updated": updated}, message="All notifications marked as read.")
