# users/views/admin.py

"""
ADMIN USER MANAGEMENT

/admin/customers/  list, retrieve, update, status
/admin/staff/      list, create, retrieve, update, status, delete (deactivates)

Rules:
- Capability: users.manage
- Nobody changes their own status.
"""

from __future__ import annotations

import logging

from django.contrib.auth import get_user_model
from django.db.models import Count, Q
from drf_spectacular.utils import OpenApiParameter, extend_schema
from rest_framework import status
from rest_framework.decorators import action
from rest_framework.permissions import IsAuthenticated

from backend.responses import error_response, success_response
from backend.viewsets import EnvelopeModelViewSet
from permissions.roles import CAP_USERS_MANAGE, HasCapability
from users.serializers import AdminUserSerializer, UserStatusSerializer

logger = logging.getLogger(__name__)

User = get_user_model()


class _AdminUserViewSet(EnvelopeModelViewSet):
    serializer_class = AdminUserSerializer
    permission_classes = [IsAuthenticated, HasCapability]
    required_capability = CAP_USERS_MANAGE
    roles: tuple[str, ...] = ()

    def get_queryset(self):
        qs = User.objects.filter(role__in=self.roles).annotate(order_count=Count("orders"))

        params = self.request.query_params
        search = (params.get("search") or "").strip()
        if search:
            qs = qs.filter(
                Q(email__icontains=search)
                | Q(first_name__icontains=search)
                | Q(last_name__icontains=search)
                | Q(phone__icontains=search)
            )

        status_filter = (params.get("status") or "").strip()
        if status_filter:
            qs = qs.filter(status=status_filter)

        return qs.order_by("-created_at")

    @extend_schema(request=UserStatusSerializer, responses={200: AdminUserSerializer})
    @action(detail=True, methods=["post", "put"], url_path="status")
    def change_status(self, request, pk=None):
        user = self.get_object()
        serializer = UserStatusSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        if not user.can_change_status(request.user):
            return error_response(
                code="SELF_STATUS_CHANGE",
                message="You cannot change your own account status.",
                http_status=status.HTTP_422_UNPROCESSABLE_ENTITY,
            )

        old = user.status
        user.status = serializer.validated_data["status"]
        user.save(update_fields=["status", "updated_at"])

        logger.info(
            "User status changed",
            extra={
                "user_id": str(user.id),
                "from": old,
                "to": user.status,
                "actor_id": str(request.user.id),
            },
        )

        return success_response(
            self.get_serializer(self.get_queryset().get(pk=user.pk)).data,
            message="Status updated successfully.",
        )


@extend_schema(
    tags=["Admin Users"],
    parameters=[
        OpenApiParameter("search", str, OpenApiParameter.QUERY, required=False),
        OpenApiParameter("status", str, OpenApiParameter.QUERY, required=False),
    ],
)
class AdminCustomerViewSet(_AdminUserViewSet):
    roles = (User.ROLE_CUSTOMER,)
    resource_name = "Customer"
    http_method_names = ["get", "put", "patch", "post", "head", "options"]

    def create(self, request, *args, **kwargs):
        return error_response(
            code="METHOD_NOT_ALLOWED",
            message="Customers register themselves.",
            http_status=status.HTTP_405_METHOD_NOT_ALLOWED,
        )

    def perform_update(self, serializer):
        serializer.save(role=User.ROLE_CUSTOMER)


@extend_schema(tags=["Admin Users"])
class AdminStaffViewSet(_AdminUserViewSet):
    roles = (User.ROLE_STAFF, User.ROLE_ADMIN)
    resource_name = "Staff member"

    def perform_create(self, serializer):
        role = serializer.validated_data.get("role")
        if role not in self.roles:
            serializer.validated_data["role"] = User.ROLE_STAFF
        user = serializer.save()
        logger.info("Staff account created", extra={"user_id": str(user.id), "role": user.role})

    def destroy(self, request, *args, **kwargs):
        user = self.get_object()
        if not user.can_change_status(request.user):
            return error_response(
                code="SELF_STATUS_CHANGE",
                message="You cannot deactivate your own account.",
                http_status=status.HTTP_422_UNPROCESSABLE_ENTITY,
            )
        user.status = User.STATUS_INACTIVE
        user.save(update_fields=["status", "updated_at"])
        logger.info("Staff account deactivated", extra={"user_id": str(user.id)})
        return success_response(message="Staff member deactivated.")
