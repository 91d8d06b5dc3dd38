# checkout/views/promotions.py

"""
ADMIN PROMOTIONS

CRUD /admin/promotions/    promotions.manage
?status=active|inactive|expired, ?search=
Promotions already used on an order are deactivated instead of deleted.
"""

from __future__ import annotations

from django.db.models import Q
from django.utils import timezone
from drf_spectacular.utils import extend_schema
from rest_framework.permissions import IsAuthenticated

from backend.viewsets import EnvelopeModelViewSet
from checkout.models import Promotion
from checkout.serializers import PromotionSerializer
from permissions.roles import CAP_PROMOTIONS_MANAGE, HasCapability


@extend_schema(tags=["Admin Promotions"])
class AdminPromotionViewSet(EnvelopeModelViewSet):
    serializer_class = PromotionSerializer
    permission_classes = [IsAuthenticated, HasCapability]
    required_capability = CAP_PROMOTIONS_MANAGE
    resource_name = "Promotion"

    def get_queryset(self):
        qs = Promotion.objects.all()
        params = self.request.query_params
        now = timezone.now()

        status_filter = (params.get("status") or "").strip().lower()
        if status_filter == "active":
            qs = qs.filter(is_active=True).filter(Q(ends_at__isnull=True) | Q(ends_at__gte=now))
        elif status_filter == "inactive":
            qs = qs.filter(is_active=False)
        elif status_filter == "expired":
            qs = qs.filter(ends_at__lt=now)

        search = (params.get("search") or "").strip()
        if search:
            qs = qs.filter(Q(code__icontains=search) | Q(name__icontains=search))
        return qs

    def perform_destroy(self, instance):
        if instance.orders.exists():
            instance.is_active = False
            instance.save(update_fields=["is_active", "updated_at"])
            return
        instance.delete()
