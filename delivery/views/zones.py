# delivery/views/zones.py

"""
DELIVERY ZONES

GET  /delivery-zones/                 AllowAny, active zones
CRUD /admin/delivery-zones/           deliveries.manage
GET/PUT /admin/delivery-settings/     settings group "delivery"
"""

from __future__ import annotations

from drf_spectacular.utils import extend_schema
from rest_framework import status
from rest_framework.permissions import AllowAny, IsAuthenticated
from rest_framework.views import APIView

from backend.responses import error_response, success_response
from backend.throttles import PublicCatalogThrottle
from backend.viewsets import EnvelopeModelViewSet
from delivery.models import DeliveryZone
from delivery.serializers import (
    DeliverySettingsSerializer,
    DeliveryZoneSerializer,
    PublicDeliveryZoneSerializer,
)
from permissions.roles import CAP_DELIVERIES_MANAGE, CAP_SETTINGS_MANAGE, HasCapability
from store.services import settings as site_settings


class PublicDeliveryZoneListView(APIView):
    permission_classes = [AllowAny]
    authentication_classes = []
    throttle_classes = [PublicCatalogThrottle]

    @extend_schema(tags=["Delivery"], responses={200: PublicDeliveryZoneSerializer(many=True)})
    def get(self, request):
        zones = DeliveryZone.objects.active()
        return success_response(
            PublicDeliveryZoneSerializer(zones, many=True).data,
            default_delivery_fee=f"{site_settings.default_delivery_fee():.2f}",
            free_delivery_threshold=f"{site_settings.free_delivery_threshold():.2f}",
        )


@extend_schema(tags=["Admin Delivery"])
class AdminDeliveryZoneViewSet(EnvelopeModelViewSet):
    serializer_class = DeliveryZoneSerializer
    permission_classes = [IsAuthenticated, HasCapability]
    required_capability = CAP_DELIVERIES_MANAGE
    resource_name = "Delivery zone"

    def get_queryset(self):
        qs = DeliveryZone.objects.all()
        active = (self.request.query_params.get("is_active") or "").strip().lower()
        if active in ("true", "1"):
            qs = qs.filter(is_active=True)
        elif active in ("false", "0"):
            qs = qs.filter(is_active=False)
        return qs

    def perform_destroy(self, instance):
        # Zones referenced by orders are kept for history.
        if instance.orders.exists():
            instance.is_active = False
            instance.save(update_fields=["is_active", "updated_at"])
            return
        instance.delete()


class DeliverySettingsView(APIView):
    permission_classes = [IsAuthenticated, HasCapability]

    @property
    def required_capability(self):
        if self.request.method in ("GET", "HEAD", "OPTIONS"):
            return CAP_DELIVERIES_MANAGE
        return CAP_SETTINGS_MANAGE

    @extend_schema(tags=["Admin Delivery"], responses={200: dict})
    def get(self, request):
        return success_response(site_settings.get_group("delivery"))

    @extend_schema(tags=["Admin Delivery"], request=DeliverySettingsSerializer, responses={200: dict})
    def put(self, request):
        serializer = DeliverySettingsSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        try:
            changed = site_settings.update_group("delivery", serializer.validated_data["settings"], user=request.user)
        except site_settings.SettingsValidationError as exc:
            return error_response(
                code=exc.code,
                message="Some settings are invalid.",
                http_status=status.HTTP_422_UNPROCESSABLE_ENTITY,
                errors=exc.errors,
            )
        return success_response(
            site_settings.get_group("delivery"),
            message="Delivery settings updated successfully.",
            changed=changed,
        )
