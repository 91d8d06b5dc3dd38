# delivery/urls.py

from django.urls import include, path
from rest_framework.routers import SimpleRouter

from delivery.views import (
    AdminDeliveryViewSet,
    AdminDeliveryZoneViewSet,
    DeliverySettingsView,
    PublicDeliveryZoneListView,
    StaffProofOfDeliveryView,
)

app_name = "delivery"

router = SimpleRouter()
router.register(r"admin/delivery-zones", AdminDeliveryZoneViewSet, basename="admin-zone")
router.register(r"admin/deliveries", AdminDeliveryViewSet, basename="admin-delivery")

urlpatterns = [
    path("delivery-zones/", PublicDeliveryZoneListView.as_view(), name="zones"),
    path("admin/delivery-settings/", DeliverySettingsView.as_view(), name="settings"),
    path("staff/orders/<uuid:order_id>/pod/", StaffProofOfDeliveryView.as_view(), name="staff-pod"),
    path("", include(router.urls)),
]
