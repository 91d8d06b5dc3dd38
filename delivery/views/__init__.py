from .deliveries import AdminDeliveryViewSet, StaffProofOfDeliveryView
from .zones import AdminDeliveryZoneViewSet, DeliverySettingsView, PublicDeliveryZoneListView

__all__ = [
    "AdminDeliveryViewSet",
    "AdminDeliveryZoneViewSet",
    "DeliverySettingsView",
    "PublicDeliveryZoneListView",
    "StaffProofOfDeliveryView",
]
