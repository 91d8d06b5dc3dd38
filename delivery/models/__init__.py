from .proof import DeliveryProof
from .zone import DeliveryZone

__all__ = ["DeliveryProof", "DeliveryZone"]
