from .proof import DeliveryError, NotOutForDeliveryError, ProofRequiredError, capture_proof
from .reporting import dashboard, delivered_in_range, performance_report

__all__ = [
    "DeliveryError",
    "NotOutForDeliveryError",
    "ProofRequiredError",
    "capture_proof",
    "dashboard",
    "delivered_in_range",
    "performance_report",
]
