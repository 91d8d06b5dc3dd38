from .inputs import (
    AssignOrderSerializer,
    CancelOrderSerializer,
    InvoiceStatusSerializer,
    RefundSerializer,
    StaffNoteSerializer,
    StatusUpdateSerializer,
)
from .order import (
    AdminOrderUpdateSerializer,
    InvoiceSerializer,
    OrderDetailSerializer,
    OrderItemSerializer,
    OrderListSerializer,
    OrderStatusHistorySerializer,
    StaffOrderSerializer,
)

__all__ = [
    "AdminOrderUpdateSerializer",
    "AssignOrderSerializer",
    "CancelOrderSerializer",
    "InvoiceSerializer",
    "InvoiceStatusSerializer",
    "OrderDetailSerializer",
    "OrderItemSerializer",
    "OrderListSerializer",
    "OrderStatusHistorySerializer",
    "RefundSerializer",
    "StaffNoteSerializer",
    "StaffOrderSerializer",
    "StatusUpdateSerializer",
]
