from .invoice import Invoice
from .order import Order, OrderItem, generate_order_number
from .status_history import OrderStatusHistory

__all__ = [
    "Invoice",
    "Order",
    "OrderItem",
    "OrderStatusHistory",
    "generate_order_number",
]
