from .checkout import (
    CalculateFeeView,
    CheckoutSessionView,
    CreateOrderView,
    PaymentMethodsView,
    ValidateAddressView,
    ValidatePromoView,
)
from .promotions import AdminPromotionViewSet

__all__ = [
    "AdminPromotionViewSet",
    "CalculateFeeView",
    "CheckoutSessionView",
    "CreateOrderView",
    "PaymentMethodsView",
    "ValidateAddressView",
    "ValidatePromoView",
]
