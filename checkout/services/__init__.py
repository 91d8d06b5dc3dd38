from .errors import (
    CheckoutError,
    DeliveryMethodUnavailableError,
    EmptyCartError,
    InvalidAddressError,
    InvalidPromoError,
    MinimumOrderError,
    OutOfAreaError,
    PromoMinOrderError,
    PromoUnavailableError,
    PromotionError,
)
from .order_creation import CheckoutRequest, create_order_from_cart
from .pricing import (
    DeliveryQuote,
    delivery_quote,
    pickup_quote,
    promotion_summary,
    resolve_zone,
    validate_promotion,
    zone_summary,
)

__all__ = [
    "CheckoutError",
    "CheckoutRequest",
    "DeliveryMethodUnavailableError",
    "DeliveryQuote",
    "EmptyCartError",
    "InvalidAddressError",
    "InvalidPromoError",
    "MinimumOrderError",
    "OutOfAreaError",
    "PromoMinOrderError",
    "PromoUnavailableError",
    "PromotionError",
    "create_order_from_cart",
    "delivery_quote",
    "pickup_quote",
    "promotion_summary",
    "resolve_zone",
    "validate_promotion",
    "zone_summary",
]
