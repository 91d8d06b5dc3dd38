# checkout/services/errors.py


class CheckoutError(Exception):
    code = "CHECKOUT_ERROR"


class EmptyCartError(CheckoutError):
    code = "EMPTY_CART"


class MinimumOrderError(CheckoutError):
    code = "MINIMUM_ORDER"

    def __init__(self, minimum, subtotal):
        self.minimum = minimum
        self.subtotal = subtotal
        super().__init__(f"Minimum order amount is ${minimum:.2f}. Your subtotal is ${subtotal:.2f}.")


class OutOfAreaError(CheckoutError):
    code = "OUT_OF_AREA"

    def __init__(self, message: str = "We don't deliver to this area yet."):
        super().__init__(message)


class InvalidAddressError(CheckoutError):
    code = "INVALID_ADDRESS"


class DeliveryMethodUnavailableError(CheckoutError):
    code = "DELIVERY_METHOD_UNAVAILABLE"


class PromotionError(CheckoutError):
    code = "PROMO_ERROR"


class InvalidPromoError(PromotionError):
    code = "INVALID_PROMO"


class PromoUnavailableError(PromotionError):
    code = "PROMO_UNAVAILABLE"


class PromoMinOrderError(PromotionError):
    code = "PROMO_MIN_ORDER"
