from .errors import (
    AlreadyRefundedError,
    CodUnavailableError,
    GatewayDisabledError,
    GatewayError,
    InvalidRefundAmountError,
    NoPaymentError,
    OrderNotPayableError,
    PaymentError,
    PaymentForbiddenError,
    PaymentNotFoundError,
    WebhookSignatureError,
)

__all__ = [
    "AlreadyRefundedError",
    "CodUnavailableError",
    "GatewayDisabledError",
    "GatewayError",
    "InvalidRefundAmountError",
    "NoPaymentError",
    "OrderNotPayableError",
    "PaymentError",
    "PaymentForbiddenError",
    "PaymentNotFoundError",
    "WebhookSignatureError",
]
