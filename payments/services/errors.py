# payments/services/errors.py


class PaymentError(Exception):
    """Domain error for payment operations."""

    code = "PAYMENT_ERROR"


class GatewayDisabledError(PaymentError):
    code = "GATEWAY_DISABLED"


class GatewayError(PaymentError):
    """The provider rejected the call or could not be reached."""

    code = "GATEWAY_ERROR"


class PaymentNotFoundError(PaymentError):
    code = "PAYMENT_NOT_FOUND"


class PaymentForbiddenError(PaymentError):
    code = "FORBIDDEN"


class OrderNotPayableError(PaymentError):
    code = "ORDER_NOT_PAYABLE"


class CodUnavailableError(PaymentError):
    code = "COD_UNAVAILABLE"


class NoPaymentError(PaymentError):
    code = "NO_PAYMENT"


class AlreadyRefundedError(PaymentError):
    code = "ALREADY_REFUNDED"


class InvalidRefundAmountError(PaymentError):
    code = "INVALID_AMOUNT"


class WebhookSignatureError(PaymentError):
    code = "INVALID_SIGNATURE"
