"""
PATH: backend/responses.py

API RESPONSE ENVELOPES

Every endpoint answers with one of two shapes:
- success: {"success": true, "message"?: str, "data"?: any, ...extra}
- error:   {"success": false, "error": {"code": str, "message": str}, ...extra}

Codes are stable UPPER_SNAKE strings the frontend can switch on.
"""

from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal, InvalidOperation

from rest_framework import status
from rest_framework.response import Response

TWOPLACES = Decimal("0.01")


def success_response(
    data=None,
    *,
    message: str | None = None,
    http_status: int = status.HTTP_200_OK,
    **extra,
) -> Response:
    body: dict = {"success": True}
    if message:
        body["message"] = message
    if data is not None:
        body["data"] = data
    body.update(extra)
    return Response(body, status=http_status)


def error_response(*, code: str, message: str, http_status: int, **extra) -> Response:
    body: dict = {"success": False, "error": {"code": code, "message": message}}
    body.update(extra)
    return Response(body, status=http_status)


def money(value) -> Decimal:
    """Quantize to cents; blanks and junk become 0.00."""
    if value is None or value == "":
        return Decimal("0.00")
    try:
        return Decimal(str(value)).quantize(TWOPLACES, rounding=ROUND_HALF_UP)
    except (InvalidOperation, ValueError, TypeError):
        return Decimal("0.00")


def money_str(value) -> str:
    """JSON-safe money string."""
    return f"{money(value):.2f}"


def domain_error_response(exc: Exception, *, http_status: int = status.HTTP_422_UNPROCESSABLE_ENTITY, **extra) -> Response:
    """Render a domain exception carrying a `code` attribute."""
    return error_response(
        code=getattr(exc, "code", "BUSINESS_RULE_VIOLATION"),
        message=str(exc),
        http_status=http_status,
        **extra,
    )
