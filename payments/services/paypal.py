# payments/services/paypal.py

"""
PAYPAL REST CLIENT (urllib)

- OAuth2 client-credentials token per call
- Orders v2: create (CAPTURE intent) and capture
- Payments v2: refund a capture
- Webhooks: verify-webhook-signature
"""

from __future__ import annotations

import base64
import json
import logging
from decimal import Decimal
from typing import Any
from urllib.error import HTTPError, URLError
from urllib.parse import urlencode
from urllib.request import Request, urlopen

from django.conf import settings

from payments.services.errors import GatewayDisabledError, GatewayError

logger = logging.getLogger(__name__)

PAYPAL_BASES = {
    "live": "https://api-m.paypal.com",
    "sandbox": "https://api-m.sandbox.paypal.com",
}

TIMEOUT = 25


def _cfg() -> dict:
    return settings.PAYMENTS["PAYPAL"]


def _base_url() -> str:
    return PAYPAL_BASES.get(_cfg()["MODE"], PAYPAL_BASES["sandbox"])


def _credentials() -> tuple[str, str]:
    cfg = _cfg()
    if not (cfg["CLIENT_ID"] and cfg["CLIENT_SECRET"]):
        raise GatewayDisabledError("PayPal is not configured.")
    return cfg["CLIENT_ID"], cfg["CLIENT_SECRET"]


def _send(req: Request) -> dict[str, Any]:
    try:
        with urlopen(req, timeout=TIMEOUT) as resp:
            raw = resp.read().decode("utf-8", errors="replace")
    except HTTPError as exc:
        body = exc.read().decode("utf-8", errors="replace") if exc.fp else ""
        logger.error("PayPal HTTP error", extra={"status": exc.code, "url": req.full_url})
        try:
            message = json.loads(body).get("message") or "PayPal rejected the request."
        except (json.JSONDecodeError, AttributeError):
            message = "PayPal rejected the request."
        raise GatewayError(message) from exc
    except URLError as exc:
        logger.exception("PayPal unreachable", extra={"url": req.full_url})
        raise GatewayError("PayPal is temporarily unavailable.") from exc

    if not raw:
        return {}
    try:
        parsed = json.loads(raw)
    except json.JSONDecodeError as exc:
        raise GatewayError("PayPal returned an unreadable response.") from exc
    if not isinstance(parsed, dict):
        raise GatewayError("PayPal returned an unexpected response.")
    return parsed


def access_token() -> str:
    client_id, client_secret = _credentials()
    basic = base64.b64encode(f"{client_id}:{client_secret}".encode()).decode()
    req = Request(
        f"{_base_url()}/v1/oauth2/token",
        data=urlencode({"grant_type": "client_credentials"}).encode(),
        headers={
            "Authorization": f"Basic {basic}",
            "Content-Type": "application/x-www-form-urlencoded",
            "Accept": "application/json",
        },
        method="POST",
    )
    token = _send(req).get("access_token")
    if not token:
        raise GatewayError("PayPal authentication failed.")
    return token


def _request_json(method: str, path: str, *, body: dict | None = None) -> dict[str, Any]:
    data = json.dumps(body).encode("utf-8") if body is not None else None
    req = Request(
        f"{_base_url()}{path}",
        data=data,
        headers={
            "Authorization": f"Bearer {access_token()}",
            "Content-Type": "application/json",
            "Accept": "application/json",
        },
        method=method,
    )
    return _send(req)


def _money(amount, currency: str) -> dict:
    return {"currency_code": currency.upper(), "value": f"{Decimal(str(amount)):.2f}"}


def create_order(*, reference: str, amount, currency: str, return_url: str, cancel_url: str) -> dict:
    return _request_json(
        "POST",
        "/v2/checkout/orders",
        body={
            "intent": "CAPTURE",
            "purchase_units": [
                {
                    "reference_id": reference,
                    "custom_id": reference,
                    "amount": _money(amount, currency),
                }
            ],
            "application_context": {
                "return_url": return_url,
                "cancel_url": cancel_url,
                "user_action": "PAY_NOW",
            },
        },
    )


def approval_url(paypal_order: dict) -> str:
    for link in paypal_order.get("links") or []:
        if link.get("rel") in ("approve", "payer-action"):
            return link.get("href") or ""
    return ""


def capture_order(paypal_order_id: str) -> dict:
    return _request_json("POST", f"/v2/checkout/orders/{paypal_order_id}/capture", body={})


def capture_id_from(capture_response: dict) -> str:
    for unit in capture_response.get("purchase_units") or []:
        for capture in (unit.get("payments") or {}).get("captures") or []:
            if capture.get("id"):
                return capture["id"]
    return ""


def refund_capture(*, capture_id: str, amount=None, currency: str = "AUD", note: str = "") -> dict:
    body: dict = {}
    if amount is not None:
        body["amount"] = _money(amount, currency)
    if note:
        body["note_to_payer"] = note[:255]
    return _request_json("POST", f"/v2/payments/captures/{capture_id}/refund", body=body)


def verify_webhook_signature(*, headers, event: dict) -> bool:
    """
    True when PayPal confirms the transmission. Without PAYPAL_WEBHOOK_ID
    configured there is nothing to verify against and the event is accepted.
    """
    webhook_id = _cfg()["WEBHOOK_ID"]
    if not webhook_id:
        return True

    result = _request_json(
        "POST",
        "/v1/notifications/verify-webhook-signature",
        body={
            "auth_algo": headers.get("PAYPAL-AUTH-ALGO", ""),
            "cert_url": headers.get("PAYPAL-CERT-URL", ""),
            "transmission_id": headers.get("PAYPAL-TRANSMISSION-ID", ""),
            "transmission_sig": headers.get("PAYPAL-TRANSMISSION-SIG", ""),
            "transmission_time": headers.get("PAYPAL-TRANSMISSION-TIME", ""),
            "webhook_id": webhook_id,
            "webhook_event": event,
        },
    )
    return result.get("verification_status") == "SUCCESS"
