# store/services/settings.py

"""
SETTINGS SERVICE

Purpose:
- One registry of known keys (group, type, default, visibility).
- Typed reads through Django's cache; writes invalidate it.
- Group updates validate every key before touching the database.

Rules:
- Unknown keys are rejected (SettingsValidationError).
- Values are cast by the key's declared type.
- Each effective change writes one SettingHistory row.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from decimal import Decimal, InvalidOperation

from django.conf import settings as django_settings
from django.core.cache import cache
from django.db import transaction

from store.models import Setting, SettingHistory

logger = logging.getLogger(__name__)

CACHE_KEY = "settings:values"
CACHE_TIMEOUT = 3600


class SettingsError(Exception):
    code = "SETTINGS_ERROR"


class UnknownSettingsGroupError(SettingsError):
    code = "UNKNOWN_GROUP"


class SettingsValidationError(SettingsError):
    code = "VALIDATION_ERROR"

    def __init__(self, errors: dict):
        self.errors = errors
        super().__init__(next(iter(errors.values()))[0] if errors else "Invalid settings.")


@dataclass(frozen=True)
class SettingSpec:
    group: str
    type: str
    default: object
    description: str = ""
    is_public: bool = False


S, I, F, B, J = (
    Setting.TYPE_STRING,
    Setting.TYPE_INTEGER,
    Setting.TYPE_FLOAT,
    Setting.TYPE_BOOLEAN,
    Setting.TYPE_JSON,
)

REGISTRY: dict[str, SettingSpec] = {
    # store
    "store_name": SettingSpec("store", S, "Zambezi Meats", "Trading name", True),
    "store_email": SettingSpec("store", S, "orders@zambezimeats.com.au", "Contact email", True),
    "store_phone": SettingSpec("store", S, "", "Contact phone", True),
    "store_address": SettingSpec("store", S, "", "Shop address", True),
    "store_abn": SettingSpec("store", S, "", "Australian Business Number", True),
    # operating
    "operating_hours": SettingSpec(
        "operating",
        J,
        {
            "monday": "08:00-18:00",
            "tuesday": "08:00-18:00",
            "wednesday": "08:00-18:00",
            "thursday": "08:00-18:00",
            "friday": "08:00-18:00",
            "saturday": "08:00-16:00",
            "sunday": "closed",
        },
        "Opening hours per weekday",
        True,
    ),
    "delivery_slots": SettingSpec(
        "operating", J, ["08:00-12:00", "12:00-17:00"], "Bookable delivery windows", True
    ),
    # delivery
    "minimum_order_amount": SettingSpec("delivery", F, 100.00, "Minimum order subtotal (AUD)", True),
    "free_delivery_threshold": SettingSpec("delivery", F, 100.00, "Free delivery threshold for new zones (AUD)", True),
    "default_delivery_fee": SettingSpec("delivery", F, 10.00, "Fee when a zone sets none (AUD)", True),
    "pickup_enabled": SettingSpec("delivery", B, True, "Allow click & collect", True),
    # payment
    "default_currency": SettingSpec("payment", S, "AUD", "Store currency", True),
    "stripe_enabled": SettingSpec("payment", B, True, "Accept card payments", True),
    "paypal_enabled": SettingSpec("payment", B, False, "Accept PayPal", True),
    "cod_enabled": SettingSpec("payment", B, True, "Accept cash on delivery", True),
    "cod_max_amount": SettingSpec("payment", F, 500.00, "Largest COD order (AUD)", True),
    # email
    "email_from_name": SettingSpec("email", S, "Zambezi Meats", "Sender display name"),
    "order_confirmation_email": SettingSpec("email", B, True, "Email customers on order"),
    # notifications
    "low_stock_alerts": SettingSpec("notifications", B, True, "Alert staff on low stock"),
    "new_order_alerts": SettingSpec("notifications", B, True, "Alert staff on new orders"),
    # security
    "session_timeout_minutes": SettingSpec("security", I, 120, "Idle timeout for staff sessions"),
    "max_login_attempts": SettingSpec("security", I, 5, "Lockout threshold"),
    # features
    "wishlist_enabled": SettingSpec("features", B, True, "Customer wishlist", True),
    "promotions_enabled": SettingSpec("features", B, True, "Promo codes at checkout", True),
}

GROUPS = [code for code, _ in Setting.GROUP_CHOICES]

TRUE_STRINGS = {"1", "true", "yes", "on"}
FALSE_STRINGS = {"0", "false", "no", "off", ""}


# =====================================================
# CASTING
# =====================================================

def cast_value(raw: str, type_: str):
    """Stored text -> python value."""
    if type_ == Setting.TYPE_INTEGER:
        return int(raw)
    if type_ == Setting.TYPE_FLOAT:
        return float(raw)
    if type_ == Setting.TYPE_BOOLEAN:
        return str(raw).strip().lower() in TRUE_STRINGS
    if type_ == Setting.TYPE_JSON:
        return json.loads(raw) if raw else None
    return raw


def to_storage(value, type_: str) -> str:
    """
    Client value -> stored text. Raises ValueError when the value does not
    fit the declared type.
    """
    if type_ == Setting.TYPE_INTEGER:
        if isinstance(value, bool):
            raise ValueError("must be an integer")
        try:
            number = Decimal(str(value).strip())
        except InvalidOperation:
            raise ValueError("must be an integer")
        if number != number.to_integral_value():
            raise ValueError("must be an integer")
        return str(int(number))

    if type_ == Setting.TYPE_FLOAT:
        if isinstance(value, bool):
            raise ValueError("must be a number")
        try:
            return str(Decimal(str(value).strip()))
        except InvalidOperation:
            raise ValueError("must be a number")

    if type_ == Setting.TYPE_BOOLEAN:
        if isinstance(value, bool):
            return "true" if value else "false"
        text = str(value).strip().lower()
        if text in TRUE_STRINGS:
            return "true"
        if text in FALSE_STRINGS:
            return "false"
        raise ValueError("must be true or false")

    if type_ == Setting.TYPE_JSON:
        if isinstance(value, str):
            try:
                json.loads(value)
            except json.JSONDecodeError:
                raise ValueError("must be valid JSON")
            return value
        return json.dumps(value)

    if isinstance(value, (dict, list)):
        raise ValueError("must be text")
    return "" if value is None else str(value)


# =====================================================
# READS
# =====================================================

def _stored_values() -> dict:
    values = cache.get(CACHE_KEY)
    if values is None:
        values = {row.key: cast_value(row.value, row.type) for row in Setting.objects.all()}
        cache.set(CACHE_KEY, values, CACHE_TIMEOUT)
    return values


def clear_cache() -> None:
    cache.delete(CACHE_KEY)


def get_setting(key: str, default=None):
    stored = _stored_values()
    if key in stored:
        return stored[key]
    spec = REGISTRY.get(key)
    if spec is not None:
        return spec.default
    return default


def get_group(group: str) -> dict:
    if group not in GROUPS:
        raise UnknownSettingsGroupError(f"Unknown settings group '{group}'.")
    return {key: get_setting(key) for key, spec in REGISTRY.items() if spec.group == group}


def all_settings() -> dict:
    return {group: get_group(group) for group in GROUPS}


def public_settings() -> dict:
    return {key: get_setting(key) for key, spec in REGISTRY.items() if spec.is_public}


def describe_group(group: str) -> list[dict]:
    """Admin form metadata: key, value, type, description."""
    if group not in GROUPS:
        raise UnknownSettingsGroupError(f"Unknown settings group '{group}'.")
    return [
        {
            "key": key,
            "value": get_setting(key),
            "type": spec.type,
            "description": spec.description,
            "is_public": spec.is_public,
        }
        for key, spec in REGISTRY.items()
        if spec.group == group
    ]


# =====================================================
# WRITES
# =====================================================

def _validate(values: dict, *, group: str | None = None) -> dict[str, str]:
    errors: dict[str, list[str]] = {}
    prepared: dict[str, str] = {}

    for key, value in values.items():
        spec = REGISTRY.get(key)
        if spec is None or (group is not None and spec.group != group):
            errors[key] = ["Unknown setting."]
            continue
        try:
            prepared[key] = to_storage(value, spec.type)
        except (TypeError, ValueError) as exc:
            errors[key] = [f"Value {exc}."]

    if errors:
        raise SettingsValidationError(errors)
    return prepared


@transaction.atomic
def _write(prepared: dict[str, str], *, user=None) -> list[str]:
    changed: list[str] = []
    actor = user if getattr(user, "is_authenticated", False) else None

    for key, new_value in prepared.items():
        spec = REGISTRY[key]
        setting, created = Setting.objects.select_for_update().get_or_create(
            key=key,
            defaults={
                "type": spec.type,
                "group": spec.group,
                "description": spec.description,
                "is_public": spec.is_public,
                "value": to_storage(spec.default, spec.type),
            },
        )
        old_value = setting.value
        if old_value == new_value:
            continue

        setting.value = new_value
        setting.updated_by = actor
        setting.save(update_fields=["value", "updated_by", "updated_at"])
        SettingHistory.objects.create(
            setting=setting, old_value=old_value, new_value=new_value, changed_by=actor
        )
        changed.append(key)

    clear_cache()
    transaction.on_commit(clear_cache)

    if changed:
        logger.info("Settings updated", extra={"keys": changed, "user_id": str(actor.pk) if actor else None})
    return changed


def update_group(group: str, values: dict, *, user=None) -> list[str]:
    if group not in GROUPS:
        raise UnknownSettingsGroupError(f"Unknown settings group '{group}'.")
    return _write(_validate(values, group=group), user=user)


def export_settings() -> dict:
    return {key: get_setting(key) for key in REGISTRY}


def import_settings(values: dict, *, user=None) -> list[str]:
    return _write(_validate(values), user=user)


# =====================================================
# TYPED ACCESSORS
# =====================================================

def _decimal(key: str) -> Decimal:
    return Decimal(str(get_setting(key))).quantize(Decimal("0.01"))


def store_name() -> str:
    return str(get_setting("store_name"))


def default_currency() -> str:
    return str(get_setting("default_currency") or django_settings.DEFAULT_CURRENCY).upper()


def minimum_order_amount() -> Decimal:
    return _decimal("minimum_order_amount")


def free_delivery_threshold() -> Decimal:
    return _decimal("free_delivery_threshold")


def default_delivery_fee() -> Decimal:
    return _decimal("default_delivery_fee")


def pickup_enabled() -> bool:
    return bool(get_setting("pickup_enabled"))


def stripe_enabled() -> bool:
    return bool(get_setting("stripe_enabled")) and bool(django_settings.PAYMENTS["STRIPE"]["SECRET_KEY"])


def paypal_enabled() -> bool:
    paypal = django_settings.PAYMENTS["PAYPAL"]
    return bool(get_setting("paypal_enabled")) and bool(paypal["CLIENT_ID"] and paypal["CLIENT_SECRET"])


def cod_enabled() -> bool:
    return bool(get_setting("cod_enabled"))


def cod_max_amount() -> Decimal:
    stored = _stored_values()
    if "cod_max_amount" in stored:
        return _decimal("cod_max_amount")
    return Decimal(str(django_settings.PAYMENTS["COD"]["MAX_AMOUNT"])).quantize(Decimal("0.01"))


def delivery_slots() -> list:
    return list(get_setting("delivery_slots") or [])
