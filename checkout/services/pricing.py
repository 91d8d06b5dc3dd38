# checkout/services/pricing.py

"""
CHECKOUT PRICING

    total = subtotal + delivery_fee - discount

- delivery_fee: the covering zone's fee (store default when the zone sets
  none), free at or above the zone threshold. A zone without a threshold
  never ships free. Pickup is always free.
- discount: the promotion's discount on the subtotal.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal

from checkout.models import Promotion
from checkout.services.errors import (
    InvalidPromoError,
    OutOfAreaError,
    PromoMinOrderError,
    PromoUnavailableError,
)
from delivery.models import DeliveryZone
from store.services import settings as site_settings

ZERO = Decimal("0.00")


@dataclass(frozen=True)
class DeliveryQuote:
    fee: Decimal
    is_free: bool
    zone: DeliveryZone | None
    amount_to_free_delivery: Decimal
    message: str

    def as_dict(self) -> dict:
        return {
            "fee": f"{self.fee:.2f}",
            "is_free": self.is_free,
            "zone_id": str(self.zone.pk) if self.zone else None,
            "zone_name": self.zone.name if self.zone else None,
            "estimated_days": self.zone.estimated_days if self.zone else None,
            "amount_to_free_delivery": f"{self.amount_to_free_delivery:.2f}",
            "message": self.message,
        }


def zone_summary(zone: DeliveryZone) -> dict:
    default_fee = site_settings.default_delivery_fee()
    threshold = zone.free_delivery_threshold
    return {
        "id": str(zone.pk),
        "name": zone.name,
        "delivery_fee": f"{(zone.delivery_fee if zone.delivery_fee is not None else default_fee):.2f}",
        "free_delivery_threshold": f"{threshold:.2f}" if threshold is not None else None,
        "estimated_days": zone.estimated_days,
    }


def resolve_zone(*, suburb: str = "", postcode: str = "") -> DeliveryZone:
    if not (suburb or postcode):
        raise OutOfAreaError("Suburb or postcode is required.")
    zone = DeliveryZone.find_for(suburb, postcode)
    if zone is None:
        raise OutOfAreaError()
    return zone


def pickup_quote() -> DeliveryQuote:
    return DeliveryQuote(
        fee=ZERO,
        is_free=True,
        zone=None,
        amount_to_free_delivery=ZERO,
        message="Pickup orders have no delivery fee.",
    )


def delivery_quote(*, subtotal, suburb: str = "", postcode: str = "", zone: DeliveryZone | None = None) -> DeliveryQuote:
    subtotal = Decimal(str(subtotal or 0))
    zone = zone or resolve_zone(suburb=suburb, postcode=postcode)

    threshold = zone.free_delivery_threshold
    fee = zone.fee_for(subtotal, default_fee=site_settings.default_delivery_fee())
    is_free = fee == ZERO

    if is_free:
        amount_to_free, message = ZERO, "You qualify for FREE delivery!"
    elif threshold is not None:
        amount_to_free = max(Decimal(str(threshold)) - subtotal, ZERO)
        message = f"Add ${amount_to_free:.2f} more for FREE delivery!"
    else:
        amount_to_free, message = ZERO, ""

    return DeliveryQuote(
        fee=Decimal(fee).quantize(Decimal("0.01")),
        is_free=is_free,
        zone=zone,
        amount_to_free_delivery=amount_to_free,
        message=message,
    )


def validate_promotion(code: str, subtotal, *, now=None) -> tuple[Promotion, Decimal]:
    code = (code or "").strip().upper()
    promotion = Promotion.objects.filter(code=code).first() if code else None
    if promotion is None:
        raise InvalidPromoError("Invalid promo code.")

    if not site_settings.get_setting("promotions_enabled") or not promotion.can_be_used(now):
        raise PromoUnavailableError("This promo code is no longer available.")

    subtotal = Decimal(str(subtotal or 0))
    if not promotion.meets_minimum(subtotal):
        raise PromoMinOrderError(f"Minimum order of ${promotion.min_order:.2f} required for this promo code.")

    return promotion, promotion.calculate_discount(subtotal)


def promotion_summary(promotion: Promotion) -> dict:
    return {
        "code": promotion.code,
        "name": promotion.name,
        "type": promotion.type,
        "value": f"{promotion.value:.2f}",
        "min_order": f"{promotion.min_order:.2f}",
    }
