# delivery/models/zone.py

import uuid
from decimal import Decimal

from django.db import models


def _norm(value) -> str:
    return str(value or "").strip().lower()


class DeliveryZoneQuerySet(models.QuerySet):
    def active(self):
        return self.filter(is_active=True)


class DeliveryZone(models.Model):
    """
    A named delivery area described by suburbs and/or postcodes.

    Matching:
    - suburb comparison is case-insensitive
    - postcode comparison is exact on the trimmed string
    - a zone matches when either matches

    Free delivery needs the zone's own threshold; without one the fee always applies.
    """

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    name = models.CharField(max_length=100)
    description = models.TextField(blank=True, default="")

    suburbs = models.JSONField(default=list, blank=True)
    postcodes = models.JSONField(default=list, blank=True)

    # null -> store default_delivery_fee applies
    delivery_fee = models.DecimalField(max_digits=8, decimal_places=2, null=True, blank=True)
    free_delivery_threshold = models.DecimalField(max_digits=10, decimal_places=2, null=True, blank=True)
    estimated_days = models.PositiveSmallIntegerField(default=1)

    is_active = models.BooleanField(default=True)
    sort_order = models.PositiveIntegerField(default=0)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    objects = DeliveryZoneQuerySet.as_manager()

    class Meta:
        ordering = ["sort_order", "name"]

    def __str__(self):
        return self.name

    def covers(self, suburb=None, postcode=None) -> bool:
        suburb = _norm(suburb)
        postcode = _norm(postcode)
        if suburb and suburb in {_norm(s) for s in self.suburbs or []}:
            return True
        if postcode and postcode in {_norm(p) for p in self.postcodes or []}:
            return True
        return False

    def is_free_delivery(self, total) -> bool:
        if self.free_delivery_threshold is None:
            return False
        return Decimal(str(total)) >= self.free_delivery_threshold

    def fee_for(self, total, *, default_fee=Decimal("0.00")) -> Decimal:
        if self.is_free_delivery(total):
            return Decimal("0.00")
        return self.delivery_fee if self.delivery_fee is not None else Decimal(str(default_fee))

    @classmethod
    def find_for(cls, suburb=None, postcode=None):
        """First active zone (by sort order) covering the address, or None."""
        for zone in cls.objects.active():
            if zone.covers(suburb, postcode):
                return zone
        return None
