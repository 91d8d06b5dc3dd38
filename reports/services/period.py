# reports/services/period.py

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, timedelta
from decimal import Decimal

from django.db.models import Sum
from django.db.models.functions import Coalesce

from backend.dates import range_bounds
from orders.models import Order


@dataclass(frozen=True)
class ReportRange:
    """Inclusive local-date range a report covers."""

    date_from: date
    date_to: date

    @property
    def bounds(self):
        return range_bounds(self.date_from, self.date_to)

    @property
    def days(self) -> int:
        return (self.date_to - self.date_from).days + 1

    def previous(self) -> "ReportRange":
        """Range of the same length ending the day before this one starts."""
        end = self.date_from - timedelta(days=1)
        return ReportRange(end - timedelta(days=self.days - 1), end)

    def as_dict(self) -> dict:
        return {
            "date_from": self.date_from.isoformat(),
            "date_to": self.date_to.isoformat(),
            "period_days": self.days,
        }


def orders_in(rng: ReportRange):
    start, end = rng.bounds
    return Order.objects.filter(created_at__gte=start, created_at__lt=end)


def revenue_orders(rng: ReportRange):
    """Orders that count as revenue: anything not pending or cancelled."""
    return orders_in(rng).exclude(status__in=Order.NON_REVENUE_STATUSES)


def sum_of(qs, field: str) -> Decimal:
    return qs.aggregate(v=Coalesce(Sum(field), Decimal("0.00")))["v"]


def percent_change(current, previous) -> float:
    current, previous = float(current or 0), float(previous or 0)
    if previous == 0:
        return 100.0 if current > 0 else 0.0
    return round((current - previous) / previous * 100, 1)


def share(part, whole) -> float:
    whole = float(whole or 0)
    return round(float(part or 0) / whole * 100, 1) if whole else 0.0
