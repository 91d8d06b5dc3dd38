# delivery/services/reporting.py

"""
Delivery dashboard and performance report.

On time: delivered on or before the scheduled date (local time). Orders
without a scheduled date count as on time.
"""

from __future__ import annotations

from datetime import date

from django.utils import timezone

from backend.dates import day_bounds, range_bounds
from orders.models import Order


def delivery_orders():
    return Order.objects.filter(delivery_method=Order.METHOD_DELIVERY)


def dashboard(today: date | None = None) -> dict:
    today = today or timezone.localdate()
    start, end = day_bounds(today)
    qs = delivery_orders()

    return {
        "date": today.isoformat(),
        "scheduled_today": qs.filter(scheduled_date=today).exclude(status=Order.STATUS_CANCELLED).count(),
        "out_for_delivery": qs.filter(status=Order.STATUS_OUT_FOR_DELIVERY).count(),
        "delivered_today": qs.filter(
            status=Order.STATUS_DELIVERED, delivered_at__gte=start, delivered_at__lt=end
        ).count(),
        "ready_to_dispatch": qs.filter(status=Order.STATUS_READY).count(),
        "unassigned": qs.filter(
            status__in=[Order.STATUS_READY, Order.STATUS_OUT_FOR_DELIVERY], assigned_to__isnull=True
        ).count(),
        "open_issues": qs.exclude(delivery_issue="").count(),
    }


def _is_on_time(order: Order) -> bool:
    if order.scheduled_date is None or order.delivered_at is None:
        return True
    return timezone.localtime(order.delivered_at).date() <= order.scheduled_date


def delivered_in_range(date_from: date, date_to: date):
    start, end = range_bounds(date_from, date_to)
    return (
        delivery_orders()
        .filter(status=Order.STATUS_DELIVERED, delivered_at__gte=start, delivered_at__lt=end)
        .select_related("delivery_zone", "assigned_to")
    )


def performance_report(date_from: date, date_to: date) -> dict:
    delivered = list(delivered_in_range(date_from, date_to))
    on_time = sum(1 for order in delivered if _is_on_time(order))

    by_zone: dict[str, int] = {}
    by_driver: dict[str, dict] = {}
    for order in delivered:
        zone = order.delivery_zone.name if order.delivery_zone_id else "Unzoned"
        by_zone[zone] = by_zone.get(zone, 0) + 1

        key = str(order.assigned_to_id) if order.assigned_to_id else "unassigned"
        row = by_driver.setdefault(
            key,
            {
                "user_id": order.assigned_to_id and str(order.assigned_to_id),
                "name": order.assigned_to.full_name if order.assigned_to_id else "Unassigned",
                "delivered": 0,
                "on_time": 0,
            },
        )
        row["delivered"] += 1
        row["on_time"] += int(_is_on_time(order))

    start, end = range_bounds(date_from, date_to)
    issues = (
        delivery_orders()
        .filter(delivery_issue_reported_at__gte=start, delivery_issue_reported_at__lt=end)
        .count()
    )
    cancelled = delivery_orders().filter(
        status=Order.STATUS_CANCELLED, cancelled_at__gte=start, cancelled_at__lt=end
    )

    return {
        "date_from": date_from.isoformat(),
        "date_to": date_to.isoformat(),
        "delivered": len(delivered),
        "on_time": on_time,
        "on_time_rate": round(on_time / len(delivered) * 100, 1) if delivered else 0.0,
        "issues_reported": issues,
        "cancelled": cancelled.count(),
        "by_zone": [{"zone": name, "delivered": n} for name, n in sorted(by_zone.items())],
        "by_driver": sorted(by_driver.values(), key=lambda r: -r["delivered"]),
    }
