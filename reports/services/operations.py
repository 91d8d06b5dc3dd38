# reports/services/operations.py

"""
Staff, delivery and inventory reports.
"""

from __future__ import annotations

from django.contrib.auth import get_user_model
from django.db.models import Count, F, Sum
from django.db.models.functions import Coalesce

from backend.responses import money_str
from delivery.services import performance_report
from inventory.models import InventoryLog, WasteLog
from orders.models import Order, OrderStatusHistory
from permissions.roles import STAFF_ROLES
from products.models import Product
from reports.services.period import ReportRange, orders_in, sum_of


def staff(rng: ReportRange) -> dict:
    User = get_user_model()
    start, end = rng.bounds

    changes = {
        row["changed_by"]: row
        for row in OrderStatusHistory.objects.filter(
            created_at__gte=start, created_at__lt=end, changed_by__isnull=False
        )
        .order_by()
        .values("changed_by")
        .annotate(status_changes=Count("id"), orders_processed=Count("order", distinct=True))
    }
    delivered = {
        row["assigned_to"]: row["n"]
        for row in Order.objects.filter(
            status=Order.STATUS_DELIVERED,
            delivered_at__gte=start,
            delivered_at__lt=end,
            assigned_to__isnull=False,
        )
        .order_by()
        .values("assigned_to")
        .annotate(n=Count("id"))
    }
    waste = {
        row["logged_by"]: row["n"]
        for row in WasteLog.objects.filter(created_at__gte=start, created_at__lt=end, logged_by__isnull=False)
        .order_by()
        .values("logged_by")
        .annotate(n=Count("id"))
    }

    rows = []
    for member in User.objects.filter(role__in=STAFF_ROLES).order_by("first_name", "email"):
        history = changes.get(member.pk, {})
        rows.append(
            {
                "user_id": str(member.pk),
                "name": member.full_name,
                "email": member.email,
                "role": member.role,
                "orders_processed": history.get("orders_processed", 0),
                "status_changes": history.get("status_changes", 0),
                "deliveries_completed": delivered.get(member.pk, 0),
                "waste_logged": waste.get(member.pk, 0),
            }
        )
    rows.sort(key=lambda r: (-r["status_changes"], -r["deliveries_completed"]))

    return {"date_range": rng.as_dict(), "staff": rows}


def deliveries(rng: ReportRange) -> dict:
    placed = orders_in(rng).filter(delivery_method=Order.METHOD_DELIVERY).exclude(status=Order.STATUS_CANCELLED)
    count = placed.count()
    fees = sum_of(placed, "delivery_fee")
    performance = performance_report(rng.date_from, rng.date_to)

    return {
        "date_range": rng.as_dict(),
        "summary": {
            "total_deliveries": count,
            "completed_deliveries": performance["delivered"],
            "on_time_deliveries": performance["on_time"],
            "on_time_rate": performance["on_time_rate"],
            "issues_reported": performance["issues_reported"],
            "cancelled": performance["cancelled"],
            "avg_delivery_fee": money_str(fees / count if count else 0),
        },
        "by_zone": performance["by_zone"],
        "by_driver": performance["by_driver"],
    }


def inventory(rng: ReportRange) -> dict:
    start, end = rng.bounds
    active = Product.objects.filter(is_active=True)

    movements = {
        row["type"]: row["quantity"]
        for row in InventoryLog.objects.filter(created_at__gte=start, created_at__lt=end)
        .order_by()
        .values("type")
        .annotate(quantity=Coalesce(Sum("quantity"), 0))
    }
    waste = WasteLog.objects.filter(created_at__gte=start, created_at__lt=end).exclude(
        status=WasteLog.STATUS_REJECTED
    )
    waste_totals = waste.aggregate(count=Count("id"), quantity=Coalesce(Sum("quantity"), 0))

    sold = movements.get(InventoryLog.TYPE_DEDUCTION, 0)
    on_hand = active.aggregate(units=Coalesce(Sum("stock"), 0))["units"]

    alerts = active.filter(stock__lte=F("min_stock")).select_related("category").order_by("stock", "name")

    return {
        "date_range": rng.as_dict(),
        "stock_levels": {
            "total_products": Product.objects.count(),
            "active_products": active.count(),
            "units_on_hand": on_hand,
            "low_stock": active.filter(stock__gt=0, stock__lte=F("min_stock")).count(),
            "out_of_stock": active.filter(stock=0).count(),
        },
        "movements": {
            "stock_received": movements.get(InventoryLog.TYPE_ADDITION, 0),
            "stock_sold": sold,
            "stock_adjusted": movements.get(InventoryLog.TYPE_ADJUSTMENT, 0),
            "stock_wasted": movements.get(InventoryLog.TYPE_WASTE, 0),
        },
        "waste": {
            "count": waste_totals["count"],
            "quantity": waste_totals["quantity"],
            "estimated_value": money_str(sum_of(waste, "total_cost")),
        },
        "turnover_rate": round(sold / on_hand, 2) if on_hand else 0.0,
        "stock_alerts": [
            {
                "product_id": str(p.pk),
                "sku": p.sku,
                "name": p.name,
                "category": p.category.name,
                "stock": p.stock,
                "min_stock": p.min_stock,
                "stock_status": p.stock_status,
            }
            for p in alerts
        ],
    }
