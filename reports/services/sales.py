# reports/services/sales.py

"""
SALES AND FINANCIAL REPORTS

Revenue is the order total of orders not pending or cancelled, attributed
to the day the order was placed (store timezone). Money leaves this module
as 2dp strings.

Financial report:
    gross    = revenue orders + refunded orders placed in the range
    net      = gross - refunds - waste cost
"""

from __future__ import annotations

from decimal import Decimal

from django.contrib.auth import get_user_model
from django.db.models import Count, DecimalField, Q, Sum
from django.db.models.functions import Coalesce, TruncDay, TruncMonth, TruncWeek

from backend.responses import money_str
from inventory.models import WasteLog
from orders.models import Order, OrderItem
from payments.models import Payment
from reports.services.period import (
    ReportRange,
    orders_in,
    percent_change,
    revenue_orders,
    share,
    sum_of,
)

ZERO = Decimal("0.00")

GROUP_BY_TRUNC = {
    "day": TruncDay,
    "week": TruncWeek,
    "month": TruncMonth,
}


def _decimal_sum(field: str):
    return Coalesce(Sum(field), ZERO, output_field=DecimalField(max_digits=14, decimal_places=2))


def _period_label(value, group_by: str) -> str:
    if group_by == "month":
        return f"{value:%Y-%m}"
    return value.date().isoformat() if hasattr(value, "date") else value.isoformat()


# ============================================================
# HEADLINE
# ============================================================


def _headline(rng: ReportRange) -> dict:
    orders = revenue_orders(rng)
    revenue = sum_of(orders, "total")
    count = orders.count()
    customers = orders.order_by().values("user_id").distinct().count()
    return {
        "revenue": revenue,
        "orders": count,
        "customers": customers,
        "avg_order": (revenue / count) if count else ZERO,
    }


def dashboard(rng: ReportRange) -> dict:
    current = _headline(rng)
    previous = _headline(rng.previous())

    def stat(key, *, is_money=False):
        value = current[key]
        return {
            "value": money_str(value) if is_money else value,
            "change": percent_change(value, previous[key]),
        }

    return {
        "date_range": rng.as_dict(),
        "quick_stats": {
            "revenue": stat("revenue", is_money=True),
            "orders": stat("orders"),
            "customers": stat("customers"),
            "avg_order": stat("avg_order", is_money=True),
        },
        "top_products": product_sales(rng, limit=5)["products"],
        "top_customers": top_customers(rng, limit=5),
    }


def sales_summary(rng: ReportRange) -> dict:
    orders = revenue_orders(rng)
    headline = _headline(rng)
    items_sold = OrderItem.objects.filter(order__in=orders).aggregate(n=Coalesce(Sum("quantity"), 0))["n"]

    by_status = (
        orders_in(rng)
        .order_by()
        .values("status")
        .annotate(count=Count("id"), revenue=_decimal_sum("total"))
        .order_by("status")
    )

    return {
        "date_range": rng.as_dict(),
        "summary": {
            "total_revenue": money_str(headline["revenue"]),
            "total_orders": headline["orders"],
            "avg_order_value": money_str(headline["avg_order"]),
            "total_items_sold": items_sold,
        },
        "revenue_by_status": [
            {"status": row["status"], "count": row["count"], "revenue": money_str(row["revenue"])}
            for row in by_status
        ],
        "daily_revenue": revenue(rng, group_by="day")["periods"],
    }


def revenue(rng: ReportRange, *, group_by: str = "day") -> dict:
    trunc = GROUP_BY_TRUNC.get(group_by, TruncDay)
    group_by = group_by if group_by in GROUP_BY_TRUNC else "day"

    rows = list(
        revenue_orders(rng)
        .order_by()
        .annotate(period=trunc("created_at"))
        .values("period")
        .annotate(
            order_count=Count("id"),
            revenue=_decimal_sum("total"),
            subtotal=_decimal_sum("subtotal"),
            delivery_fees=_decimal_sum("delivery_fee"),
            discounts=_decimal_sum("discount"),
        )
        .order_by("period")
    )

    money_keys = ("revenue", "subtotal", "delivery_fees", "discounts")
    totals = {key: sum((row[key] for row in rows), ZERO) for key in money_keys}

    return {
        "date_range": rng.as_dict(),
        "group_by": group_by,
        "periods": [
            {
                "period": _period_label(row["period"], group_by),
                "order_count": row["order_count"],
                **{key: money_str(row[key]) for key in money_keys},
            }
            for row in rows
        ],
        "totals": {
            **{key: money_str(value) for key, value in totals.items()},
            "order_count": sum(row["order_count"] for row in rows),
        },
    }


def orders_report(rng: ReportRange) -> dict:
    orders = orders_in(rng)
    headline = _headline(rng)

    by_status = (
        orders.order_by().values("status").annotate(count=Count("id"), total=_decimal_sum("total")).order_by("status")
    )
    by_method = (
        orders.order_by()
        .values("delivery_method")
        .annotate(count=Count("id"))
        .order_by("delivery_method")
    )
    recent = orders.select_related("user")[:10]

    return {
        "date_range": rng.as_dict(),
        "total_orders": orders.count(),
        "average_order_value": money_str(headline["avg_order"]),
        "by_status": [
            {"status": row["status"], "count": row["count"], "total": money_str(row["total"])} for row in by_status
        ],
        "by_delivery_method": {row["delivery_method"]: row["count"] for row in by_method},
        "recent_orders": [
            {
                "id": str(order.pk),
                "order_number": order.order_number,
                "customer": order.user.full_name,
                "status": order.status,
                "total": money_str(order.total),
                "created_at": order.created_at.isoformat(),
            }
            for order in recent
        ],
    }


# ============================================================
# PRODUCTS / CATEGORIES
# ============================================================


def _sold_items(rng: ReportRange):
    return OrderItem.objects.filter(order__in=revenue_orders(rng)).order_by()


def product_sales(rng: ReportRange, *, limit: int | None = None, order_by: str = "-revenue") -> dict:
    items = _sold_items(rng)
    total = sum_of(items, "line_total")

    rows = (
        items.values("product_id", "product_name", "sku")
        .annotate(
            quantity_sold=Coalesce(Sum("quantity"), 0),
            revenue=_decimal_sum("line_total"),
            orders=Count("order", distinct=True),
        )
        .order_by(order_by, "product_name")
    )
    if limit:
        rows = rows[:limit]

    return {
        "date_range": rng.as_dict(),
        "total_revenue": money_str(total),
        "products": [
            {
                "product_id": str(row["product_id"]) if row["product_id"] else None,
                "product_name": row["product_name"],
                "sku": row["sku"],
                "quantity_sold": row["quantity_sold"],
                "orders": row["orders"],
                "revenue": money_str(row["revenue"]),
                "share": share(row["revenue"], total),
            }
            for row in rows
        ],
    }


def top_products(rng: ReportRange, *, limit: int = 10) -> dict:
    return {
        "date_range": rng.as_dict(),
        "top_by_revenue": product_sales(rng, limit=limit)["products"],
        "top_by_quantity": product_sales(rng, limit=limit, order_by="-quantity_sold")["products"],
    }


def categories(rng: ReportRange) -> dict:
    items = _sold_items(rng)
    total = sum_of(items, "line_total")
    rows = (
        items.values("product__category__name")
        .annotate(quantity_sold=Coalesce(Sum("quantity"), 0), revenue=_decimal_sum("line_total"))
        .order_by("-revenue")
    )
    return {
        "date_range": rng.as_dict(),
        "total_revenue": money_str(total),
        "categories": [
            {
                "category": row["product__category__name"] or "Uncategorised",
                "quantity_sold": row["quantity_sold"],
                "revenue": money_str(row["revenue"]),
                "share": share(row["revenue"], total),
            }
            for row in rows
        ],
    }


# ============================================================
# CUSTOMERS
# ============================================================


def top_customers(rng: ReportRange, *, limit: int = 10) -> list[dict]:
    rows = (
        revenue_orders(rng)
        .order_by()
        .values("user_id", "user__email", "user__first_name", "user__last_name")
        .annotate(orders=Count("id"), spent=_decimal_sum("total"))
        .order_by("-spent", "user__email")[:limit]
    )
    return [
        {
            "user_id": str(row["user_id"]),
            "name": f"{row['user__first_name']} {row['user__last_name']}".strip() or row["user__email"],
            "email": row["user__email"],
            "orders": row["orders"],
            "spent": money_str(row["spent"]),
        }
        for row in rows
    ]


def customers(rng: ReportRange) -> dict:
    User = get_user_model()
    start, end = rng.bounds
    orders = revenue_orders(rng)

    active_ids = set(orders.order_by().values_list("user_id", flat=True).distinct())
    returning = (
        Order.objects.filter(user_id__in=active_ids, created_at__lt=start)
        .exclude(status__in=Order.NON_REVENUE_STATUSES)
        .order_by()
        .values("user_id")
        .distinct()
        .count()
    )
    revenue_total = sum_of(orders, "total")
    active = len(active_ids)

    return {
        "date_range": rng.as_dict(),
        "summary": {
            "new_customers": User.objects.filter(
                role=User.ROLE_CUSTOMER, created_at__gte=start, created_at__lt=end
            ).count(),
            "active_customers": active,
            "returning_customers": returning,
            "new_customer_rate": share(active - returning, active),
            "avg_spend": money_str(revenue_total / active if active else ZERO),
        },
        "top_customers": top_customers(rng),
    }


# ============================================================
# MONEY
# ============================================================


def _sold_orders(rng: ReportRange):
    refunded = Payment.objects.filter(status=Payment.STATUS_REFUNDED).values("order_id")
    return orders_in(rng).exclude(status=Order.STATUS_PENDING).filter(
        ~Q(status=Order.STATUS_CANCELLED) | Q(pk__in=refunded)
    )


def financial(rng: ReportRange) -> dict:
    sold = _sold_orders(rng)
    start, end = rng.bounds

    totals = sold.aggregate(
        gross=_decimal_sum("total"),
        subtotal=_decimal_sum("subtotal"),
        delivery_fees=_decimal_sum("delivery_fee"),
        discounts=_decimal_sum("discount"),
    )
    refunds = sum_of(
        Payment.objects.filter(status=Payment.STATUS_REFUNDED, order__in=sold),
        "refunded_amount",
    )
    waste_cost = sum_of(
        WasteLog.objects.filter(created_at__gte=start, created_at__lt=end).exclude(status=WasteLog.STATUS_REJECTED),
        "total_cost",
    )
    net = totals["gross"] - refunds - waste_cost

    return {
        "date_range": rng.as_dict(),
        "summary": {
            "gross_revenue": money_str(totals["gross"]),
            "product_revenue": money_str(totals["subtotal"]),
            "delivery_fees": money_str(totals["delivery_fees"]),
            "discounts": money_str(totals["discounts"]),
            "refunds": money_str(refunds),
            "waste_cost": money_str(waste_cost),
            "net_revenue": money_str(net),
        },
        "daily_breakdown": revenue(rng, group_by="day")["periods"],
    }


def payment_methods(rng: ReportRange) -> dict:
    start, end = rng.bounds
    payments = Payment.objects.filter(created_at__gte=start, created_at__lt=end).order_by()

    rows = (
        payments.values("gateway")
        .annotate(
            count=Count("id"),
            completed=Count("id", filter=Q(status=Payment.STATUS_COMPLETED)),
            failed=Count("id", filter=Q(status=Payment.STATUS_FAILED)),
            refunded=Count("id", filter=Q(status=Payment.STATUS_REFUNDED)),
            collected=Coalesce(
                Sum("amount", filter=Q(status__in=[Payment.STATUS_COMPLETED, Payment.STATUS_REFUNDED])),
                ZERO,
                output_field=DecimalField(max_digits=14, decimal_places=2),
            ),
            refunded_amount=_decimal_sum("refunded_amount"),
        )
        .order_by("gateway")
    )
    rows = list(rows)
    collected_total = sum((row["collected"] for row in rows), ZERO)
    labels = dict(Payment.GATEWAY_CHOICES)

    return {
        "date_range": rng.as_dict(),
        "total_payments": sum(row["count"] for row in rows),
        "total_collected": money_str(collected_total),
        "by_gateway": [
            {
                "gateway": row["gateway"],
                "label": labels.get(row["gateway"], row["gateway"]),
                "count": row["count"],
                "completed": row["completed"],
                "failed": row["failed"],
                "refunded": row["refunded"],
                "collected": money_str(row["collected"]),
                "refunded_amount": money_str(row["refunded_amount"]),
                "share": share(row["collected"], collected_total),
            }
            for row in rows
        ],
    }
