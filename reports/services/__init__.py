"""
Report registry.

REPORTS maps the URL slug to the builder; EXPORTS says which list inside a
report becomes the CSV and which columns it has.
"""

from .operations import deliveries, inventory, staff
from .period import ReportRange
from .sales import (
    categories,
    customers,
    dashboard,
    financial,
    orders_report,
    payment_methods,
    product_sales,
    revenue,
    sales_summary,
    top_products,
)

REPORTS = {
    "dashboard": dashboard,
    "sales-summary": sales_summary,
    "revenue": revenue,
    "orders": orders_report,
    "products": product_sales,
    "top-products": top_products,
    "categories": categories,
    "customers": customers,
    "staff": staff,
    "deliveries": deliveries,
    "inventory": inventory,
    "financial": financial,
    "payment-methods": payment_methods,
}

_PRODUCT_COLUMNS = [
    ("Product", "product_name"),
    ("SKU", "sku"),
    ("Quantity sold", "quantity_sold"),
    ("Orders", "orders"),
    ("Revenue", "revenue"),
    ("Share %", "share"),
]

_PERIOD_COLUMNS = [
    ("Period", "period"),
    ("Orders", "order_count"),
    ("Revenue", "revenue"),
    ("Subtotal", "subtotal"),
    ("Delivery fees", "delivery_fees"),
    ("Discounts", "discounts"),
]

# slug -> (key of the list inside the report, [(header, row key), ...])
EXPORTS = {
    "dashboard": ("top_products", _PRODUCT_COLUMNS),
    "sales-summary": ("daily_revenue", _PERIOD_COLUMNS),
    "revenue": ("periods", _PERIOD_COLUMNS),
    "orders": (
        "by_status",
        [("Status", "status"), ("Orders", "count"), ("Total", "total")],
    ),
    "products": ("products", _PRODUCT_COLUMNS),
    "top-products": ("top_by_revenue", _PRODUCT_COLUMNS),
    "categories": (
        "categories",
        [("Category", "category"), ("Quantity sold", "quantity_sold"), ("Revenue", "revenue"), ("Share %", "share")],
    ),
    "customers": (
        "top_customers",
        [("Name", "name"), ("Email", "email"), ("Orders", "orders"), ("Spent", "spent")],
    ),
    "staff": (
        "staff",
        [
            ("Name", "name"),
            ("Email", "email"),
            ("Role", "role"),
            ("Orders processed", "orders_processed"),
            ("Status changes", "status_changes"),
            ("Deliveries completed", "deliveries_completed"),
            ("Waste logged", "waste_logged"),
        ],
    ),
    "deliveries": (
        "by_driver",
        [("Driver", "name"), ("Delivered", "delivered"), ("On time", "on_time")],
    ),
    "inventory": (
        "stock_alerts",
        [
            ("SKU", "sku"),
            ("Name", "name"),
            ("Category", "category"),
            ("Stock", "stock"),
            ("Min stock", "min_stock"),
            ("Status", "stock_status"),
        ],
    ),
    "financial": ("daily_breakdown", _PERIOD_COLUMNS),
    "payment-methods": (
        "by_gateway",
        [
            ("Gateway", "label"),
            ("Payments", "count"),
            ("Completed", "completed"),
            ("Failed", "failed"),
            ("Refunded", "refunded"),
            ("Collected", "collected"),
            ("Refunded amount", "refunded_amount"),
        ],
    ),
}


def build_report(report_type: str, rng: ReportRange, **options) -> dict:
    builder = REPORTS[report_type]
    if report_type == "revenue":
        return builder(rng, group_by=options.get("group_by") or "day")
    return builder(rng)


def export_rows(report_type: str, rng: ReportRange, **options) -> tuple[list[str], list[list]]:
    key, columns = EXPORTS[report_type]
    data = build_report(report_type, rng, **options)
    header = [title for title, _ in columns]
    rows = [[row.get(field, "") for _, field in columns] for row in data[key]]
    return header, rows


__all__ = [
    "EXPORTS",
    "REPORTS",
    "ReportRange",
    "build_report",
    "export_rows",
]
