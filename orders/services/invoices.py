# orders/services/invoices.py

"""
INVOICES

issue_invoice()        -> creates the order's invoice (idempotent)
mark_paid()            -> paid + paid_at
cancel_invoice()       -> cancelled (no-op when there is none)
set_invoice_status()   -> manual change, limited to INVOICE_TRANSITIONS
mark_overdue_invoices()-> pending invoices past their due date become overdue
invoice_stats()        -> counts and amounts per status

Numbers: INV-YYYYMM-NNNN, sequence restarts each month.
"""

from __future__ import annotations

import logging
from datetime import timedelta
from decimal import Decimal

from django.db import transaction
from django.db.models import Count, Sum
from django.db.models.functions import Coalesce
from django.utils import timezone

from orders.models import Invoice, Order

logger = logging.getLogger(__name__)

DUE_DAYS = 7


class InvoiceError(Exception):
    code = "INVOICE_ERROR"


class InvoiceTransitionError(InvoiceError):
    code = "INVALID_TRANSITION"


# paid and cancelled are terminal; refunds go through the order refund flow
INVOICE_TRANSITIONS = {
    Invoice.STATUS_DRAFT: {Invoice.STATUS_PENDING, Invoice.STATUS_CANCELLED},
    Invoice.STATUS_PENDING: {Invoice.STATUS_PAID, Invoice.STATUS_OVERDUE, Invoice.STATUS_CANCELLED},
    Invoice.STATUS_OVERDUE: {Invoice.STATUS_PAID, Invoice.STATUS_CANCELLED},
    Invoice.STATUS_PAID: set(),
    Invoice.STATUS_CANCELLED: set(),
}


def next_invoice_number(now=None) -> str:
    now = now or timezone.localtime()
    prefix = f"INV-{now:%Y%m}-"
    last = (
        Invoice.objects.select_for_update()
        .filter(invoice_number__startswith=prefix)
        .order_by("-invoice_number")
        .values_list("invoice_number", flat=True)
        .first()
    )
    sequence = int(last.rsplit("-", 1)[1]) + 1 if last else 1
    return f"{prefix}{sequence:04d}"


@transaction.atomic
def issue_invoice(order: Order) -> Invoice:
    existing = Invoice.objects.filter(order=order).first()
    if existing is not None:
        return existing

    now = timezone.now()
    invoice = Invoice.objects.create(
        order=order,
        invoice_number=next_invoice_number(timezone.localtime(now)),
        status=Invoice.STATUS_PENDING,
        subtotal=order.subtotal,
        delivery_fee=order.delivery_fee,
        discount=order.discount,
        total=order.total,
        issued_at=now,
        due_date=(timezone.localtime(now) + timedelta(days=DUE_DAYS)).date(),
    )
    logger.info(
        "Invoice issued",
        extra={"order_id": str(order.pk), "invoice_number": invoice.invoice_number},
    )
    return invoice


@transaction.atomic
def mark_paid(order: Order) -> Invoice:
    """Cancelled invoices stay cancelled."""
    invoice = issue_invoice(order)
    if invoice.status == Invoice.STATUS_CANCELLED:
        logger.warning("Refusing to mark a cancelled invoice paid", extra={"invoice_number": invoice.invoice_number})
        return invoice
    if invoice.status != Invoice.STATUS_PAID:
        invoice.status = Invoice.STATUS_PAID
        invoice.paid_at = timezone.now()
        invoice.save(update_fields=["status", "paid_at"])
    return invoice


def cancel_invoice(order: Order) -> Invoice | None:
    invoice = Invoice.objects.filter(order=order).first()
    if invoice is None or invoice.status == Invoice.STATUS_CANCELLED:
        return invoice
    invoice.status = Invoice.STATUS_CANCELLED
    invoice.save(update_fields=["status"])
    return invoice


@transaction.atomic
def set_invoice_status(invoice: Invoice, new_status: str, *, user=None) -> Invoice:
    invoice = Invoice.objects.select_for_update().get(pk=invoice.pk)
    if new_status == invoice.status:
        return invoice
    if new_status not in INVOICE_TRANSITIONS.get(invoice.status, set()):
        raise InvoiceTransitionError(f"Cannot change invoice from {invoice.status} to {new_status}.")

    invoice.status = new_status
    fields = ["status"]
    if new_status == Invoice.STATUS_PAID:
        invoice.paid_at = timezone.now()
        fields.append("paid_at")
    invoice.save(update_fields=fields)

    logger.info(
        "Invoice status changed",
        extra={
            "invoice_number": invoice.invoice_number,
            "status": new_status,
            "by": str(user.pk) if user is not None else None,
        },
    )
    return invoice


def mark_overdue_invoices(today=None) -> int:
    today = today or timezone.localdate()
    updated = Invoice.objects.filter(status=Invoice.STATUS_PENDING, due_date__lt=today).update(
        status=Invoice.STATUS_OVERDUE
    )
    if updated:
        logger.info("Invoices marked overdue", extra={"count": updated})
    return updated


def invoice_stats() -> dict:
    zero = Decimal("0.00")
    rows = {
        row["status"]: row
        for row in Invoice.objects.order_by()
        .values("status")
        .annotate(n=Count("id"), amount=Coalesce(Sum("total"), zero))
    }

    def count(status):
        return rows.get(status, {}).get("n", 0)

    def amount(*statuses):
        return sum((rows.get(s, {}).get("amount", zero) for s in statuses), zero)

    return {
        "total_invoices": sum(row["n"] for row in rows.values()),
        "by_status": {value: count(value) for value, _ in Invoice.STATUS_CHOICES},
        "paid_amount": f"{amount(Invoice.STATUS_PAID):.2f}",
        "outstanding_amount": f"{amount(Invoice.STATUS_PENDING, Invoice.STATUS_OVERDUE):.2f}",
        "overdue_amount": f"{amount(Invoice.STATUS_OVERDUE):.2f}",
    }
