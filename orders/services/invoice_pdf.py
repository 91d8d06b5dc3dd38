# orders/services/invoice_pdf.py

"""
INVOICE PDF

render_invoice_pdf(invoice) -> bytes

A4 document: store header, invoice meta, bill-to block, line items,
totals and the order notes. Rendered with reportlab's platypus layer.
"""

from __future__ import annotations

import logging
from io import BytesIO

from django.utils import timezone
from django.utils.html import escape
from reportlab.lib import colors
from reportlab.lib.pagesizes import A4
from reportlab.lib.styles import getSampleStyleSheet
from reportlab.lib.units import mm
from reportlab.platypus import Paragraph, SimpleDocTemplate, Spacer, Table, TableStyle

from orders.models import Invoice
from store.services import settings as site_settings

logger = logging.getLogger(__name__)

BRAND = colors.HexColor("#8b1e1e")


def _money(value) -> str:
    return f"${value:,.2f}"


def _date(value) -> str:
    if value is None:
        return "-"
    if hasattr(value, "tzinfo"):
        value = timezone.localtime(value)
    return f"{value:%d %b %Y}"


def _header(invoice: Invoice, styles) -> list:
    store_lines = [
        site_settings.get_setting("store_address", ""),
        site_settings.get_setting("store_email", ""),
        site_settings.get_setting("store_phone", ""),
    ]
    abn = site_settings.get_setting("store_abn", "")
    if abn:
        store_lines.append(f"ABN {abn}")

    left = [Paragraph(f"<b>{escape(site_settings.store_name())}</b>", styles["Title"])]
    left += [Paragraph(escape(line), styles["Normal"]) for line in store_lines if line]

    right = [
        Paragraph("<b>TAX INVOICE</b>", styles["Heading2"]),
        Paragraph(f"Invoice: {escape(invoice.invoice_number)}", styles["Normal"]),
        Paragraph(f"Status: {escape(invoice.get_status_display())}", styles["Normal"]),
        Paragraph(f"Issued: {_date(invoice.issued_at)}", styles["Normal"]),
        Paragraph(f"Due: {_date(invoice.due_date)}", styles["Normal"]),
    ]
    if invoice.paid_at:
        right.append(Paragraph(f"Paid: {_date(invoice.paid_at)}", styles["Normal"]))

    table = Table([[left, right]], colWidths=[100 * mm, 70 * mm])
    table.setStyle(TableStyle([("VALIGN", (0, 0), (-1, -1), "TOP")]))
    return [table, Spacer(1, 8 * mm)]


def _bill_to(invoice: Invoice, styles) -> list:
    order = invoice.order
    customer = order.user
    lines = [customer.full_name, customer.email, customer.phone]
    if order.address_id:
        lines.append(order.address.full_address)

    block = [Paragraph("<b>Bill to</b>", styles["Heading4"])]
    block += [Paragraph(escape(line), styles["Normal"]) for line in lines if line]
    block.append(Paragraph(f"Order: {escape(order.order_number)}", styles["Normal"]))
    return block + [Spacer(1, 6 * mm)]


def _lines(invoice: Invoice) -> Table:
    rows = [["Product", "Qty", "Unit price", "Total"]]
    for item in invoice.order.items.all():
        rows.append([item.product_name, str(item.quantity), _money(item.unit_price), _money(item.line_total)])

    rows.append(["", "", "Subtotal", _money(invoice.subtotal)])
    rows.append(["", "", "Delivery", _money(invoice.delivery_fee)])
    if invoice.discount:
        rows.append(["", "", "Discount", f"-{_money(invoice.discount)}"])
    rows.append(["", "", "Total", _money(invoice.total)])

    totals_start = len(rows) - (4 if invoice.discount else 3)
    table = Table(rows, colWidths=[85 * mm, 20 * mm, 35 * mm, 30 * mm], repeatRows=1)
    table.setStyle(
        TableStyle(
            [
                ("BACKGROUND", (0, 0), (-1, 0), BRAND),
                ("TEXTCOLOR", (0, 0), (-1, 0), colors.white),
                ("FONTNAME", (0, 0), (-1, 0), "Helvetica-Bold"),
                ("ALIGN", (1, 0), (-1, -1), "RIGHT"),
                ("LINEBELOW", (0, 1), (-1, totals_start - 1), 0.25, colors.lightgrey),
                ("LINEABOVE", (2, -1), (-1, -1), 1, colors.black),
                ("FONTNAME", (2, -1), (-1, -1), "Helvetica-Bold"),
            ]
        )
    )
    return table


def render_invoice_pdf(invoice: Invoice) -> bytes:
    styles = getSampleStyleSheet()
    buffer = BytesIO()
    doc = SimpleDocTemplate(
        buffer,
        pagesize=A4,
        title=invoice.invoice_number,
        author=site_settings.store_name(),
        leftMargin=20 * mm,
        rightMargin=20 * mm,
        topMargin=18 * mm,
        bottomMargin=18 * mm,
    )

    story = _header(invoice, styles) + _bill_to(invoice, styles) + [_lines(invoice)]
    if invoice.order.notes:
        story += [
            Spacer(1, 8 * mm),
            Paragraph("<b>Notes</b>", styles["Heading4"]),
            Paragraph(escape(invoice.order.notes), styles["Normal"]),
        ]
    story += [Spacer(1, 10 * mm), Paragraph("Thank you for shopping with us.", styles["Italic"])]

    doc.build(story)
    logger.info("Invoice PDF rendered", extra={"invoice_number": invoice.invoice_number})
    return buffer.getvalue()
