from .invoice_pdf import render_invoice_pdf
from .invoices import (
    INVOICE_TRANSITIONS,
    InvoiceError,
    InvoiceTransitionError,
    cancel_invoice,
    invoice_stats,
    issue_invoice,
    mark_overdue_invoices,
    mark_paid,
    set_invoice_status,
)
from .order_lifecycle import (
    ALLOWED_TRANSITIONS,
    InvalidAssigneeError,
    OrderError,
    OrderMethodError,
    OrderNotCancellableError,
    OrderTransitionError,
    add_staff_note,
    assign_order,
    can_transition,
    cancel_order,
    mark_out_for_delivery,
    mark_picked_up,
    record_history,
    report_delivery_issue,
    resolve_delivery_issue,
    transition,
)

__all__ = [
    "ALLOWED_TRANSITIONS",
    "INVOICE_TRANSITIONS",
    "InvoiceError",
    "InvoiceTransitionError",
    "InvalidAssigneeError",
    "OrderError",
    "OrderMethodError",
    "OrderNotCancellableError",
    "OrderTransitionError",
    "add_staff_note",
    "assign_order",
    "can_transition",
    "cancel_invoice",
    "cancel_order",
    "invoice_stats",
    "issue_invoice",
    "mark_out_for_delivery",
    "mark_overdue_invoices",
    "mark_paid",
    "mark_picked_up",
    "record_history",
    "render_invoice_pdf",
    "report_delivery_issue",
    "resolve_delivery_issue",
    "set_invoice_status",
    "transition",
]
