# orders/services/order_lifecycle.py

"""
ORDER LIFECYCLE

Single source of truth for order status changes.

GUARANTEES:
- Only ALLOWED_TRANSITIONS are accepted (delivered / cancelled are terminal)
- Every change writes one OrderStatusHistory row and notifies the customer
- Cancelling restores stock and cancels the invoice
- Delivering stamps delivered_at and completes a pending COD payment
"""

from __future__ import annotations

import logging

from django.db import transaction
from django.utils import timezone

from notifications.models import Notification
from notifications.services import notify
from orders.models import Order, OrderStatusHistory
from permissions.roles import STAFF_ROLES

logger = logging.getLogger(__name__)


# ============================================================
# DOMAIN ERRORS
# ============================================================


class OrderError(Exception):
    code = "ORDER_ERROR"


class OrderTransitionError(OrderError):
    code = "INVALID_TRANSITION"


class OrderNotCancellableError(OrderError):
    code = "NOT_CANCELLABLE"


class InvalidAssigneeError(OrderError):
    code = "INVALID_ASSIGNEE"


class OrderMethodError(OrderError):
    code = "INVALID_DELIVERY_METHOD"


# ============================================================
# STATE DEFINITIONS
# ============================================================

TERMINAL_STATES = {Order.STATUS_DELIVERED, Order.STATUS_CANCELLED}

ALLOWED_TRANSITIONS = {
    Order.STATUS_PENDING: {
        Order.STATUS_CONFIRMED,
        Order.STATUS_PROCESSING,
        Order.STATUS_CANCELLED,
    },
    Order.STATUS_CONFIRMED: {
        Order.STATUS_PROCESSING,
        Order.STATUS_CANCELLED,
    },
    Order.STATUS_PROCESSING: {
        Order.STATUS_READY,
        Order.STATUS_CANCELLED,
    },
    Order.STATUS_READY: {
        Order.STATUS_OUT_FOR_DELIVERY,
        Order.STATUS_DELIVERED,
        Order.STATUS_CANCELLED,
    },
    Order.STATUS_OUT_FOR_DELIVERY: {
        Order.STATUS_DELIVERED,
        Order.STATUS_CANCELLED,
    },
}

STATUS_MESSAGES = {
    Order.STATUS_CONFIRMED: "Your order has been confirmed.",
    Order.STATUS_PROCESSING: "We are preparing your order.",
    Order.STATUS_READY: "Your order is ready.",
    Order.STATUS_OUT_FOR_DELIVERY: "Your order is out for delivery.",
    Order.STATUS_DELIVERED: "Your order has been delivered.",
    Order.STATUS_CANCELLED: "Your order has been cancelled.",
}


def can_transition(*, from_status: str, to_status: str) -> bool:
    if from_status in TERMINAL_STATES:
        return False
    return to_status in ALLOWED_TRANSITIONS.get(from_status, set())


def _actor(user):
    return user if getattr(user, "is_authenticated", False) else None


def record_history(order: Order, status: str, *, notes: str = "", user=None) -> OrderStatusHistory:
    return OrderStatusHistory.objects.create(order=order, status=status, notes=notes, changed_by=_actor(user))


def _lock(order) -> Order:
    return Order.objects.select_for_update().get(pk=order.pk)


# ============================================================
# TRANSITIONS
# ============================================================


@transaction.atomic
def transition(order: Order, new_status: str, *, user=None, notes: str = "", force: bool = False) -> Order:
    """
    force=True skips the transition map (refunds may cancel a delivered
    order); moving to the current status is still rejected.
    """
    locked = _lock(order)
    old_status = locked.status

    if new_status not in dict(Order.STATUS_CHOICES):
        raise OrderTransitionError(f"Unknown status '{new_status}'.")
    if force:
        if old_status == new_status:
            raise OrderTransitionError(f"Order is already {new_status}.")
    elif not can_transition(from_status=old_status, to_status=new_status):
        raise OrderTransitionError(f"Cannot transition from {old_status} to {new_status}.")

    now = timezone.now()
    locked.status = new_status
    update_fields = ["status", "updated_at"]

    if new_status == Order.STATUS_DELIVERED:
        locked.delivered_at = now
        update_fields.append("delivered_at")

    if new_status == Order.STATUS_CANCELLED:
        locked.cancelled_at = now
        locked.cancellation_reason = notes or locked.cancellation_reason
        update_fields += ["cancelled_at", "cancellation_reason"]

    locked.save(update_fields=update_fields)
    record_history(locked, new_status, notes=notes, user=user)

    if new_status == Order.STATUS_CANCELLED:
        _on_cancelled(locked, user=user, reason=notes)
    elif new_status == Order.STATUS_DELIVERED:
        _on_delivered(locked, user=user)

    notify(
        locked.user,
        type=Notification.TYPE_ORDER_STATUS,
        title=f"Order {locked.order_number}",
        message=STATUS_MESSAGES.get(new_status, f"Status changed to {new_status}."),
        data={"order_id": str(locked.pk), "status": new_status},
    )

    logger.info(
        "Order status changed",
        extra={
            "order_id": str(locked.pk),
            "order_number": locked.order_number,
            "from": old_status,
            "to": new_status,
        },
    )
    return locked


def _on_cancelled(order: Order, *, user=None, reason: str = "") -> None:
    from inventory.services import restore_for_order
    from orders.services.invoices import cancel_invoice

    restore_for_order(order=order, user=_actor(user), reason=f"Order {order.order_number} cancelled")
    cancel_invoice(order)


def _on_delivered(order: Order, *, user=None) -> None:
    from payments.services.payment_flow import complete_cod_on_delivery

    complete_cod_on_delivery(order)


def cancel_order(order: Order, *, user=None, reason: str = "") -> Order:
    """Customer-initiated cancel: only while pending or confirmed."""
    if not order.can_be_cancelled:
        raise OrderNotCancellableError("This order can no longer be cancelled.")
    return transition(order, Order.STATUS_CANCELLED, user=user, notes=reason or "Cancelled by customer")


def mark_out_for_delivery(order: Order, *, user=None) -> Order:
    if order.is_pickup:
        raise OrderMethodError("Pickup orders are not delivered.")
    if order.status != Order.STATUS_READY:
        raise OrderTransitionError("Order must be ready before it can go out for delivery.")
    return transition(order, Order.STATUS_OUT_FOR_DELIVERY, user=user, notes="Out for delivery")


def mark_picked_up(order: Order, *, user=None) -> Order:
    if not order.is_pickup:
        raise OrderMethodError("Only pickup orders can be marked as picked up.")
    if order.status != Order.STATUS_READY:
        raise OrderTransitionError("Order must be ready before it can be picked up.")
    return transition(order, Order.STATUS_DELIVERED, user=user, notes="Picked up by customer")


# ============================================================
# STAFF OPERATIONS (no status change)
# ============================================================


@transaction.atomic
def assign_order(order: Order, assignee, *, user=None) -> Order:
    if assignee is None or getattr(assignee, "role", None) not in STAFF_ROLES or not assignee.is_active:
        raise InvalidAssigneeError("Orders can only be assigned to active staff members.")

    locked = _lock(order)
    locked.assigned_to = assignee
    locked.assigned_at = timezone.now()
    locked.save(update_fields=["assigned_to", "assigned_at", "updated_at"])

    notify(
        assignee,
        type=Notification.TYPE_DELIVERY,
        title=f"Order {locked.order_number} assigned to you",
        data={"order_id": str(locked.pk)},
    )
    logger.info(
        "Order assigned",
        extra={"order_id": str(locked.pk), "assigned_to": str(assignee.pk)},
    )
    return locked


@transaction.atomic
def add_staff_note(order: Order, note: str, *, user=None) -> Order:
    locked = _lock(order)
    notes = list(locked.staff_notes or [])
    notes.append(
        {
            "note": note,
            "user": getattr(user, "email", None),
            "created_at": timezone.now().isoformat(),
        }
    )
    locked.staff_notes = notes
    locked.save(update_fields=["staff_notes", "updated_at"])
    return locked


@transaction.atomic
def report_delivery_issue(order: Order, issue: str, *, user=None) -> Order:
    locked = _lock(order)
    locked.delivery_issue = issue
    locked.delivery_issue_reported_at = timezone.now()
    locked.save(update_fields=["delivery_issue", "delivery_issue_reported_at", "updated_at"])
    logger.warning("Delivery issue reported", extra={"order_id": str(locked.pk)})
    return locked


@transaction.atomic
def resolve_delivery_issue(order: Order, *, user=None, resolution: str = "") -> Order:
    locked = _lock(order)
    if resolution:
        locked = add_staff_note(locked, f"Delivery issue resolved: {resolution}", user=user)
    locked.delivery_issue = ""
    locked.delivery_issue_reported_at = None
    locked.save(update_fields=["delivery_issue", "delivery_issue_reported_at", "updated_at"])
    return locked
