# inventory/services/stock.py

"""
STOCK SERVICE

Purpose:
- The only code path allowed to change Product.stock.
- Every change writes exactly one immutable InventoryLog row.

Rules:
- Product rows are locked (select_for_update) for the read-modify-write.
- Stock never goes below zero; deductions beyond what is on hand raise
  InsufficientStockError (except manual "decrease" which floors at zero).
- Any deduction that leaves a product at or below min_stock alerts staff.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from decimal import Decimal

from django.core.exceptions import ValidationError
from django.db import transaction
from django.utils import timezone

from inventory.models import InventoryLog, WasteLog
from notifications.models import Notification
from notifications.services import notify_staff
from products.models import Product

logger = logging.getLogger(__name__)


CHANGE_INCREASE = "increase"
CHANGE_DECREASE = "decrease"
CHANGE_ADJUSTMENT = "adjustment"
CHANGE_TYPES = {CHANGE_INCREASE, CHANGE_DECREASE, CHANGE_ADJUSTMENT}


class StockError(Exception):
    """Domain error for stock operations."""

    code = "STOCK_ERROR"


class InsufficientStockError(StockError):
    code = "INSUFFICIENT_STOCK"

    def __init__(self, product: Product, requested: int, available: int):
        self.product = product
        self.requested = requested
        self.available = available
        super().__init__(
            f"Insufficient stock for {product.name}. Available: {available}, requested: {requested}."
        )


class InvalidStockOperationError(StockError):
    code = "INVALID_STOCK_OPERATION"


class WasteAlreadyReviewedError(StockError):
    code = "ALREADY_REVIEWED"


@dataclass(frozen=True)
class StockChange:
    product_id: object
    log_id: object
    type: str
    quantity: int
    stock_before: int
    stock_after: int


# =====================================================
# INTERNALS
# =====================================================

def _lock(product) -> Product:
    pk = product.pk if isinstance(product, Product) else product
    return Product.objects.select_for_update().get(pk=pk)


def _positive_int(value, field: str) -> int:
    if isinstance(value, bool):
        raise InvalidStockOperationError(f"{field} must be an integer")
    try:
        n = int(value)
    except (TypeError, ValueError):
        raise InvalidStockOperationError(f"{field} must be an integer")
    if n <= 0:
        raise InvalidStockOperationError(f"{field} must be greater than zero")
    return n


def _write(
    product: Product,
    *,
    log_type: str,
    new_stock: int,
    reason: str,
    user=None,
    order=None,
) -> StockChange:
    before = int(product.stock)
    quantity = abs(new_stock - before)

    product.stock = new_stock
    product.save(update_fields=["stock", "updated_at"])

    try:
        log = InventoryLog.objects.create(
            product=product,
            type=log_type,
            quantity=quantity,
            stock_before=before,
            stock_after=new_stock,
            reason=(reason or "")[:255],
            order=order,
            user=user if getattr(user, "is_authenticated", False) else None,
        )
    except ValidationError as exc:
        raise InvalidStockOperationError("; ".join(exc.messages)) from exc

    logger.info(
        "Stock changed",
        extra={
            "product_id": str(product.pk),
            "type": log_type,
            "quantity": quantity,
            "stock_before": before,
            "stock_after": new_stock,
            "order_id": str(order.pk) if order is not None else None,
        },
    )

    return StockChange(
        product_id=product.pk,
        log_id=log.pk,
        type=log_type,
        quantity=quantity,
        stock_before=before,
        stock_after=new_stock,
    )


def _alert_if_low(product: Product) -> None:
    if product.stock > product.min_stock:
        return

    if product.stock <= 0:
        title = f"Out of stock: {product.name}"
    else:
        title = f"Low stock: {product.name}"

    notify_staff(
        type=Notification.TYPE_STOCK_ALERT,
        title=title,
        message=f"{product.name} has {product.stock} left (minimum {product.min_stock}).",
        data={"product_id": str(product.pk), "stock": product.stock, "min_stock": product.min_stock},
    )


# =====================================================
# MANUAL OPERATIONS
# =====================================================

@transaction.atomic
def receive_stock(*, product, quantity, user=None, supplier: str = "", notes: str = "") -> StockChange:
    qty = _positive_int(quantity, "quantity")
    locked = _lock(product)

    supplier = (supplier or "").strip()
    reason = f"Stock received from {supplier}" if supplier else "Stock received"
    if notes:
        reason = f"{reason}: {notes}"

    return _write(
        locked,
        log_type=InventoryLog.TYPE_ADDITION,
        new_stock=int(locked.stock) + qty,
        reason=reason,
        user=user,
    )


@transaction.atomic
def set_stock_level(*, product, new_quantity, reason: str, user=None) -> StockChange:
    """Stock take: set on-hand to an absolute count."""
    if isinstance(new_quantity, bool):
        raise InvalidStockOperationError("new_quantity must be an integer")
    try:
        target = int(new_quantity)
    except (TypeError, ValueError):
        raise InvalidStockOperationError("new_quantity must be an integer")
    if target < 0:
        raise InvalidStockOperationError("new_quantity cannot be negative")

    locked = _lock(product)
    if target == int(locked.stock):
        raise InvalidStockOperationError("New quantity is the same as current stock.")

    change = _write(
        locked,
        log_type=InventoryLog.TYPE_ADJUSTMENT,
        new_stock=target,
        reason=reason or "Manual adjustment",
        user=user,
    )
    if change.stock_after < change.stock_before:
        _alert_if_low(locked)
    return change


@transaction.atomic
def change_stock(*, product, quantity, change_type: str, reason: str = "", user=None) -> StockChange:
    """
    Admin product stock control.

    increase   -> stock + |q|            (addition)
    decrease   -> max(stock - |q|, 0)    (deduction)
    adjustment -> |q|                    (adjustment)
    """
    if change_type not in CHANGE_TYPES:
        raise InvalidStockOperationError(f"type must be one of {sorted(CHANGE_TYPES)}")

    if isinstance(quantity, bool):
        raise InvalidStockOperationError("quantity must be an integer")
    try:
        q = abs(int(quantity))
    except (TypeError, ValueError):
        raise InvalidStockOperationError("quantity must be an integer")
    if q == 0 and change_type != CHANGE_ADJUSTMENT:
        raise InvalidStockOperationError("quantity cannot be 0")

    locked = _lock(product)
    before = int(locked.stock)

    if change_type == CHANGE_INCREASE:
        log_type, target = InventoryLog.TYPE_ADDITION, before + q
    elif change_type == CHANGE_DECREASE:
        log_type, target = InventoryLog.TYPE_DEDUCTION, max(before - q, 0)
    else:
        log_type, target = InventoryLog.TYPE_ADJUSTMENT, q

    if target == before:
        raise InvalidStockOperationError("Stock level is unchanged.")

    change = _write(locked, log_type=log_type, new_stock=target, reason=reason, user=user)
    if target < before:
        _alert_if_low(locked)
    return change


# =====================================================
# ORDER-DRIVEN
# =====================================================

@transaction.atomic
def deduct_for_order(*, order, user=None) -> list[StockChange]:
    """
    Take every order line off the shelf. All-or-nothing: the first short
    line raises and the surrounding transaction rolls back.
    """
    changes: list[StockChange] = []
    low: list[Product] = []

    # Lock in a stable order to avoid deadlocks between concurrent checkouts.
    items = sorted(
        (i for i in order.items.all() if i.product_id is not None),
        key=lambda i: str(i.product_id),
    )

    for item in items:
        locked = _lock(item.product_id)
        if item.quantity > locked.stock:
            raise InsufficientStockError(locked, item.quantity, int(locked.stock))

        changes.append(
            _write(
                locked,
                log_type=InventoryLog.TYPE_DEDUCTION,
                new_stock=int(locked.stock) - int(item.quantity),
                reason=f"Order {order.order_number}",
                user=user,
                order=order,
            )
        )
        if locked.stock <= locked.min_stock:
            low.append(locked)

    for product in low:
        _alert_if_low(product)

    return changes


@transaction.atomic
def restore_for_order(*, order, user=None, reason: str = "") -> list[StockChange]:
    """
    Put an order's lines back on the shelf (cancel / refund).
    Only lines that were actually deducted for this order are restored.
    """
    deducted = set(
        InventoryLog.objects.filter(order=order, type=InventoryLog.TYPE_DEDUCTION).values_list(
            "product_id", flat=True
        )
    )
    restored = set(
        InventoryLog.objects.filter(order=order, type=InventoryLog.TYPE_ADDITION).values_list(
            "product_id", flat=True
        )
    )

    changes: list[StockChange] = []
    items = sorted(
        (i for i in order.items.all() if i.product_id in deducted and i.product_id not in restored),
        key=lambda i: str(i.product_id),
    )

    for item in items:
        locked = _lock(item.product_id)
        changes.append(
            _write(
                locked,
                log_type=InventoryLog.TYPE_ADDITION,
                new_stock=int(locked.stock) + int(item.quantity),
                reason=reason or f"Order {order.order_number} cancelled",
                user=user,
                order=order,
            )
        )

    return changes


# =====================================================
# WASTE
# =====================================================

@transaction.atomic
def log_waste(*, product, quantity, reason: str, notes: str = "", user=None) -> WasteLog:
    qty = _positive_int(quantity, "quantity")
    if reason not in dict(WasteLog.REASON_CHOICES):
        raise InvalidStockOperationError("Invalid waste reason")

    locked = _lock(product)
    if qty > locked.stock:
        raise InsufficientStockError(locked, qty, int(locked.stock))

    waste = WasteLog.objects.create(
        product=locked,
        quantity=qty,
        reason=reason,
        notes=notes or "",
        unit_cost=Decimal(locked.current_price),
        logged_by=user,
    )

    _write(
        locked,
        log_type=InventoryLog.TYPE_WASTE,
        new_stock=int(locked.stock) - qty,
        reason=f"Waste ({reason})" + (f": {notes}" if notes else ""),
        user=user,
    )
    _alert_if_low(locked)

    return waste


@transaction.atomic
def review_waste(*, waste_log: WasteLog, approved: bool, reviewer, notes: str = "") -> WasteLog:
    """
    approved -> write-off stands
    rejected -> stock put back (addition row)
    """
    locked_log = WasteLog.objects.select_for_update().get(pk=waste_log.pk)
    if locked_log.is_reviewed:
        raise WasteAlreadyReviewedError("Waste log has already been reviewed")

    locked_log.reviewed_by = reviewer
    locked_log.reviewed_at = timezone.now()

    if approved:
        locked_log.status = WasteLog.STATUS_APPROVED
    else:
        locked_log.status = WasteLog.STATUS_REJECTED
        locked_log.rejection_notes = notes or ""
        product = _lock(locked_log.product_id)
        _write(
            product,
            log_type=InventoryLog.TYPE_ADDITION,
            new_stock=int(product.stock) + int(locked_log.quantity),
            reason="Waste log rejected",
            user=reviewer,
        )

    locked_log.save()

    logger.info(
        "Waste log reviewed",
        extra={"waste_log_id": str(locked_log.pk), "status": locked_log.status},
    )
    return locked_log
