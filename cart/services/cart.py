# cart/services/cart.py

"""
CART SERVICE

Rules:
- One cart per user; one row per product (re-adding merges quantities).
- unit_price is a snapshot of Product.current_price, refreshed on add,
  update, validate and sync.
- Quantities never exceed what is on the shelf at the time of the call.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from decimal import Decimal

from django.db import transaction

from cart.models import Cart, CartItem, WishlistItem
from inventory.services import InsufficientStockError
from products.models import Product
from store.services import settings as site_settings

logger = logging.getLogger(__name__)

ISSUE_UNAVAILABLE = "unavailable"
ISSUE_INSUFFICIENT_STOCK = "insufficient_stock"
ISSUE_PRICE_CHANGED = "price_changed"


class CartError(Exception):
    code = "CART_ERROR"


class ProductUnavailableError(CartError):
    code = "PRODUCT_UNAVAILABLE"


class InvalidQuantityError(CartError):
    code = "INVALID_QUANTITY"


@dataclass(frozen=True)
class CartSummary:
    subtotal: Decimal
    item_count: int
    minimum_order: Decimal
    meets_minimum: bool
    amount_to_minimum: Decimal

    def as_dict(self) -> dict:
        return {
            "subtotal": f"{self.subtotal:.2f}",
            "item_count": self.item_count,
            "minimum_order": f"{self.minimum_order:.2f}",
            "meets_minimum": self.meets_minimum,
            "amount_to_minimum": f"{self.amount_to_minimum:.2f}",
        }


def get_cart(user) -> Cart:
    cart, _ = Cart.objects.get_or_create(user=user)
    return cart


def cart_items(cart: Cart):
    return cart.items.select_related("product", "product__category")


def summarize(cart: Cart) -> CartSummary:
    items = list(cart_items(cart))
    subtotal = sum((i.line_total for i in items), Decimal("0.00"))
    minimum = site_settings.minimum_order_amount()
    return CartSummary(
        subtotal=subtotal,
        item_count=sum(i.quantity for i in items),
        minimum_order=minimum,
        meets_minimum=subtotal >= minimum,
        amount_to_minimum=max(minimum - subtotal, Decimal("0.00")),
    )


def _positive(quantity) -> int:
    try:
        n = int(quantity)
    except (TypeError, ValueError):
        raise InvalidQuantityError("Quantity must be a whole number.")
    if n < 1:
        raise InvalidQuantityError("Quantity must be at least 1.")
    return n


def _active_product(product_id) -> Product:
    product = Product.objects.filter(pk=product_id, is_active=True).first()
    if product is None:
        raise ProductUnavailableError("Product not found or unavailable.")
    return product


@transaction.atomic
def add_item(user, *, product_id, quantity) -> CartItem:
    qty = _positive(quantity)
    product = _active_product(product_id)
    cart = get_cart(user)

    item = CartItem.objects.select_for_update().filter(cart=cart, product=product).first()
    wanted = qty + (item.quantity if item else 0)
    if wanted > product.stock:
        raise InsufficientStockError(product, wanted, int(product.stock))

    if item is None:
        item = CartItem.objects.create(cart=cart, product=product, quantity=qty, unit_price=product.current_price)
    else:
        item.quantity = wanted
        item.unit_price = product.current_price
        item.save(update_fields=["quantity", "unit_price", "updated_at"])

    cart.save(update_fields=["updated_at"])
    logger.info("Cart item added", extra={"user_id": str(user.pk), "product_id": str(product.pk), "quantity": wanted})
    return item


@transaction.atomic
def update_item(item: CartItem, *, quantity) -> CartItem:
    qty = _positive(quantity)
    product = item.product
    if not product.is_active:
        raise ProductUnavailableError(f"{product.name} is no longer available.")
    if qty > product.stock:
        raise InsufficientStockError(product, qty, int(product.stock))

    item.quantity = qty
    item.unit_price = product.current_price
    item.save(update_fields=["quantity", "unit_price", "updated_at"])
    return item


def remove_item(item: CartItem) -> None:
    item.delete()


def clear_cart(user) -> int:
    deleted, _ = CartItem.objects.filter(cart__user=user).delete()
    return deleted


@transaction.atomic
def validate_cart(user) -> dict:
    """
    Checks every line against the current catalog. Price snapshots are
    refreshed; unavailable and short lines are reported, not removed.
    """
    cart = get_cart(user)
    issues: list[dict] = []
    valid_items = 0
    items = list(cart_items(cart))

    for item in items:
        product = item.product
        if not product.is_active or product.stock <= 0:
            issues.append(
                {
                    "type": ISSUE_UNAVAILABLE,
                    "item_id": str(item.pk),
                    "product_id": str(product.pk),
                    "product_name": product.name,
                    "message": f"{product.name} is no longer available.",
                }
            )
            continue

        ok = True
        if item.quantity > product.stock:
            ok = False
            issues.append(
                {
                    "type": ISSUE_INSUFFICIENT_STOCK,
                    "item_id": str(item.pk),
                    "product_id": str(product.pk),
                    "product_name": product.name,
                    "requested": item.quantity,
                    "available": int(product.stock),
                    "message": f"Only {product.stock} of {product.name} available.",
                }
            )

        current = product.current_price
        if item.unit_price != current:
            issues.append(
                {
                    "type": ISSUE_PRICE_CHANGED,
                    "item_id": str(item.pk),
                    "product_id": str(product.pk),
                    "product_name": product.name,
                    "old_price": f"{item.unit_price:.2f}",
                    "new_price": f"{current:.2f}",
                    "message": f"The price of {product.name} has changed.",
                }
            )
            item.unit_price = current
            item.save(update_fields=["unit_price", "updated_at"])

        if ok:
            valid_items += 1

    return {
        "valid": not any(i["type"] != ISSUE_PRICE_CHANGED for i in issues),
        "issues": issues,
        "valid_items": valid_items,
        "total_items": len(items),
    }


@transaction.atomic
def sync_cart(user, items: list[dict]) -> dict:
    """
    Merge a guest cart into the user's cart. For each product the larger
    of the two quantities wins, capped at stock; unknown, inactive or
    out-of-stock products are skipped.
    """
    cart = get_cart(user)
    merged, skipped = 0, []

    for entry in items:
        product_id = entry.get("product_id")
        product = Product.objects.filter(pk=product_id, is_active=True).first()
        try:
            qty = _positive(entry.get("quantity"))
        except InvalidQuantityError:
            qty = 0
        if product is None or product.stock <= 0 or qty == 0:
            skipped.append(str(product_id))
            continue

        item = CartItem.objects.filter(cart=cart, product=product).first()
        target = min(max(qty, item.quantity if item else 0), int(product.stock))

        if item is None:
            CartItem.objects.create(cart=cart, product=product, quantity=target, unit_price=product.current_price)
        else:
            item.quantity = target
            item.unit_price = product.current_price
            item.save(update_fields=["quantity", "unit_price", "updated_at"])
        merged += 1

    logger.info("Cart synced", extra={"user_id": str(user.pk), "merged": merged, "skipped": len(skipped)})
    return {"merged": merged, "skipped": skipped}


@transaction.atomic
def save_for_later(item: CartItem) -> WishlistItem:
    wish, _ = WishlistItem.objects.get_or_create(user=item.cart.user, product=item.product)
    item.delete()
    return wish


def add_to_wishlist(user, *, product_id) -> tuple[WishlistItem, bool]:
    product = _active_product(product_id)
    return WishlistItem.objects.get_or_create(user=user, product=product)


def remove_from_wishlist(user, *, product_id) -> bool:
    deleted, _ = WishlistItem.objects.filter(user=user, product_id=product_id).delete()
    return bool(deleted)


@transaction.atomic
def reorder_into_cart(user, order) -> dict:
    """
    Copy a past order's lines into the cart. Lines whose product is gone,
    inactive or out of stock are skipped; quantities are capped at stock.
    """
    cart = get_cart(user)
    added, skipped = [], []

    for line in order.items.select_related("product"):
        product = line.product
        if product is None or not product.is_active or product.stock <= 0:
            skipped.append({"product_name": line.product_name, "reason": "unavailable"})
            continue

        item = CartItem.objects.filter(cart=cart, product=product).first()
        in_cart = item.quantity if item else 0
        qty = min(line.quantity, int(product.stock) - in_cart)
        if qty <= 0:
            skipped.append({"product_name": line.product_name, "reason": "insufficient_stock"})
            continue

        if item is None:
            CartItem.objects.create(cart=cart, product=product, quantity=qty, unit_price=product.current_price)
        else:
            item.quantity = in_cart + qty
            item.unit_price = product.current_price
            item.save(update_fields=["quantity", "unit_price", "updated_at"])

        added.append({"product_name": line.product_name, "quantity": qty})
        if qty < line.quantity:
            skipped.append({"product_name": line.product_name, "reason": "insufficient_stock"})

    return {"added": added, "skipped": skipped}
