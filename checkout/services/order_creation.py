# checkout/services/order_creation.py

"""
ORDER CREATION (CHECKOUT)

create_order_from_cart() turns the user's cart into an Order in one
transaction:

1. lock the cart's products and check stock
2. price: subtotal at current prices, delivery quote, promotion discount
3. create the address when given inline
4. create Order + OrderItems (name / sku / price snapshots)
5. count the promotion use
6. deduct stock (ledger rows reference the order)
7. history "Order placed", clear the cart, notify customer and staff

Any failure rolls the whole thing back.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal

from django.db import transaction
from django.db.models import F

from cart.models import CartItem
from checkout.models import Promotion
from checkout.services.errors import (
    DeliveryMethodUnavailableError,
    EmptyCartError,
    InvalidAddressError,
    MinimumOrderError,
    PromoUnavailableError,
)
from checkout.services.pricing import delivery_quote, pickup_quote, validate_promotion
from inventory.services import InsufficientStockError, deduct_for_order
from notifications.models import Notification
from notifications.services import notify, notify_staff
from orders.models import Order, OrderItem
from orders.services import record_history
from products.models import Product
from store.services import settings as site_settings
from users.models import Address

logger = logging.getLogger(__name__)

TWOPLACES = Decimal("0.01")


@dataclass
class CheckoutRequest:
    delivery_method: str = Order.METHOD_DELIVERY
    address_id: object = None
    address: dict = field(default_factory=dict)
    promo_code: str = ""
    notes: str = ""
    delivery_instructions: str = ""
    scheduled_date: date | None = None
    scheduled_slot: str = ""


def _resolve_address(user, req: CheckoutRequest) -> Address | None:
    if req.delivery_method == Order.METHOD_PICKUP:
        return None

    if req.address_id:
        address = Address.objects.filter(pk=req.address_id, user=user).first()
        if address is None:
            raise InvalidAddressError("Address not found.")
        return address

    if req.address:
        return Address.objects.create(user=user, **req.address)

    raise InvalidAddressError("A delivery address is required.")


@transaction.atomic
def create_order_from_cart(user, req: CheckoutRequest) -> Order:
    items = list(
        CartItem.objects.filter(cart__user=user).select_related("product").order_by("product_id")
    )
    if not items:
        raise EmptyCartError("Your cart is empty.")

    if req.delivery_method == Order.METHOD_PICKUP and not site_settings.pickup_enabled():
        raise DeliveryMethodUnavailableError("Pickup is not available at the moment.")

    # 1) lock + stock check
    products = {
        p.pk: p
        for p in Product.objects.select_for_update().filter(pk__in=[i.product_id for i in items]).order_by("pk")
    }
    for item in items:
        product = products[item.product_id]
        if not product.is_active:
            raise InsufficientStockError(product, item.quantity, 0)
        if item.quantity > product.stock:
            raise InsufficientStockError(product, item.quantity, int(product.stock))

    # 2) pricing
    subtotal = sum(
        (Decimal(products[i.product_id].current_price) * i.quantity for i in items), Decimal("0.00")
    ).quantize(TWOPLACES)

    minimum = site_settings.minimum_order_amount()
    if subtotal < minimum:
        raise MinimumOrderError(minimum, subtotal)

    address = _resolve_address(user, req)
    if address is None:
        quote = pickup_quote()
    else:
        quote = delivery_quote(subtotal=subtotal, suburb=address.suburb, postcode=address.postcode)

    promotion, discount = None, Decimal("0.00")
    if req.promo_code:
        promotion, discount = validate_promotion(req.promo_code, subtotal)
        promotion = Promotion.objects.select_for_update().get(pk=promotion.pk)
        # re-check on the locked row: a concurrent checkout may have used the last slot
        if not promotion.can_be_used():
            raise PromoUnavailableError("This promo code is no longer available.")

    total = (subtotal + quote.fee - discount).quantize(TWOPLACES)

    # 3) order + lines
    order = Order.objects.create(
        user=user,
        address=address,
        delivery_zone=quote.zone,
        status=Order.STATUS_PENDING,
        subtotal=subtotal,
        delivery_fee=quote.fee,
        discount=discount,
        total=total,
        currency=site_settings.default_currency(),
        promotion=promotion,
        promotion_code=promotion.code if promotion else "",
        notes=req.notes or "",
        delivery_method=req.delivery_method,
        delivery_instructions=req.delivery_instructions or "",
        scheduled_date=req.scheduled_date,
        scheduled_slot=req.scheduled_slot or "",
    )
    OrderItem.objects.bulk_create(
        [
            OrderItem(
                order=order,
                product=products[i.product_id],
                product_name=products[i.product_id].name,
                sku=products[i.product_id].sku,
                unit_price=products[i.product_id].current_price,
                quantity=i.quantity,
                line_total=(Decimal(products[i.product_id].current_price) * i.quantity).quantize(TWOPLACES),
            )
            for i in items
        ]
    )

    if promotion is not None:
        Promotion.objects.filter(pk=promotion.pk).update(uses_count=F("uses_count") + 1)

    # 4) stock
    deduct_for_order(order=order, user=user)

    record_history(order, Order.STATUS_PENDING, notes="Order placed", user=user)
    CartItem.objects.filter(cart__user=user).delete()

    notify(
        user,
        type=Notification.TYPE_ORDER_PLACED,
        title=f"Order {order.order_number} placed",
        message=f"Thanks for your order. Total ${order.total:.2f}.",
        data={"order_id": str(order.pk)},
    )
    if site_settings.get_setting("new_order_alerts"):
        notify_staff(
            type=Notification.TYPE_ORDER_PLACED,
            title=f"New order {order.order_number}",
            message=f"{order.item_count} item(s), ${order.total:.2f}",
            data={"order_id": str(order.pk)},
        )

    logger.info(
        "Order created",
        extra={
            "order_id": str(order.pk),
            "order_number": order.order_number,
            "user_id": str(user.pk),
            "total": str(order.total),
            "promotion": order.promotion_code or None,
        },
    )
    return order
