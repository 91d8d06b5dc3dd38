# checkout/views/checkout.py

"""
CHECKOUT

POST /checkout/validate-address/   zone for a suburb / postcode
POST /checkout/calculate-fee/      delivery quote for a subtotal
POST /checkout/validate-promo/     discount preview
GET  /checkout/payment-methods/    ?currency=&subtotal=
GET  /checkout/session/            everything the checkout page needs
POST /checkout/create-order/       cart -> order (201)
"""

from __future__ import annotations

import logging
from decimal import Decimal, InvalidOperation

from drf_spectacular.utils import extend_schema
from rest_framework import status
from rest_framework.permissions import IsAuthenticated
from rest_framework.views import APIView

from backend.responses import domain_error_response, success_response
from cart.services import get_cart, summarize
from checkout.serializers import (
    AddressLookupSerializer,
    CreateOrderSerializer,
    DeliveryFeeSerializer,
    PromoCheckSerializer,
)
from checkout.services import (
    CheckoutError,
    CheckoutRequest,
    InvalidPromoError,
    create_order_from_cart,
    delivery_quote,
    pickup_quote,
    promotion_summary,
    resolve_zone,
    validate_promotion,
    zone_summary,
)
from delivery.models import DeliveryZone
from inventory.services import InsufficientStockError
from orders.models import Order
from orders.serializers import OrderDetailSerializer
from orders.views.staff import order_queryset
from payments.services.payment_flow import available_methods
from store.services import settings as site_settings
from users.serializers import AddressSerializer

logger = logging.getLogger(__name__)


def checkout_error_response(exc: Exception):
    if isinstance(exc, InsufficientStockError):
        return domain_error_response(
            exc,
            product={"id": str(exc.product.pk), "name": exc.product.name},
            available=exc.available,
            requested=exc.requested,
        )
    return domain_error_response(exc)


class _CheckoutView(APIView):
    permission_classes = [IsAuthenticated]


class ValidateAddressView(_CheckoutView):
    @extend_schema(tags=["Checkout"], request=AddressLookupSerializer, responses={200: dict})
    def post(self, request):
        serializer = AddressLookupSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        try:
            zone = resolve_zone(**serializer.validated_data)
        except CheckoutError as exc:
            return checkout_error_response(exc)
        return success_response({"deliverable": True, "zone": zone_summary(zone)}, message="We deliver to you!")


class CalculateFeeView(_CheckoutView):
    @extend_schema(tags=["Checkout"], request=DeliveryFeeSerializer, responses={200: dict})
    def post(self, request):
        serializer = DeliveryFeeSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        if data["delivery_method"] == Order.METHOD_PICKUP:
            return success_response(pickup_quote().as_dict())
        try:
            quote = delivery_quote(subtotal=data["subtotal"], suburb=data["suburb"], postcode=data["postcode"])
        except CheckoutError as exc:
            return checkout_error_response(exc)
        return success_response(quote.as_dict())


class ValidatePromoView(_CheckoutView):
    @extend_schema(tags=["Checkout"], request=PromoCheckSerializer, responses={200: dict})
    def post(self, request):
        serializer = PromoCheckSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        subtotal = serializer.validated_data["subtotal"]

        try:
            promotion, discount = validate_promotion(serializer.validated_data["code"], subtotal)
        except CheckoutError as exc:
            logger.warning("Promo code rejected", extra={"code": serializer.validated_data["code"], "reason": exc.code})
            if isinstance(exc, InvalidPromoError):
                return domain_error_response(exc, http_status=status.HTTP_404_NOT_FOUND)
            return checkout_error_response(exc)

        return success_response(
            {
                "promotion": promotion_summary(promotion),
                "discount": f"{discount:.2f}",
                "subtotal_after_discount": f"{subtotal - discount:.2f}",
            },
            message="Promo code applied.",
        )


class PaymentMethodsView(_CheckoutView):
    @extend_schema(tags=["Checkout"], responses={200: dict})
    def get(self, request):
        currency = (request.query_params.get("currency") or site_settings.default_currency()).upper()
        raw = request.query_params.get("subtotal")
        try:
            subtotal = Decimal(raw) if raw not in (None, "") else None
        except InvalidOperation:
            subtotal = None
        return success_response(available_methods(currency=currency, subtotal=subtotal))


class CheckoutSessionView(_CheckoutView):
    @extend_schema(tags=["Checkout"], responses={200: dict})
    def get(self, request):
        summary = summarize(get_cart(request.user))
        return success_response(
            {
                "cart": summary.as_dict(),
                "addresses": AddressSerializer(request.user.addresses.all(), many=True).data,
                "zones": [zone_summary(zone) for zone in DeliveryZone.objects.active()],
                "payment_methods": available_methods(
                    currency=site_settings.default_currency(), subtotal=summary.subtotal
                ),
                "minimum_order": f"{site_settings.minimum_order_amount():.2f}",
                "pickup_enabled": site_settings.pickup_enabled(),
                "delivery_slots": site_settings.delivery_slots(),
                "currency": site_settings.default_currency(),
            }
        )


class CreateOrderView(_CheckoutView):
    @extend_schema(tags=["Checkout"], request=CreateOrderSerializer, responses={201: OrderDetailSerializer})
    def post(self, request):
        serializer = CreateOrderSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        checkout = CheckoutRequest(
            delivery_method=data["delivery_method"],
            address_id=data.get("address_id"),
            address=dict(data.get("address") or {}),
            promo_code=data["promo_code"],
            notes=data["notes"],
            delivery_instructions=data["delivery_instructions"],
            scheduled_date=data.get("scheduled_date"),
            scheduled_slot=data["scheduled_slot"],
        )
        try:
            order = create_order_from_cart(request.user, checkout)
        except (CheckoutError, InsufficientStockError) as exc:
            logger.warning("Checkout rejected", extra={"user_id": str(request.user.pk), "reason": exc.code})
            return checkout_error_response(exc)

        return success_response(
            OrderDetailSerializer(order_queryset().get(pk=order.pk)).data,
            message="Order placed successfully.",
            http_status=status.HTTP_201_CREATED,
        )
