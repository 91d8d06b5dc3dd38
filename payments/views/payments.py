# payments/views/payments.py

"""
PAYMENTS (customer)

POST /payments/stripe/process/     -> PaymentIntent client_secret
POST /payments/stripe/confirm/     -> completes on a succeeded intent
POST /payments/paypal/process/     -> approval URL
POST /payments/paypal/confirm/     -> capture
POST /payments/cod/process/        -> confirm order, amount to collect
GET  /payments/{order_id}/status/
"""

from __future__ import annotations

from django.shortcuts import get_object_or_404
from drf_spectacular.utils import extend_schema
from rest_framework import status
from rest_framework.permissions import IsAuthenticated
from rest_framework.views import APIView

from backend.responses import domain_error_response, success_response
from orders.models import Order
from payments.serializers import (
    PaymentSerializer,
    PayPalConfirmSerializer,
    PayPalProcessSerializer,
    ProcessPaymentSerializer,
    StripeConfirmSerializer,
)
from payments.services import (
    GatewayError,
    PaymentError,
    PaymentForbiddenError,
    PaymentNotFoundError,
)
from payments.services import payment_flow


def payment_error_response(exc: PaymentError):
    if isinstance(exc, PaymentNotFoundError):
        http_status = status.HTTP_404_NOT_FOUND
    elif isinstance(exc, PaymentForbiddenError):
        http_status = status.HTTP_403_FORBIDDEN
    elif isinstance(exc, GatewayError):
        http_status = status.HTTP_502_BAD_GATEWAY
    else:
        http_status = status.HTTP_422_UNPROCESSABLE_ENTITY
    return domain_error_response(exc, http_status=http_status)


def _own_order(request, order_id) -> Order:
    return get_object_or_404(Order.objects.select_related("user"), pk=order_id, user=request.user)


class _PaymentView(APIView):
    permission_classes = [IsAuthenticated]


class StripeProcessView(_PaymentView):
    @extend_schema(tags=["Payments"], request=ProcessPaymentSerializer, responses={200: dict})
    def post(self, request):
        serializer = ProcessPaymentSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        order = _own_order(request, serializer.validated_data["order_id"])
        try:
            data = payment_flow.start_stripe_payment(order, user=request.user)
        except PaymentError as exc:
            return payment_error_response(exc)
        return success_response(data, message="Payment intent created.")


class StripeConfirmView(_PaymentView):
    @extend_schema(tags=["Payments"], request=StripeConfirmSerializer, responses={200: PaymentSerializer})
    def post(self, request):
        serializer = StripeConfirmSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        try:
            payment = payment_flow.confirm_stripe_payment(
                serializer.validated_data["payment_intent_id"], user=request.user
            )
        except PaymentError as exc:
            return payment_error_response(exc)
        return success_response(PaymentSerializer(payment).data, message=f"Payment {payment.status}.")


class PayPalProcessView(_PaymentView):
    @extend_schema(tags=["Payments"], request=PayPalProcessSerializer, responses={200: dict})
    def post(self, request):
        serializer = PayPalProcessSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data
        order = _own_order(request, data["order_id"])
        try:
            result = payment_flow.start_paypal_payment(
                order,
                user=request.user,
                return_url=data["return_url"],
                cancel_url=data["cancel_url"],
            )
        except PaymentError as exc:
            return payment_error_response(exc)
        return success_response(result, message="PayPal order created.")


class PayPalConfirmView(_PaymentView):
    @extend_schema(tags=["Payments"], request=PayPalConfirmSerializer, responses={200: PaymentSerializer})
    def post(self, request):
        serializer = PayPalConfirmSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        try:
            payment = payment_flow.confirm_paypal_payment(
                serializer.validated_data["paypal_order_id"], user=request.user
            )
        except PaymentError as exc:
            return payment_error_response(exc)
        return success_response(PaymentSerializer(payment).data, message=f"Payment {payment.status}.")


class CodProcessView(_PaymentView):
    @extend_schema(tags=["Payments"], request=ProcessPaymentSerializer, responses={200: dict})
    def post(self, request):
        serializer = ProcessPaymentSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        order = _own_order(request, serializer.validated_data["order_id"])
        try:
            data = payment_flow.process_cod(order, user=request.user)
        except PaymentError as exc:
            return payment_error_response(exc)
        return success_response(data, message="Order confirmed. Please have the exact amount ready on delivery.")


class PaymentStatusView(_PaymentView):
    @extend_schema(tags=["Payments"], responses={200: dict})
    def get(self, request, order_id):
        order = get_object_or_404(Order.objects.prefetch_related("payments"), pk=order_id, user=request.user)
        return success_response(payment_flow.payment_status(order))
