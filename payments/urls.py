# payments/urls.py

from django.urls import path

from payments.views import (
    CodProcessView,
    PaymentStatusView,
    PayPalConfirmView,
    PayPalProcessView,
    PayPalWebhookView,
    StripeConfirmView,
    StripeProcessView,
    StripeWebhookView,
)

app_name = "payments"

urlpatterns = [
    path("stripe/process/", StripeProcessView.as_view(), name="stripe-process"),
    path("stripe/confirm/", StripeConfirmView.as_view(), name="stripe-confirm"),
    path("paypal/process/", PayPalProcessView.as_view(), name="paypal-process"),
    path("paypal/confirm/", PayPalConfirmView.as_view(), name="paypal-confirm"),
    path("cod/process/", CodProcessView.as_view(), name="cod-process"),
    path("webhooks/stripe/", StripeWebhookView.as_view(), name="webhook-stripe"),
    path("webhooks/paypal/", PayPalWebhookView.as_view(), name="webhook-paypal"),
    path("<uuid:order_id>/status/", PaymentStatusView.as_view(), name="status"),
]
