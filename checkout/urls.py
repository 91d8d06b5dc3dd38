# checkout/urls.py

from django.urls import include, path
from rest_framework.routers import SimpleRouter

from checkout.views import (
    AdminPromotionViewSet,
    CalculateFeeView,
    CheckoutSessionView,
    CreateOrderView,
    PaymentMethodsView,
    ValidateAddressView,
    ValidatePromoView,
)

app_name = "checkout"

router = SimpleRouter()
router.register(r"admin/promotions", AdminPromotionViewSet, basename="admin-promotion")

urlpatterns = [
    path("checkout/validate-address/", ValidateAddressView.as_view(), name="validate-address"),
    path("checkout/calculate-fee/", CalculateFeeView.as_view(), name="calculate-fee"),
    path("checkout/validate-promo/", ValidatePromoView.as_view(), name="validate-promo"),
    path("checkout/payment-methods/", PaymentMethodsView.as_view(), name="payment-methods"),
    path("checkout/session/", CheckoutSessionView.as_view(), name="session"),
    path("checkout/create-order/", CreateOrderView.as_view(), name="create-order"),
    path("", include(router.urls)),
]
