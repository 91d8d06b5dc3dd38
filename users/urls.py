# users/urls.py

from django.urls import include, path
from rest_framework.routers import SimpleRouter
from rest_framework_simplejwt.views import TokenRefreshView

from .views import (
    AddressViewSet,
    AdminCustomerViewSet,
    AdminStaffViewSet,
    ChangePasswordView,
    CheckEmailView,
    CurrentUserView,
    ForgotPasswordView,
    LoginView,
    LogoutView,
    ProfileView,
    RegisterView,
    ResetPasswordView,
)

app_name = "users"

router = SimpleRouter()
router.register(r"customer/addresses", AddressViewSet, basename="address")
router.register(r"admin/customers", AdminCustomerViewSet, basename="admin-customer")
router.register(r"admin/staff", AdminStaffViewSet, basename="admin-staff")

urlpatterns = [
    # ---------------- PUBLIC AUTH ----------------
    path("auth/register/", RegisterView.as_view(), name="register"),
    path("auth/login/", LoginView.as_view(), name="login"),
    path("auth/refresh/", TokenRefreshView.as_view(), name="token-refresh"),
    path("auth/check-email/", CheckEmailView.as_view(), name="check-email"),
    path("auth/forgot-password/", ForgotPasswordView.as_view(), name="forgot-password"),
    path("auth/reset-password/", ResetPasswordView.as_view(), name="reset-password"),
    # ---------------- AUTHENTICATED ----------------
    path("auth/logout/", LogoutView.as_view(), name="logout"),
    path("auth/user/", CurrentUserView.as_view(), name="current-user"),
    path("profile/", ProfileView.as_view(), name="profile"),
    path("profile/password/", ChangePasswordView.as_view(), name="change-password"),
    path("", include(router.urls)),
]
