from .admin import AdminCustomerViewSet, AdminStaffViewSet
from .auth import (
    CheckEmailView,
    CurrentUserView,
    ForgotPasswordView,
    LoginView,
    LogoutView,
    RegisterView,
    ResetPasswordView,
)
from .profile import AddressViewSet, ChangePasswordView, ProfileView

__all__ = [
    "AddressViewSet",
    "AdminCustomerViewSet",
    "AdminStaffViewSet",
    "ChangePasswordView",
    "CheckEmailView",
    "CurrentUserView",
    "ForgotPasswordView",
    "LoginView",
    "LogoutView",
    "ProfileView",
    "RegisterView",
    "ResetPasswordView",
]
