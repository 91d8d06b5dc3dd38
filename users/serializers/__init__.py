# users/serializers/__init__.py

from .address import AddressSerializer
from .auth import (
    CheckEmailSerializer,
    ForgotPasswordSerializer,
    LoginSerializer,
    LogoutSerializer,
    RegisterSerializer,
    ResetPasswordSerializer,
)
from .user import (
    AdminUserSerializer,
    ChangePasswordSerializer,
    ProfileUpdateSerializer,
    UserSerializer,
    UserStatusSerializer,
)

__all__ = [
    "AddressSerializer",
    "AdminUserSerializer",
    "ChangePasswordSerializer",
    "CheckEmailSerializer",
    "ForgotPasswordSerializer",
    "LoginSerializer",
    "LogoutSerializer",
    "ProfileUpdateSerializer",
    "RegisterSerializer",
    "ResetPasswordSerializer",
    "UserSerializer",
    "UserStatusSerializer",
]
