# users/views/auth.py

"""
AUTH ENDPOINTS (JWT)

Rules:
- Registration always creates a customer.
- Wrong credentials answer 422 on the email field (no account enumeration
  beyond what check-email already exposes).
- Suspended / inactive accounts are refused with 403 and a stable code.
- Logout blacklists the refresh token.
"""

from __future__ import annotations

import logging

from django.conf import settings
from django.contrib.auth import get_user_model
from django.contrib.auth.tokens import default_token_generator
from django.core.exceptions import ValidationError as DjangoValidationError
from django.core.mail import send_mail
from django.utils import timezone
from django.utils.encoding import force_bytes, force_str
from django.utils.http import urlsafe_base64_decode, urlsafe_base64_encode
from drf_spectacular.utils import extend_schema
from rest_framework import status
from rest_framework.exceptions import ValidationError
from rest_framework.permissions import AllowAny, IsAuthenticated
from rest_framework.views import APIView
from rest_framework_simplejwt.exceptions import TokenError
from rest_framework_simplejwt.tokens import RefreshToken

from backend.responses import error_response, success_response
from backend.throttles import AuthThrottle
from users.serializers import (
    CheckEmailSerializer,
    ForgotPasswordSerializer,
    LoginSerializer,
    LogoutSerializer,
    RegisterSerializer,
    ResetPasswordSerializer,
    UserSerializer,
)

logger = logging.getLogger(__name__)

User = get_user_model()


def _token_pair(user) -> dict:
    refresh = RefreshToken.for_user(user)
    return {"access": str(refresh.access_token), "refresh": str(refresh)}


class RegisterView(APIView):
    permission_classes = [AllowAny]
    throttle_classes = [AuthThrottle]
    serializer_class = RegisterSerializer

    @extend_schema(
        tags=["Auth"],
        request=RegisterSerializer,
        responses={201: dict},
        description="Register a customer account and return a JWT pair.",
    )
    def post(self, request):
        serializer = RegisterSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        user = serializer.save()

        logger.info("Customer registered", extra={"user_id": str(user.id)})

        return success_response(
            {"user": UserSerializer(user).data, "tokens": _token_pair(user)},
            message="Registration successful.",
            http_status=status.HTTP_201_CREATED,
        )


class LoginView(APIView):
    permission_classes = [AllowAny]
    throttle_classes = [AuthThrottle]
    serializer_class = LoginSerializer

    @extend_schema(
        tags=["Auth"],
        request=LoginSerializer,
        responses={200: dict},
        description="Authenticate with email and password.",
    )
    def post(self, request):
        serializer = LoginSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        email = serializer.validated_data["email"].strip()
        password = serializer.validated_data["password"]

        # authenticate() hides inactive users; look up directly so a
        # suspended account gets its own answer.
        user = User.objects.filter(email__iexact=email).first()
        if user is None or not user.check_password(password):
            logger.warning("Login failed", extra={"email": email})
            raise ValidationError({"email": ["The provided credentials are incorrect."]})

        if user.status == User.STATUS_SUSPENDED:
            return error_response(
                code="ACCOUNT_SUSPENDED",
                message="Your account has been suspended. Please contact support.",
                http_status=status.HTTP_403_FORBIDDEN,
            )
        if user.status != User.STATUS_ACTIVE:
            return error_response(
                code="ACCOUNT_INACTIVE",
                message="Your account is inactive.",
                http_status=status.HTTP_403_FORBIDDEN,
            )

        user.last_login = timezone.now()
        user.save(update_fields=["last_login"])

        logger.info("Login succeeded", extra={"user_id": str(user.id)})

        return success_response(
            {"user": UserSerializer(user).data, "tokens": _token_pair(user)},
            message="Login successful.",
        )


class LogoutView(APIView):
    permission_classes = [IsAuthenticated]
    serializer_class = LogoutSerializer

    @extend_schema(tags=["Auth"], request=LogoutSerializer, responses={200: dict})
    def post(self, request):
        serializer = LogoutSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        try:
            RefreshToken(serializer.validated_data["refresh"]).blacklist()
        except TokenError:
            raise ValidationError({"refresh": ["Token is invalid or expired."]})

        return success_response(message="Logged out successfully.")


class CurrentUserView(APIView):
    permission_classes = [IsAuthenticated]

    @extend_schema(tags=["Auth"], responses={200: UserSerializer})
    def get(self, request):
        return success_response(UserSerializer(request.user).data)


class CheckEmailView(APIView):
    permission_classes = [AllowAny]
    throttle_classes = [AuthThrottle]
    serializer_class = CheckEmailSerializer

    @extend_schema(tags=["Auth"], request=CheckEmailSerializer, responses={200: dict})
    def post(self, request):
        serializer = CheckEmailSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        taken = User.objects.filter(
            email__iexact=serializer.validated_data["email"].strip()
        ).exists()
        return success_response({"available": not taken})


class ForgotPasswordView(APIView):
    """
    Always answers 200 so the endpoint cannot be used to probe for accounts.
    """

    permission_classes = [AllowAny]
    throttle_classes = [AuthThrottle]
    serializer_class = ForgotPasswordSerializer

    @extend_schema(tags=["Auth"], request=ForgotPasswordSerializer, responses={200: dict})
    def post(self, request):
        serializer = ForgotPasswordSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        user = User.objects.filter(
            email__iexact=serializer.validated_data["email"].strip(),
            is_active=True,
        ).first()

        if user is not None:
            uid = urlsafe_base64_encode(force_bytes(user.pk))
            token = default_token_generator.make_token(user)
            link = f"{settings.FRONTEND_BASE_URL}/reset-password?uid={uid}&token={token}"
            send_mail(
                subject="Reset your Zambezi Meats password",
                message=f"Use the link below to choose a new password:\n\n{link}\n",
                from_email=settings.DEFAULT_FROM_EMAIL or None,
                recipient_list=[user.email],
            )
            logger.info("Password reset link sent", extra={"user_id": str(user.id)})

        return success_response(
            message="If that email is registered, a reset link has been sent."
        )


class ResetPasswordView(APIView):
    permission_classes = [AllowAny]
    throttle_classes = [AuthThrottle]
    serializer_class = ResetPasswordSerializer

    @extend_schema(tags=["Auth"], request=ResetPasswordSerializer, responses={200: dict})
    def post(self, request):
        serializer = ResetPasswordSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        try:
            pk = force_str(urlsafe_base64_decode(data["uid"]))
            user = User.objects.get(pk=pk)
        except (TypeError, ValueError, OverflowError, DjangoValidationError, User.DoesNotExist):
            user = None

        if user is None or not default_token_generator.check_token(user, data["token"]):
            raise ValidationError({"token": ["Reset link is invalid or has expired."]})

        user.set_password(data["password"])
        user.save(update_fields=["password"])

        logger.info("Password reset", extra={"user_id": str(user.id)})
        return success_response(message="Password has been reset.")
