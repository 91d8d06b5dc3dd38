# users/views/profile.py

from __future__ import annotations

from drf_spectacular.utils import extend_schema
from rest_framework.decorators import action
from rest_framework.permissions import IsAuthenticated
from rest_framework.views import APIView

from backend.responses import success_response
from backend.viewsets import EnvelopeModelViewSet
from users.models import Address
from users.serializers import (
    AddressSerializer,
    ChangePasswordSerializer,
    ProfileUpdateSerializer,
    UserSerializer,
)


class ProfileView(APIView):
    permission_classes = [IsAuthenticated]

    @extend_schema(tags=["Profile"], responses={200: UserSerializer})
    def get(self, request):
        return success_response(UserSerializer(request.user).data)

    @extend_schema(tags=["Profile"], request=ProfileUpdateSerializer, responses={200: UserSerializer})
    def put(self, request):
        return self._update(request, partial=False)

    @extend_schema(tags=["Profile"], request=ProfileUpdateSerializer, responses={200: UserSerializer})
    def patch(self, request):
        return self._update(request, partial=True)

    def _update(self, request, *, partial: bool):
        serializer = ProfileUpdateSerializer(request.user, data=request.data, partial=partial)
        serializer.is_valid(raise_exception=True)
        user = serializer.save()
        return success_response(UserSerializer(user).data, message="Profile updated successfully.")


class ChangePasswordView(APIView):
    permission_classes = [IsAuthenticated]
    serializer_class = ChangePasswordSerializer

    @extend_schema(tags=["Profile"], request=ChangePasswordSerializer, responses={200: dict})
    def post(self, request):
        serializer = ChangePasswordSerializer(data=request.data, context={"request": request})
        serializer.is_valid(raise_exception=True)

        request.user.set_password(serializer.validated_data["new_password"])
        request.user.save(update_fields=["password"])
        return success_response(message="Password changed successfully.")


@extend_schema(tags=["Profile"])
class AddressViewSet(EnvelopeModelViewSet):
    """
    /customer/addresses/

    Owner-scoped: another user's address id is a 404.
    """

    serializer_class = AddressSerializer
    permission_classes = [IsAuthenticated]
    pagination_class = None
    resource_name = "Address"

    def get_queryset(self):
        return Address.objects.filter(user=self.request.user)

    def perform_create(self, serializer):
        serializer.save(user=self.request.user)

    def perform_destroy(self, instance):
        was_default = instance.is_default
        user = instance.user
        instance.delete()
        if was_default:
            replacement = Address.objects.filter(user=user).order_by("-created_at").first()
            if replacement is not None:
                replacement.is_default = True
                replacement.save(update_fields=["is_default", "updated_at"])

    @action(detail=True, methods=["post"], url_path="default")
    def make_default(self, request, pk=None):
        address = self.get_object()
        address.is_default = True
        address.save()
        return success_response(AddressSerializer(address).data, message="Default address updated.")
