# users/serializers/user.py

from django.contrib.auth import get_user_model
from django.contrib.auth.password_validation import validate_password
from rest_framework import serializers

User = get_user_model()


# ---------------- USER OUTPUT ----------------
class UserSerializer(serializers.ModelSerializer):
    """
    Safe user representation for frontend consumption.
    """

    full_name = serializers.CharField(read_only=True)

    class Meta:
        model = User
        fields = [
            "id",
            "email",
            "first_name",
            "last_name",
            "full_name",
            "phone",
            "role",
            "status",
            "currency_preference",
            "last_login",
            "created_at",
        ]
        read_only_fields = fields


# ---------------- PROFILE (SELF-SERVICE) ----------------
class ProfileUpdateSerializer(serializers.ModelSerializer):
    class Meta:
        model = User
        fields = ["first_name", "last_name", "phone", "currency_preference"]


class ChangePasswordSerializer(serializers.Serializer):
    current_password = serializers.CharField(write_only=True)
    new_password = serializers.CharField(write_only=True, validators=[validate_password])

    def validate_current_password(self, value):
        user = self.context["request"].user
        if not user.check_password(value):
            raise serializers.ValidationError("Current password is incorrect.")
        return value


# ---------------- ADMIN USER MANAGEMENT ----------------
class AdminUserSerializer(serializers.ModelSerializer):
    """
    Admin-side user editing.

    Rules:
    - status is changed through the dedicated status endpoint only.
    - password is write-only and optional on update.
    """

    full_name = serializers.CharField(read_only=True)
    password = serializers.CharField(
        write_only=True,
        required=False,
        validators=[validate_password],
        style={"input_type": "password"},
    )
    order_count = serializers.IntegerField(read_only=True, required=False)

    class Meta:
        model = User
        fields = [
            "id",
            "email",
            "first_name",
            "last_name",
            "full_name",
            "phone",
            "role",
            "status",
            "password",
            "order_count",
            "last_login",
            "created_at",
        ]
        read_only_fields = ["id", "status", "full_name", "order_count", "last_login", "created_at"]

    def create(self, validated_data):
        password = validated_data.pop("password", None)
        role = validated_data.get("role") or User.ROLE_STAFF
        validated_data["role"] = role
        validated_data["is_staff"] = role in {User.ROLE_STAFF, User.ROLE_ADMIN}
        return User.objects.create_user(password=password, **validated_data)

    def update(self, instance, validated_data):
        password = validated_data.pop("password", None)
        for attr, value in validated_data.items():
            setattr(instance, attr, value)
        if "role" in validated_data:
            instance.is_staff = instance.role in {User.ROLE_STAFF, User.ROLE_ADMIN}
        if password:
            instance.set_password(password)
        instance.save()
        return instance


class UserStatusSerializer(serializers.Serializer):
    status = serializers.ChoiceField(choices=User.STATUS_CHOICES)
