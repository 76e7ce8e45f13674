"""
Serializers for the users app.

Covers user management (admin CRUD), email + password login, first-run
setup and the login log.  Passwords are write-only and always hashed.
"""
from __future__ import annotations

from django.contrib.auth import get_user_model
from django.db import transaction
from rest_framework import serializers

from .models import LoginLog, UserProfile
from .roles import ROLE_ADMIN, ROLE_CHOICES, ROLE_PERMISSIONS, ROLE_VIEWER, get_role

User = get_user_model()

PASSWORD_MIN_LENGTH = 6


def _email_taken(email: str, exclude_pk=None) -> bool:
    qs = User.objects.filter(email__iexact=email)
    if exclude_pk is not None:
        qs = qs.exclude(pk=exclude_pk)
    return qs.exists()


def _profile_for(user) -> UserProfile:
    """The profile cached on ``user``, created if the signal has not made one."""
    try:
        return user.profile
    except UserProfile.DoesNotExist:
        profile, _ = UserProfile.objects.get_or_create(user=user)
        user.profile = profile
        return profile


def create_user(*, email: str, password: str, name: str = "", role: str = ROLE_VIEWER,
                is_active: bool = True) -> User:
    """Create a user whose username is its email, then fill in the profile."""
    email = email.strip().lower()
    with transaction.atomic():
        user = User.objects.create_user(username=email, email=email, password=password,
                                        is_active=is_active)
        profile = _profile_for(user)
        profile.name = name
        profile.role = role
        profile.save(update_fields=["name", "role", "updated_at"])
    return user


class UserSerializer(serializers.ModelSerializer):
    name = serializers.CharField(source="profile.name", required=False, allow_blank=True, max_length=255)
    role = serializers.ChoiceField(source="profile.role", choices=ROLE_CHOICES, required=False)
    password = serializers.CharField(write_only=True, required=False, trim_whitespace=False,
                                     min_length=PASSWORD_MIN_LENGTH)
    created_at = serializers.DateTimeField(source="date_joined", read_only=True)
    permissions = serializers.SerializerMethodField()

    class Meta:
        model = User
        fields = ["id", "email", "name", "role", "is_active", "password",
                  "created_at", "last_login", "permissions"]
        read_only_fields = ["id", "created_at", "last_login", "permissions"]
        extra_kwargs = {"email": {"required": True, "allow_blank": False}}

    def to_representation(self, instance):
        data = super().to_representation(instance)
        data["role"] = get_role(instance)
        return data

    def get_permissions(self, obj) -> dict:
        return ROLE_PERMISSIONS.get(get_role(obj), {})

    def validate_email(self, value: str) -> str:
        value = value.strip().lower()
        if _email_taken(value, exclude_pk=getattr(self.instance, "pk", None)):
            raise serializers.ValidationError("Email already exists")
        return value

    def validate(self, attrs):
        if self.instance is None and not attrs.get("password"):
            raise serializers.ValidationError({"password": "This field is required."})
        return attrs

    def create(self, validated_data):
        profile = validated_data.pop("profile", {})
        return create_user(
            email=validated_data["email"],
            password=validated_data["password"],
            name=profile.get("name", ""),
            role=profile.get("role", ROLE_VIEWER),
            is_active=validated_data.get("is_active", True),
        )

    def update(self, instance, validated_data):
        profile_data = validated_data.pop("profile", {})
        password = validated_data.pop("password", None)

        if "email" in validated_data:
            instance.email = validated_data["email"]
            instance.username = validated_data["email"]
        if "is_active" in validated_data:
            instance.is_active = validated_data["is_active"]
        if password:
            instance.set_password(password)
        instance.save()

        profile = _profile_for(instance)
        if "name" in profile_data:
            profile.name = profile_data["name"]
        if profile_data.get("role"):
            profile.role = profile_data["role"]
        profile.save()
        return instance


class LoginSerializer(serializers.Serializer):
    email = serializers.EmailField()
    password = serializers.CharField(trim_whitespace=False)


class SetupSerializer(serializers.Serializer):
    name = serializers.CharField(max_length=255)
    email = serializers.EmailField()
    password = serializers.CharField(trim_whitespace=False, min_length=PASSWORD_MIN_LENGTH)

    def create(self, validated_data):
        return create_user(
            email=validated_data["email"],
            password=validated_data["password"],
            name=validated_data["name"],
            role=ROLE_ADMIN,
        )


class LoginLogSerializer(serializers.ModelSerializer):
    user_email = serializers.EmailField(source="user.email", read_only=True)
    user_name = serializers.CharField(source="user.profile.display_name", read_only=True)

    class Meta:
        model = LoginLog
        fields = ["id", "user", "user_email", "user_name", "ip_address", "user_agent", "created_at"]
        read_only_fields = fields
