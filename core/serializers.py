"""
Core App Serializers - Account Management
"""

from rest_framework import serializers
from django.contrib.auth import get_user_model
from django.contrib.auth.password_validation import validate_password
from django.core.exceptions import ValidationError as DjangoValidationError

User = get_user_model()


class UserSerializer(serializers.ModelSerializer):
    """Serializer for User model (read operations)."""

    class Meta:
        model = User
        fields = ['id', 'email', 'full_name', 'is_active', 'date_joined']
        read_only_fields = ['id', 'email', 'is_active', 'date_joined']


class UserCreateSerializer(serializers.ModelSerializer):
    """Serializer for account registration (sign up)."""

    password = serializers.CharField(
        write_only=True,
        required=True,
        style={'input_type': 'password'},
    )

    class Meta:
        model = User
        fields = ['id', 'email', 'password', 'full_name']
        read_only_fields = ['id']

    def validate_email(self, value):
        email = value.strip().lower()
        if User.objects.filter(email__iexact=email).exists():
            raise serializers.ValidationError("An account with this e-mail already exists.")
        return email

    def validate(self, data):
        candidate = User(email=data['email'], full_name=data.get('full_name', ''))
        try:
            validate_password(data['password'], user=candidate)
        except DjangoValidationError as exc:
            raise serializers.ValidationError({'password': list(exc.messages)})
        return data

    def create(self, validated_data):
        return User.objects.create_user(
            email=validated_data['email'],
            password=validated_data['password'],
            full_name=validated_data.get('full_name', ''),
        )
