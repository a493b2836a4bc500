"""
Serializers for account registration and login.
"""

from rest_framework import serializers


class RegisterSerializer(serializers.Serializer):

    name = serializers.CharField(max_length=150)
    email = serializers.EmailField()
    password = serializers.CharField(write_only=True, trim_whitespace=False)

    def validate_name(self, value):
        """Ensure name is not empty or just whitespace."""
        if not value.strip():
            raise serializers.ValidationError("Name cannot be empty")
        return value.strip()


class LoginSerializer(serializers.Serializer):

    name = serializers.CharField()
    password = serializers.CharField(write_only=True, trim_whitespace=False)


class AccountSerializer(serializers.Serializer):
    """
    Serializer for the account details returned after login or registration.
    """

    id = serializers.IntegerField(source='pk')
    name = serializers.CharField(source='username')
    email = serializers.EmailField()
    isAdmin = serializers.BooleanField(source='is_staff')
    token = serializers.CharField(source='auth_token.key')
