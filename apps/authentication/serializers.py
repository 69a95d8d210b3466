"""
Authentication Serializers
"""

from rest_framework import serializers
from rest_framework_simplejwt.serializers import TokenObtainPairSerializer

from .models import User


class CustomTokenObtainPairSerializer(TokenObtainPairSerializer):
    """
    JWT token serializer that carries the caller's role and employee link
    as claims so clients can render role-appropriate actions.
    """

    @classmethod
    def get_token(cls, user):
        token = super().get_token(user)
        token['role'] = user.role
        token['employee_id'] = str(user.employee_id) if user.employee_id else None
        return token


class UserSerializer(serializers.ModelSerializer):
    """Current principal profile"""

    full_name = serializers.ReadOnlyField()
    role_display = serializers.CharField(source='get_role_display', read_only=True)

    class Meta:
        model = User
        fields = [
            'id', 'email', 'first_name', 'last_name', 'full_name',
            'role', 'role_display', 'employee_id', 'is_superuser',
            'is_active', 'date_joined', 'last_login'
        ]
        read_only_fields = fields
