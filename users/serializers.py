from rest_framework import serializers
from .models import User


class UserSerializer(serializers.ModelSerializer):
    is_admin = serializers.BooleanField(source="is_hackathon_admin", read_only=True)
    checked_in = serializers.SerializerMethodField()

    class Meta:
        model = User
        fields = [
            'id',
            'email',
            'full_name',
            'is_admin',
            'checked_in',
            'date_joined',
        ]
        read_only_fields = fields

    def get_checked_in(self, obj):
        registration = getattr(obj, "registration", None)
        return bool(registration and registration.checked_in)


class AdminUserSerializer(UserSerializer):
    registered = serializers.SerializerMethodField()

    class Meta(UserSerializer.Meta):
        fields = UserSerializer.Meta.fields + ['username', 'registered', 'last_login', 'is_active']
        read_only_fields = fields

    def get_registered(self, obj):
        return getattr(obj, "registration", None) is not None
