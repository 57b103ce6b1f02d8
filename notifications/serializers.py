from rest_framework import serializers

from core.sanitizers import sanitize_text
from .models import Notification


class NotificationSerializer(serializers.ModelSerializer):
    team_name = serializers.CharField(source="team.name", read_only=True, default=None)
    read_at = serializers.SerializerMethodField()
    is_read = serializers.SerializerMethodField()

    class Meta:
        model = Notification
        fields = [
            "id",
            "scope",
            "title",
            "message",
            "is_active",
            "created_at",
            "created_by",
            "recipient",
            "team",
            "team_name",
            "batch",
            "read_at",
            "is_read",
        ]
        read_only_fields = fields

    def get_read_at(self, obj):
        # Annotated by visible_notifications(); absent elsewhere
        value = getattr(obj, "read_at", None)
        return serializers.DateTimeField().to_representation(value) if value else None

    def get_is_read(self, obj):
        return getattr(obj, "read_at", None) is not None


class AdminNotificationSerializer(serializers.ModelSerializer):
    team_name = serializers.CharField(source="team.name", read_only=True, default=None)
    recipient_email = serializers.EmailField(source="recipient.email", read_only=True, default=None)

    class Meta:
        model = Notification
        fields = [
            "id",
            "scope",
            "title",
            "message",
            "is_active",
            "created_at",
            "created_by",
            "recipient",
            "recipient_email",
            "team",
            "team_name",
            "batch",
        ]
        read_only_fields = [
            "id",
            "scope",
            "created_at",
            "created_by",
            "recipient",
            "recipient_email",
            "team",
            "team_name",
            "batch",
        ]

    def validate_title(self, value):
        value = sanitize_text(value, max_length=200)
        if not value:
            raise serializers.ValidationError("Title is required.")
        return value

    def validate_message(self, value):
        value = sanitize_text(value)
        if not value:
            raise serializers.ValidationError("Message is required.")
        return value


class MarkReadSerializer(serializers.Serializer):
    ids = serializers.ListField(child=serializers.IntegerField(), required=False, allow_empty=True)
