from rest_framework import serializers

from core.sanitizers import sanitize_text
from .models import Registration, ScheduleItem


REGISTRATION_PROFILE_FIELDS = [
    "phone",
    "school_name",
    "school_name_other",
    "grade",
    "year_of_study",
    "university",
    "github_username",
    "hackathons_attended",
    "dietary_restrictions",
    "dietary_restrictions_other",
    "t_shirt_size",
    "emergency_contact_name",
    "emergency_contact_phone",
    "team_name",
]


# -----------------------------------------
# REGISTRATION (participant side)
# -----------------------------------------
class RegistrationSerializer(serializers.ModelSerializer):
    class Meta:
        model = Registration
        fields = [
            "id",
            "email",
            "full_name",
            "checked_in",
            "registered_at",
            *REGISTRATION_PROFILE_FIELDS,
        ]
        read_only_fields = ["id", "email", "checked_in", "registered_at"]

    def validate_full_name(self, value):
        value = sanitize_text(value, max_length=255)
        if not value:
            raise serializers.ValidationError("Full name is required.")
        return value

    def validate_github_username(self, value):
        if value:
            value = value.strip().lstrip("@")
        return value or None

    def validate(self, attrs):
        if attrs.get("school_name") != "other" and "school_name" in attrs:
            attrs["school_name_other"] = None
        if attrs.get("dietary_restrictions") != "other" and "dietary_restrictions" in attrs:
            attrs["dietary_restrictions_other"] = None
        return attrs


# -----------------------------------------
# REGISTRATION (organiser side)
# -----------------------------------------
class AdminRegistrationSerializer(serializers.ModelSerializer):
    user_id = serializers.IntegerField(read_only=True)

    class Meta:
        model = Registration
        fields = [
            "id",
            "user_id",
            "email",
            "full_name",
            "checked_in",
            "registered_at",
            *REGISTRATION_PROFILE_FIELDS,
        ]
        read_only_fields = fields


class CheckInSerializer(serializers.Serializer):
    # Omitted -> toggle
    checked_in = serializers.BooleanField(required=False)


# -----------------------------------------
# SCHEDULE
# -----------------------------------------
class ScheduleItemSerializer(serializers.ModelSerializer):
    class Meta:
        model = ScheduleItem
        fields = [
            "id",
            "title",
            "description",
            "start_time",
            "end_time",
            "location",
            "type",
            "created_at",
            "updated_at",
        ]
        read_only_fields = ["id", "created_at", "updated_at"]

    def validate_title(self, value):
        value = sanitize_text(value, max_length=255)
        if not value:
            raise serializers.ValidationError("Title is required.")
        return value

    def validate(self, attrs):
        start = attrs.get("start_time", getattr(self.instance, "start_time", None))
        end = attrs.get("end_time", getattr(self.instance, "end_time", None))
        if start and end and end < start:
            raise serializers.ValidationError({"end_time": "End time must be after start time."})
        return attrs
