from rest_framework import serializers

from core.sanitizers import normalize_email


class OtpRequestSerializer(serializers.Serializer):
    email = serializers.EmailField()

    def validate_email(self, value):
        return normalize_email(value)


class OtpVerifySerializer(serializers.Serializer):
    email = serializers.EmailField()
    token = serializers.RegexField(
        r"^\d{6}$",
        error_messages={"invalid": "Enter the 6-digit code from the e-mail."},
    )

    def validate_email(self, value):
        return normalize_email(value)
