from rest_framework import serializers


class RegistrationSettingSerializer(serializers.Serializer):
    registration_open = serializers.BooleanField()
