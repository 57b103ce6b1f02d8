from django.urls import path
from .views import RegistrationSettingView


urlpatterns = [
    path("settings/registration/", RegistrationSettingView.as_view(), name="registration-setting"),
]
