from django.urls import path, include
from rest_framework.routers import DefaultRouter

from .views import (
    MyRegistrationView,
    RegistrationStatusView,
    AdminRegistrationListView,
    AdminCheckInView,
    ScheduleListView,
    AdminScheduleViewSet,
)

router = DefaultRouter()
router.register(r"admin/schedule", AdminScheduleViewSet, basename="admin-schedule")

urlpatterns = [
    path("registration/", MyRegistrationView.as_view(), name="my-registration"),
    path("registration/status/", RegistrationStatusView.as_view(), name="registration-status"),
    path("admin/registrations/", AdminRegistrationListView.as_view(), name="admin-registrations"),
    path(
        "admin/registrations/<int:registration_id>/check-in/",
        AdminCheckInView.as_view(),
        name="admin-registration-check-in",
    ),
    path("schedule/", ScheduleListView.as_view(), name="schedule-list"),
    path("", include(router.urls)),
]
