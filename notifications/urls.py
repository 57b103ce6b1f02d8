from django.urls import path

from .views import (
    MyNotificationsView,
    NotificationReadView,
    MarkReadView,
    AdminNotificationListCreateView,
    AdminNotificationDetailView,
    AdminNotificationToggleView,
    AdminNotificationReplayView,
)

urlpatterns = [
    path("", MyNotificationsView.as_view(), name="my-notifications"),
    path("mark-read/", MarkReadView.as_view(), name="notifications-mark-read"),
    path("<int:notification_id>/read/", NotificationReadView.as_view(), name="notification-read"),

    # Organiser console
    path("admin/", AdminNotificationListCreateView.as_view(), name="admin-notifications"),
    path("admin/<int:notification_id>/", AdminNotificationDetailView.as_view(), name="admin-notification-detail"),
    path("admin/<int:notification_id>/toggle/", AdminNotificationToggleView.as_view(), name="admin-notification-toggle"),
    path("admin/<int:notification_id>/replay/", AdminNotificationReplayView.as_view(), name="admin-notification-replay"),
]
