from django.db.models import Q
from django.shortcuts import get_object_or_404
from rest_framework import status
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from core.permissions import IsHackathonAdmin
from . import services
from .models import Notification
from .serializers import (
    AdminNotificationSerializer,
    MarkReadSerializer,
    NotificationSerializer,
)


class MyNotificationsView(APIView):
    """
    GET /api/notifications/
    GET /api/notifications/?unread=true
    """
    permission_classes = [IsAuthenticated]

    def get(self, request):
        qs = services.visible_notifications(request.user)

        unread_only = request.query_params.get("unread")
        if unread_only and unread_only.lower() in ("1", "true", "yes"):
            qs = qs.filter(read_at__isnull=True)

        serializer = NotificationSerializer(qs, many=True)
        return Response(serializer.data)


class NotificationReadView(APIView):
    """
    POST   /api/notifications/<id>/read/  -> mark read (idempotent)
    DELETE /api/notifications/<id>/read/  -> mark unread
    """
    permission_classes = [IsAuthenticated]

    def _get_notification(self, request, notification_id):
        return get_object_or_404(services.visible_notifications(request.user), pk=notification_id)

    def post(self, request, notification_id):
        notification = self._get_notification(request, notification_id)
        receipt = services.mark_read(request.user, notification)
        return Response({"id": notification.id, "read_at": receipt.read_at})

    def delete(self, request, notification_id):
        notification = self._get_notification(request, notification_id)
        services.mark_unread(request.user, notification)
        return Response({"id": notification.id, "read_at": None})


class MarkReadView(APIView):
    """
    POST /api/notifications/mark-read/

    Body:
    {
      "ids": [1, 2, 3]   # or omit/empty to mark all as read
    }
    """
    permission_classes = [IsAuthenticated]

    def post(self, request):
        serializer = MarkReadSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        marked = services.mark_many_read(request.user, serializer.validated_data.get("ids"))
        return Response({"marked_read": marked}, status=status.HTTP_200_OK)


# -----------------------------
# Organiser console
# -----------------------------
class AdminNotificationListCreateView(APIView):
    """
    GET  /api/notifications/admin/?scope=global|user&q=...
    POST /api/notifications/admin/  -> new global notification
    """
    permission_classes = [IsHackathonAdmin]

    def get(self, request):
        qs = Notification.objects.select_related("team", "recipient").order_by("-created_at", "-id")

        scope = request.query_params.get("scope")
        if scope in (Notification.SCOPE_GLOBAL, Notification.SCOPE_USER):
            qs = qs.filter(scope=scope)

        q = (request.query_params.get("q") or "").strip()
        if q:
            qs = qs.filter(Q(title__icontains=q) | Q(message__icontains=q))

        return Response(AdminNotificationSerializer(qs, many=True).data)

    def post(self, request):
        serializer = AdminNotificationSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        notification = services.create_global_notification(
            request.user,
            serializer.validated_data["title"],
            serializer.validated_data["message"],
            is_active=serializer.validated_data.get("is_active", True),
        )
        return Response(
            AdminNotificationSerializer(notification).data,
            status=status.HTTP_201_CREATED,
        )


class AdminNotificationDetailView(APIView):
    """
    PATCH  /api/notifications/admin/<id>/
    DELETE /api/notifications/admin/<id>/
    """
    permission_classes = [IsHackathonAdmin]

    def patch(self, request, notification_id):
        notification = get_object_or_404(Notification, pk=notification_id)
        serializer = AdminNotificationSerializer(notification, data=request.data, partial=True)
        serializer.is_valid(raise_exception=True)
        notification = serializer.save()
        return Response(AdminNotificationSerializer(notification).data)

    def delete(self, request, notification_id):
        notification = get_object_or_404(Notification, pk=notification_id)
        notification.delete()
        return Response(status=status.HTTP_204_NO_CONTENT)


class AdminNotificationToggleView(APIView):
    """POST /api/notifications/admin/<id>/toggle/ -> flip is_active."""
    permission_classes = [IsHackathonAdmin]

    def post(self, request, notification_id):
        notification = get_object_or_404(Notification, pk=notification_id)
        notification = services.toggle_active(notification)
        return Response(AdminNotificationSerializer(notification).data)


class AdminNotificationReplayView(APIView):
    """
    POST /api/notifications/admin/<id>/replay/
    Re-sends the popup + sound to connected clients; nothing is stored.
    """
    permission_classes = [IsHackathonAdmin]
    throttle_scope = "notification-replay"

    def post(self, request, notification_id):
        notification = get_object_or_404(Notification, pk=notification_id)
        sent = services.replay(notification, actor=request.user)
        return Response(
            {"original_id": notification.id, "events_sent": len(sent)},
            status=status.HTTP_202_ACCEPTED,
        )
