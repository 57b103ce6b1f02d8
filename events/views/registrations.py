import logging

from django.db import IntegrityError, transaction
from django.db.models import Q
from django.shortcuts import get_object_or_404
from rest_framework import generics, status
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from core.exceptions import NotRegistered, RegistrationClosed
from core.permissions import IsHackathonAdmin
from core.services import is_registration_open
from events.models import Registration
from events.serializers import (
    AdminRegistrationSerializer,
    CheckInSerializer,
    RegistrationSerializer,
)
from events.services import get_registration, set_checked_in

logger = logging.getLogger("hackathon")


class MyRegistrationView(APIView):
    """
    GET   /api/events/registration/  -> own registration
    POST  /api/events/registration/  -> register (while registration is open)
    PATCH /api/events/registration/  -> edit own answers (while open)
    """
    permission_classes = [IsAuthenticated]

    def get(self, request):
        registration = get_registration(request.user)
        if registration is None:
            raise NotRegistered()
        return Response(RegistrationSerializer(registration).data)

    def post(self, request):
        if not is_registration_open():
            raise RegistrationClosed()

        existing = get_registration(request.user)
        if existing:
            return Response(
                {"registered": True, "registration_id": existing.id},
                status=status.HTTP_409_CONFLICT,
            )

        serializer = RegistrationSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        try:
            with transaction.atomic():
                registration = serializer.save(user=request.user, email=request.user.email)
                self._sync_profile(request.user, registration)
        except IntegrityError:
            return Response({"registered": True}, status=status.HTTP_409_CONFLICT)

        logger.info(f"User {request.user.id} registered for the hackathon")
        return Response(RegistrationSerializer(registration).data, status=status.HTTP_201_CREATED)

    def patch(self, request):
        if not is_registration_open():
            raise RegistrationClosed()

        registration = get_registration(request.user)
        if registration is None:
            raise NotRegistered()

        serializer = RegistrationSerializer(registration, data=request.data, partial=True)
        serializer.is_valid(raise_exception=True)
        registration = serializer.save()
        self._sync_profile(request.user, registration)
        return Response(RegistrationSerializer(registration).data)

    @staticmethod
    def _sync_profile(user, registration):
        if user.full_name != registration.full_name:
            user.full_name = registration.full_name
            user.save(update_fields=["full_name"])


class RegistrationStatusView(APIView):
    """
    GET /api/events/registration/status/
    Check-in status used to gate the team and notification screens.
    """
    permission_classes = [IsAuthenticated]

    def get(self, request):
        registration = get_registration(request.user)
        return Response(
            {
                "registered": registration is not None,
                "checked_in": bool(registration and registration.checked_in),
                "registration_open": is_registration_open(),
            }
        )


class AdminRegistrationListView(generics.ListAPIView):
    """
    GET /api/events/admin/registrations/?checked_in=true&q=alice
    """
    permission_classes = [IsHackathonAdmin]
    serializer_class = AdminRegistrationSerializer

    def get_queryset(self):
        qs = Registration.objects.all().order_by("-registered_at")

        checked_in = self.request.query_params.get("checked_in")
        if checked_in is not None:
            qs = qs.filter(checked_in=checked_in.lower() in ("1", "true", "yes"))

        q = (self.request.query_params.get("q") or "").strip()
        if q:
            qs = qs.filter(
                Q(full_name__icontains=q)
                | Q(email__icontains=q)
                | Q(school_name__icontains=q)
                | Q(university__icontains=q)
            )
        return qs


class AdminCheckInView(APIView):
    """
    PATCH /api/events/admin/registrations/<id>/check-in/
    Body: {"checked_in": true|false}, or empty to toggle.
    """
    permission_classes = [IsHackathonAdmin]

    def patch(self, request, registration_id):
        registration = get_object_or_404(Registration, pk=registration_id)
        serializer = CheckInSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        registration = set_checked_in(registration, serializer.validated_data.get("checked_in"))
        return Response(AdminRegistrationSerializer(registration).data)
