import time

from django.conf import settings
from django.db import connections
from django.db.utils import OperationalError
from rest_framework.permissions import AllowAny, IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from .permissions import IsHackathonAdmin
from .serializers import RegistrationSettingSerializer
from .services import is_registration_open, set_registration_open


class RegistrationSettingView(APIView):
    """
    GET /api/core/settings/registration/  -> {"registration_open": bool}
    PUT /api/core/settings/registration/  (admin)
    """

    def get_permissions(self):
        if self.request.method == "GET":
            return [IsAuthenticated()]
        return [IsHackathonAdmin()]

    def get(self, request):
        return Response({"registration_open": is_registration_open()})

    def put(self, request):
        serializer = RegistrationSettingSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        set_registration_open(serializer.validated_data["registration_open"], user=request.user)
        return Response({"registration_open": is_registration_open()})


class HealthCheckView(APIView):
    """
    Lightweight health endpoint for uptime checks.
    - Checks DB connectivity
    - Returns env and simple latency
    """
    permission_classes = [AllowAny]
    authentication_classes = []  # public endpoint

    def get(self, request, *args, **kwargs):
        start = time.time()

        db_ok = True
        try:
            connections["default"].cursor()
        except OperationalError:
            db_ok = False

        duration_ms = int((time.time() - start) * 1000)

        return Response(
            {
                "status": "ok" if db_ok else "degraded",
                "db": db_ok,
                "env": getattr(settings, "ENV", "unknown"),
                "latency_ms": duration_ms,
            }
        )
