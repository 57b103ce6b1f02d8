import logging

from rest_framework.views import APIView
from rest_framework.response import Response
from rest_framework import status
from rest_framework.exceptions import AuthenticationFailed, ValidationError
from rest_framework.permissions import IsAuthenticated

from core.exceptions import AuthServiceUnavailable
from core.services import is_registration_open
from core.supabase_auth import get_or_create_supabase_user
from core.supabase_client import SupabaseError, send_email_otp, verify_email_otp
from users.serializers import UserSerializer
from .serializers import OtpRequestSerializer, OtpVerifySerializer

logger = logging.getLogger("hackathon")


class OtpRequestView(APIView):
    """
    POST /api/auth/otp/request/  {"email": "..."}
    Supabase e-mails a 6-digit code.
    """
    # allow unauthenticated
    permission_classes = []
    authentication_classes = []
    throttle_scope = "otp-request"

    def post(self, request):
        serializer = OtpRequestSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        email = serializer.validated_data["email"]

        try:
            sent = send_email_otp(email)
        except SupabaseError:
            raise ValidationError({"email": ["Could not send a code to this address. Try again shortly."]})

        if not sent:
            raise AuthServiceUnavailable()

        return Response({"message": "Code sent", "email": email}, status=status.HTTP_200_OK)


class OtpVerifyView(APIView):
    """
    POST /api/auth/otp/verify/  {"email": "...", "token": "123456"}
    Returns the Supabase session plus the local profile.
    """
    permission_classes = []
    authentication_classes = []
    throttle_scope = "otp-request"

    def get_authenticate_header(self, request):
        # keep bad codes a 401 even though no authenticator runs here
        return 'Bearer realm="api"'

    def post(self, request):
        serializer = OtpVerifySerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        email = serializer.validated_data["email"]

        try:
            session = verify_email_otp(email, serializer.validated_data["token"])
        except SupabaseError:
            raise AuthenticationFailed("Invalid or expired code.")

        if session is None:
            raise AuthServiceUnavailable()

        user = get_or_create_supabase_user(session["user_id"], session["email"])
        logger.info(f"User {user.id} signed in with OTP")

        return Response(
            {
                "access_token": session["access_token"],
                "refresh_token": session["refresh_token"],
                "expires_in": session["expires_in"],
                "user": UserSerializer(user).data,
            },
            status=status.HTTP_200_OK,
        )


class MeView(APIView):
    permission_classes = [IsAuthenticated]

    def get(self, request):
        data = UserSerializer(request.user).data
        data["registered"] = hasattr(request.user, "registration")
        data["registration_open"] = is_registration_open()
        return Response(data)
