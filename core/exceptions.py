from rest_framework.views import exception_handler as drf_exception_handler
from rest_framework.exceptions import APIException
from rest_framework.response import Response
from rest_framework import status
from django.db import DatabaseError
import logging

logger = logging.getLogger("hackathon")


# -------------------------------------------------------------------
# Domain errors
# -------------------------------------------------------------------
class UserNotFound(APIException):
    status_code = status.HTTP_404_NOT_FOUND
    default_detail = "No user with that e-mail."
    default_code = "user_not_found"


class NotRegistered(APIException):
    status_code = status.HTTP_404_NOT_FOUND
    default_detail = "User has not registered for the hackathon."
    default_code = "not_registered"


class NotCheckedIn(APIException):
    status_code = status.HTTP_403_FORBIDDEN
    default_detail = "User is not checked in."
    default_code = "not_checked_in"


class RoomFull(APIException):
    status_code = status.HTTP_409_CONFLICT
    default_detail = "Room is at capacity."
    default_code = "room_full"


class TeamFull(APIException):
    status_code = status.HTTP_409_CONFLICT
    default_detail = "Team is full."
    default_code = "team_full"


class NameTooLong(APIException):
    status_code = status.HTTP_400_BAD_REQUEST
    default_detail = "Team name is too long."
    default_code = "name_too_long"


class NotTeamLeader(APIException):
    status_code = status.HTTP_403_FORBIDDEN
    default_detail = "Only the team leader can do this."
    default_code = "not_team_leader"


class TeamFinalized(APIException):
    status_code = status.HTTP_409_CONFLICT
    default_detail = "Team is already finalized."
    default_code = "team_finalized"


class AlreadyOnTeam(APIException):
    status_code = status.HTTP_409_CONFLICT
    default_detail = "User is already on a team."
    default_code = "already_on_team"


class AlreadyInvited(APIException):
    status_code = status.HTTP_409_CONFLICT
    default_detail = "User already has a pending invite to this team."
    default_code = "already_invited"


class InviteNotPending(APIException):
    status_code = status.HTTP_409_CONFLICT
    default_detail = "Invite has already been answered."
    default_code = "invite_not_pending"


class InviteExpired(APIException):
    status_code = status.HTTP_410_GONE
    default_detail = "Invite has expired."
    default_code = "invite_expired"


class RoomRequired(APIException):
    status_code = status.HTTP_400_BAD_REQUEST
    default_detail = "A room must be selected."
    default_code = "room_required"


class UnknownRoom(APIException):
    status_code = status.HTTP_400_BAD_REQUEST
    default_detail = "Unknown room."
    default_code = "unknown_room"


class SoloTeamPinned(APIException):
    status_code = status.HTTP_409_CONFLICT
    default_detail = "Solo teams must stay in the Library."
    default_code = "solo_team_pinned"


class RegistrationClosed(APIException):
    status_code = status.HTTP_403_FORBIDDEN
    default_detail = "Registration is closed."
    default_code = "registration_closed"


class AuthServiceUnavailable(APIException):
    status_code = status.HTTP_503_SERVICE_UNAVAILABLE
    default_detail = "Authentication service is not configured."
    default_code = "auth_unavailable"


def _error_body(data, exc):
    """Normalize DRF error data so every body carries detail + code."""
    if isinstance(exc, APIException) and isinstance(data, dict) and "detail" in data:
        codes = exc.get_codes()
        code = codes if isinstance(codes, str) else exc.default_code
        return {"detail": data["detail"], "code": code}
    return data


def custom_exception_handler(exc, context):
    """
    Wrap DRF + Django exceptions into a consistent response format.

    Success responses (2xx) are not touched.
    Only errors come through here.
    """
    response = drf_exception_handler(exc, context)

    # If DRF handled it, wrap it
    if response is not None:
        return Response(
            {
                "success": False,
                "status_code": response.status_code,
                "errors": _error_body(response.data, exc),
            },
            status=response.status_code,
            headers={
                k: response[k] for k in ("Retry-After", "WWW-Authenticate") if k in response
            },
        )

    if isinstance(exc, DatabaseError):
        logger.exception("Database error while handling request", exc_info=exc)
        return Response(
            {
                "success": False,
                "status_code": status.HTTP_503_SERVICE_UNAVAILABLE,
                "errors": {"detail": "Backend unavailable.", "code": "backend_error"},
            },
            status=status.HTTP_503_SERVICE_UNAVAILABLE,
        )

    # Unhandled exceptions -> 500
    logger.exception("Unhandled API exception", exc_info=exc)

    return Response(
        {
            "success": False,
            "status_code": status.HTTP_500_INTERNAL_SERVER_ERROR,
            "errors": {"detail": "Internal server error."},
        },
        status=status.HTTP_500_INTERNAL_SERVER_ERROR,
    )
