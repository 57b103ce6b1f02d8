from rest_framework.permissions import BasePermission


def is_hackathon_admin(user) -> bool:
    return bool(
        user
        and user.is_authenticated
        and (getattr(user, "is_admin", False) or user.is_superuser)
    )


class IsHackathonAdmin(BasePermission):
    """
    Organiser console access: `is_admin` profile flag or Django superuser.
    """
    message = "Admin access required."

    def has_permission(self, request, view):
        return is_hackathon_admin(request.user)
