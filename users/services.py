# users/services.py
import logging

from django.contrib.auth import get_user_model
from django.db import transaction
from django.db.models import Q

from core.supabase_client import SupabaseError, call_rpc

logger = logging.getLogger("hackathon")

User = get_user_model()

DELETE_USER_RPC = "delete_user_completely"


def _delete_via_rpc(user) -> bool:
    """
    Ask the database function to remove the auth identity and everything
    hanging off it. The function answers with a message; one containing
    "Error:" is a failure.
    """
    if not user.supabase_id:
        return False

    try:
        result = call_rpc(DELETE_USER_RPC, {"user_id_to_delete": str(user.supabase_id)})
    except SupabaseError as e:
        logger.warning(f"{DELETE_USER_RPC} RPC failed for user {user.id}: {e}")
        return False

    if isinstance(result, str) and "Error:" in result:
        logger.warning(f"{DELETE_USER_RPC} RPC reported failure for user {user.id}: {result}")
        return False

    logger.info(f"{DELETE_USER_RPC} RPC succeeded for user {user.id}: {result}")
    return True


def _delete_locally(user) -> None:
    from events.models import Registration
    from notifications.models import Notification, NotificationReceipt
    from teams.models import Team, TeamInvite, TeamMember

    email = user.email
    with transaction.atomic():
        NotificationReceipt.objects.filter(user=user).delete()
        Notification.objects.filter(recipient=user).delete()
        TeamInvite.objects.filter(Q(invitee_email__iexact=email) | Q(inviter=user)).delete()
        TeamMember.objects.filter(user=user).delete()

        led_teams = Team.objects.filter(leader=user)
        TeamMember.objects.filter(team__in=led_teams).delete()
        TeamInvite.objects.filter(team__in=led_teams).delete()
        led_teams.delete()

        Registration.objects.filter(user=user).delete()
        User.objects.filter(pk=user.pk).delete()


def delete_user_completely(user) -> str:
    """
    Remove a participant and everything they own.

    Tries the Supabase database function first; whatever it leaves behind
    (or everything, when it fails or is unavailable) is removed in one
    local transaction. Returns "rpc" or "local".
    """
    user_id = user.id
    method = "rpc" if _delete_via_rpc(user) else "local"

    if User.objects.filter(pk=user_id).exists():
        _delete_locally(user)

    logger.info(f"User {user_id} deleted ({method})")
    return method
