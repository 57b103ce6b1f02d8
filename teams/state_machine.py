# teams/state_machine.py
"""
Invite and team state machines.

Invite (per team + candidate):
    pending → accepted
            └→ declined

Team:
    open → finalized   (room is set in the same step)

Answered invites are final; any transition not in VALID_INVITE_TRANSITIONS
is rejected.
"""
from typing import Tuple
import logging

from .models import Team, TeamInvite

logger = logging.getLogger('hackathon.teams')


VALID_INVITE_TRANSITIONS = {
    TeamInvite.STATUS_PENDING: [TeamInvite.STATUS_ACCEPTED, TeamInvite.STATUS_DECLINED],
    TeamInvite.STATUS_ACCEPTED: [],
    TeamInvite.STATUS_DECLINED: [],
}


def can_transition_invite(invite: TeamInvite, new_status: str) -> Tuple[bool, str]:
    """
    Check if an invite can move to a new status.

    Returns (can_transition: bool, reason: str)
    """
    if new_status not in dict(TeamInvite.STATUS_CHOICES):
        return False, f"Invalid status: {new_status}"

    allowed = VALID_INVITE_TRANSITIONS.get(invite.status, [])

    if new_status not in allowed:
        return False, f"Cannot transition invite from '{invite.status}' to '{new_status}'"

    return True, ""


def transition_invite(invite: TeamInvite, new_status: str, actor=None, save: bool = True) -> Tuple[bool, str]:
    """
    Attempt to move an invite to a new status.

    Returns (success: bool, message: str)
    """
    can, reason = can_transition_invite(invite, new_status)

    if not can:
        logger.warning(
            f"Invalid invite transition attempted: invite={invite.id}, "
            f"from={invite.status}, to={new_status}, actor={getattr(actor, 'id', 'unknown')}. "
            f"Reason: {reason}"
        )
        return False, reason

    old_status = invite.status
    invite.status = new_status

    if save:
        invite.save(update_fields=['status'])

    logger.info(
        f"Invite state transition: invite={invite.id}, team={invite.team_id}, "
        f"from={old_status}, to={new_status}, actor={getattr(actor, 'id', 'unknown')}"
    )
    return True, f"Invite {new_status}"


def finalize_team(team: Team, room: str, room_slot=None, actor=None, save: bool = True) -> Tuple[bool, str]:
    """
    Lock a team into a room. `room` and `is_finalized` change together.
    """
    if team.is_finalized:
        return False, "Team is already finalized"

    team.room = room
    team.room_slot = room_slot
    team.is_finalized = True

    if save:
        team.save(update_fields=['room', 'room_slot', 'is_finalized', 'updated_at'])

    logger.info(
        f"Team finalized: team={team.id}, room={room}, slot={room_slot}, "
        f"actor={getattr(actor, 'id', 'unknown')}"
    )
    return True, "Team finalized"
