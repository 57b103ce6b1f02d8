# teams/policies.py
"""
Permission checks for team actions.

Views and services ask these instead of inlining leader/admin logic.
Methods return bool or (bool, str) with a reason.
"""
from typing import Tuple

from core.permissions import is_hackathon_admin
from .models import Team


class TeamPolicy:

    @staticmethod
    def is_admin(user) -> bool:
        return is_hackathon_admin(user)

    @staticmethod
    def is_leader(user, team: Team) -> bool:
        if not user or not user.is_authenticated or team is None:
            return False
        return team.leader_id == user.id

    # ─────────────────────────────────────────────────────────────
    # Participant actions
    # ─────────────────────────────────────────────────────────────

    @staticmethod
    def can_invite(user, team: Team) -> Tuple[bool, str]:
        if not TeamPolicy.is_leader(user, team):
            return False, "Only the team leader can invite members"
        if team.is_finalized:
            return False, "Team is finalized"
        return True, ""

    @staticmethod
    def can_finalize(user, team: Team) -> Tuple[bool, str]:
        if not TeamPolicy.is_leader(user, team):
            return False, "Only the team leader can finalize the team"
        if team.is_finalized:
            return False, "Team is already finalized"
        return True, ""

    @staticmethod
    def can_notify(user, team: Team) -> bool:
        """Admins may message any team; leaders their own."""
        return TeamPolicy.is_admin(user) or TeamPolicy.is_leader(user, team)

    # ─────────────────────────────────────────────────────────────
    # Admin overrides (allowed on finalized teams too)
    # ─────────────────────────────────────────────────────────────

    @staticmethod
    def can_manage(user) -> bool:
        return TeamPolicy.is_admin(user)
