# teams/services.py
"""
Team formation workflow: create → invite → accept/decline → finalize,
plus the admin overrides (move, confirm, delete).

Every multi-row write runs inside transaction.atomic. Room capacity is
enforced by claiming a (room, room_slot) pair that the database keeps
unique, so two concurrent finalizes cannot both take the last place.
"""
import logging

from django.conf import settings
from django.contrib.auth import get_user_model
from django.db import IntegrityError, transaction
from django.db.models import Count
from django.utils import timezone
from rest_framework.exceptions import APIException, PermissionDenied, ValidationError

from core.exceptions import (
    AlreadyInvited,
    AlreadyOnTeam,
    InviteExpired,
    InviteNotPending,
    NameTooLong,
    NotCheckedIn,
    NotRegistered,
    NotTeamLeader,
    RoomFull,
    SoloTeamPinned,
    TeamFinalized,
    TeamFull,
    UnknownRoom,
    UserNotFound,
)
from core.sanitizers import normalize_email, sanitize_text, split_emails
from events.models import Registration
from events.services import require_checked_in
from . import rooms
from .models import Team, TeamInvite, TeamMember
from .policies import TeamPolicy
from .state_machine import finalize_team as finalize_transition, transition_invite

logger = logging.getLogger("hackathon.teams")

User = get_user_model()


# -------------------------------------------------------------------
# Lookups
# -------------------------------------------------------------------
def team_max_size() -> int:
    return settings.HACKATHON_TEAM_MAX_SIZE


def accepted_team_for(user):
    """The team the user is an accepted member of, if any."""
    membership = (
        TeamMember.objects.select_related("team")
        .filter(user=user, status=TeamMember.STATUS_ACCEPTED)
        .first()
    )
    return membership.team if membership else None


def accepted_count(team) -> int:
    return TeamMember.objects.filter(team=team, status=TeamMember.STATUS_ACCEPTED).count()


def live_pending_invites(team, now=None):
    now = now or timezone.now()
    return TeamInvite.objects.filter(
        team=team,
        status=TeamInvite.STATUS_PENDING,
        expires_at__gt=now,
    )


def pending_invites_for(user):
    """Live invites addressed to the user's e-mail, newest first."""
    return (
        TeamInvite.objects.select_related("team", "inviter")
        .filter(
            invitee_email__iexact=normalize_email(user.email),
            status=TeamInvite.STATUS_PENDING,
            expires_at__gt=timezone.now(),
        )
        .order_by("-created_at")
    )


def room_occupancy(exclude_team=None) -> dict:
    """Finalized teams per stored room value."""
    qs = Team.objects.filter(is_finalized=True)
    if exclude_team is not None:
        qs = qs.exclude(pk=exclude_team.pk)
    rows = qs.order_by().values("room").annotate(n=Count("id"))
    return {row["room"]: row["n"] for row in rows}


# -------------------------------------------------------------------
# Create
# -------------------------------------------------------------------
def create_team(user, name) -> Team:
    require_checked_in(user)

    name = sanitize_text(name)
    if not name:
        raise ValidationError({"name": ["Team name is required."]})

    max_length = settings.HACKATHON_TEAM_NAME_MAX_LENGTH
    if len(name) > max_length:
        raise NameTooLong(f"Team name must be at most {max_length} characters.")

    if accepted_team_for(user) is not None:
        raise AlreadyOnTeam("You are already on a team.")

    try:
        with transaction.atomic():
            team = Team.objects.create(name=name, leader=user, room=rooms.TBD_ROOM)
            TeamMember.objects.create(team=team, user=user, status=TeamMember.STATUS_ACCEPTED)
    except IntegrityError:
        raise AlreadyOnTeam("You are already on a team.")

    logger.info(f"Team created: team={team.id}, name={team.name!r}, leader={user.id}")
    return team


# -------------------------------------------------------------------
# Invite
# -------------------------------------------------------------------
def _error_code(exc: APIException) -> str:
    return getattr(exc.detail, "code", None) or exc.default_code


def _invite_one(team, inviter, email) -> TeamInvite:
    user = User.objects.filter(email__iexact=email).first()
    if user is None:
        raise UserNotFound(f"No user with e-mail {email}.")

    registration = Registration.objects.filter(user=user).first()
    if registration is None:
        raise NotRegistered(f"{email} has not registered for the hackathon.")

    if not registration.checked_in:
        raise NotCheckedIn(f"{email} is not checked in.")

    if TeamMember.objects.filter(
        team=team, user=user, status=TeamMember.STATUS_ACCEPTED
    ).exists():
        raise AlreadyOnTeam(f"{email} is already on this team.")

    live = live_pending_invites(team)
    if live.filter(invitee_email__iexact=email).exists():
        raise AlreadyInvited(f"{email} already has a pending invite.")

    max_size = team_max_size()
    if accepted_count(team) + live.count() + 1 > max_size:
        raise TeamFull(f"Team is full ({max_size} members including pending invites).")

    return TeamInvite.objects.create(team=team, inviter=inviter, invitee_email=email)


def invite_members(team, inviter, emails) -> dict:
    """
    Invite a batch of e-mails. Each address is checked on its own; a failure
    is reported for that address and never aborts the rest of the batch.
    """
    can, reason = TeamPolicy.can_invite(inviter, team)
    if not can:
        if not TeamPolicy.is_leader(inviter, team):
            raise NotTeamLeader(reason)
        raise TeamFinalized(reason)

    addresses = split_emails(emails)
    if not addresses:
        raise ValidationError({"emails": ["At least one e-mail is required."]})

    results = []
    for email in addresses:
        try:
            invite = _invite_one(team, inviter, email)
        except APIException as exc:
            results.append(
                {
                    "email": email,
                    "ok": False,
                    "error": {"code": _error_code(exc), "detail": str(exc.detail)},
                }
            )
        else:
            results.append({"email": email, "ok": True, "invite_id": invite.id})

    succeeded = sum(1 for r in results if r["ok"])
    failed = len(results) - succeeded

    logger.info(
        f"Invites sent: team={team.id}, inviter={inviter.id}, "
        f"succeeded={succeeded}, failed={failed}"
    )
    return {
        "results": results,
        "succeeded": succeeded,
        "failed": failed,
        "summary": f"{succeeded} succeeded, {failed} failed",
    }


# -------------------------------------------------------------------
# Respond
# -------------------------------------------------------------------
def respond_to_invite(invite, user, accept: bool) -> TeamInvite:
    if normalize_email(user.email) != normalize_email(invite.invitee_email):
        raise PermissionDenied("This invite is addressed to someone else.")

    require_checked_in(user)

    if invite.status != TeamInvite.STATUS_PENDING:
        raise InviteNotPending()
    if invite.is_expired():
        raise InviteExpired()

    if not accept:
        transition_invite(invite, TeamInvite.STATUS_DECLINED, actor=user)
        return invite

    with transaction.atomic():
        team = Team.objects.select_for_update().get(pk=invite.team_id)
        invite = TeamInvite.objects.select_for_update().get(pk=invite.pk)

        if invite.status != TeamInvite.STATUS_PENDING:
            raise InviteNotPending()
        if accepted_team_for(user) is not None:
            raise AlreadyOnTeam("You are already on a team.")
        if team.is_finalized:
            raise TeamFinalized()
        if accepted_count(team) + 1 > team_max_size():
            raise TeamFull()

        ok, reason = transition_invite(invite, TeamInvite.STATUS_ACCEPTED, actor=user)
        if not ok:
            raise InviteNotPending(reason)

        try:
            with transaction.atomic():
                TeamMember.objects.update_or_create(
                    team=team,
                    user=user,
                    defaults={"status": TeamMember.STATUS_ACCEPTED},
                )
        except IntegrityError:
            raise AlreadyOnTeam("You are already on a team.")

    return invite


# -------------------------------------------------------------------
# Room placement
# -------------------------------------------------------------------
def _write_room(team, stored_room, slot, finalize, actor):
    if finalize:
        finalize_transition(team, stored_room, slot, actor=actor)
    else:
        team.room = stored_room
        team.room_slot = slot
        team.save(update_fields=["room", "room_slot", "updated_at"])


def _store_room(team, room_id, finalize=False, actor=None) -> Team:
    """
    Persist a room decision. Finalized teams in a bounded room claim a free
    slot; a slot lost to a concurrent writer is retried, and RoomFull is
    raised when none is left.
    """
    room = rooms.get_room(room_id)
    stored_room = "" if room_id == rooms.UNASSIGNED_ROOM_ID else room_id
    needs_slot = room is not None and room.is_bounded and (finalize or team.is_finalized)

    if not needs_slot:
        _write_room(team, stored_room, None, finalize, actor)
        return team

    taken = set(
        Team.objects.filter(room=stored_room, room_slot__isnull=False)
        .exclude(pk=team.pk)
        .values_list("room_slot", flat=True)
    )
    snapshot = (team.room, team.room_slot, team.is_finalized)

    for slot in range(room.max_teams):
        if slot in taken:
            continue
        try:
            with transaction.atomic():
                _write_room(team, stored_room, slot, finalize, actor)
            return team
        except IntegrityError:
            team.room, team.room_slot, team.is_finalized = snapshot
            logger.info(f"Slot {slot} of room {stored_room} was taken concurrently")

    raise RoomFull(f"{room.name} is already at capacity ({room.max_teams} teams)")


def finalize(team, user, desired_room=None) -> Team:
    """
    Leader locks the team. Solo teams always land in the overflow room,
    whatever was requested.
    """
    with transaction.atomic():
        team = Team.objects.select_for_update().get(pk=team.pk)

        can, reason = TeamPolicy.can_finalize(user, team)
        if not can:
            if not TeamPolicy.is_leader(user, team):
                raise NotTeamLeader(reason)
            raise TeamFinalized(reason)

        count = accepted_count(team)
        room_id = rooms.assign(count, desired_room, room_occupancy(exclude_team=team))
        _store_room(team, room_id, finalize=True, actor=user)

    logger.info(f"Team {team.id} finalized into {team.room} ({count} members)")
    return team


def move_team(team, admin, destination) -> Team:
    """
    Admin board move. Same capacity predicate as finalize; a solo team may
    only sit in the overflow room or wait unassigned, and never leaves the
    overflow room once there.
    """
    if not TeamPolicy.can_manage(admin):
        raise PermissionDenied("Admin access required.")

    if rooms.get_room(destination) is None:
        raise UnknownRoom(f"Unknown room: {destination}")

    with transaction.atomic():
        team = Team.objects.select_for_update().get(pk=team.pk)

        if rooms.board_bucket(team.room) == destination:
            return team

        count = accepted_count(team)
        if count == 1 and (
            team.room == rooms.OVERFLOW_ROOM_ID
            or destination not in (rooms.OVERFLOW_ROOM_ID, rooms.UNASSIGNED_ROOM_ID)
        ):
            raise SoloTeamPinned()

        room_id = rooms.assign(
            count,
            destination,
            room_occupancy(exclude_team=team),
            allow_unassigned=True,
        )
        _store_room(team, room_id, actor=admin)

    logger.info(f"Admin {admin.id} moved team {team.id} to {team.room or rooms.UNASSIGNED_ROOM_ID}")
    return team


# -------------------------------------------------------------------
# Admin
# -------------------------------------------------------------------
def set_confirmed(team, confirmed=None) -> Team:
    """Set the placement-confirmed flag, or toggle it when `confirmed` is None."""
    team.confirmed = (not team.confirmed) if confirmed is None else bool(confirmed)
    team.save(update_fields=["confirmed", "updated_at"])
    return team


def delete_team(team) -> None:
    """Members, then invites, then the team, all or nothing."""
    team_id = team.id
    with transaction.atomic():
        TeamMember.objects.filter(team=team).delete()
        TeamInvite.objects.filter(team=team).delete()
        team.delete()
    logger.info(f"Team {team_id} deleted")


def build_board():
    """
    Every catalog room (plus "unassigned") with the teams currently in it.
    Teams whose room is not in the catalog (e.g. TBD) show as unassigned.
    """
    teams = (
        Team.objects.select_related("leader")
        .prefetch_related("members__user")
        .order_by("created_at")
    )
    buckets = {room.id: [] for room in rooms.ROOMS}
    for team in teams:
        buckets[rooms.board_bucket(team.room)].append(team)
    return [(room, buckets[room.id]) for room in rooms.ROOMS]


def selectable_room_status():
    occupancy = room_occupancy()
    return [
        {
            "id": room.id,
            "name": room.name,
            "max_teams": room.max_teams,
            "occupied": occupancy.get(room.id, 0),
            "available": (not room.is_bounded) or occupancy.get(room.id, 0) < room.max_teams,
        }
        for room in rooms.selectable_rooms()
    ]
