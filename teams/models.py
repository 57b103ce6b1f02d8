from datetime import timedelta

from django.conf import settings
from django.db import models
from django.db.models import Q
from django.utils import timezone

from .rooms import TBD_ROOM


def default_invite_expiry():
    return timezone.now() + timedelta(days=settings.HACKATHON_INVITE_TTL_DAYS)


class Team(models.Model):
    """
    A hackathon team. `room` and `is_finalized` move together when the
    leader finalizes; `room_slot` is the capacity slot held in an ordinary
    room, unique per room.
    """
    name = models.CharField(max_length=64)
    leader = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="led_teams",
    )
    # catalog room id, TBD before finalize, "" when unassigned
    room = models.CharField(max_length=64, blank=True, default=TBD_ROOM)
    room_slot = models.PositiveSmallIntegerField(null=True, blank=True)
    is_finalized = models.BooleanField(default=False, db_index=True)
    confirmed = models.BooleanField(default=False)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["created_at"]
        constraints = [
            models.UniqueConstraint(
                fields=["room", "room_slot"],
                condition=Q(room_slot__isnull=False),
                name="team_room_slot_unique",
            ),
        ]
        indexes = [
            models.Index(fields=["room", "is_finalized"], name="team_room_final_idx"),
        ]

    def __str__(self):
        return self.name

    def accepted_members(self):
        return self.members.filter(status=TeamMember.STATUS_ACCEPTED)

    @property
    def member_count(self) -> int:
        return self.accepted_members().count()

    @property
    def is_solo(self) -> bool:
        return self.member_count == 1


class TeamMember(models.Model):
    STATUS_PENDING = "pending"
    STATUS_ACCEPTED = "accepted"
    STATUS_DECLINED = "declined"

    STATUS_CHOICES = [
        (STATUS_PENDING, "Pending"),
        (STATUS_ACCEPTED, "Accepted"),
        (STATUS_DECLINED, "Declined"),
    ]

    team = models.ForeignKey(Team, on_delete=models.CASCADE, related_name="members")
    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="team_memberships",
    )
    status = models.CharField(max_length=16, choices=STATUS_CHOICES, default=STATUS_PENDING)
    joined_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["joined_at"]
        constraints = [
            models.UniqueConstraint(fields=["team", "user"], name="team_member_unique"),
            # one accepted team per participant
            models.UniqueConstraint(
                fields=["user"],
                condition=Q(status="accepted"),
                name="one_accepted_team_per_user",
            ),
        ]

    def __str__(self):
        return f"{self.user} in {self.team} ({self.status})"


class TeamInvite(models.Model):
    STATUS_PENDING = "pending"
    STATUS_ACCEPTED = "accepted"
    STATUS_DECLINED = "declined"

    STATUS_CHOICES = [
        (STATUS_PENDING, "Pending"),
        (STATUS_ACCEPTED, "Accepted"),
        (STATUS_DECLINED, "Declined"),
    ]

    team = models.ForeignKey(Team, on_delete=models.CASCADE, related_name="invites")
    inviter = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="sent_team_invites",
    )
    invitee_email = models.EmailField(db_index=True)
    status = models.CharField(max_length=16, choices=STATUS_CHOICES, default=STATUS_PENDING)
    created_at = models.DateTimeField(auto_now_add=True)
    expires_at = models.DateTimeField(default=default_invite_expiry)

    class Meta:
        ordering = ["-created_at"]
        indexes = [
            models.Index(fields=["team", "status"], name="invite_team_status_idx"),
        ]

    def __str__(self):
        return f"Invite {self.invitee_email} -> {self.team} ({self.status})"

    def is_expired(self, now=None) -> bool:
        now = now or timezone.now()
        return self.expires_at is not None and self.expires_at <= now

    def is_live(self, now=None) -> bool:
        """Pending and not yet expired."""
        return self.status == self.STATUS_PENDING and not self.is_expired(now)
