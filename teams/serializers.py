from rest_framework import serializers

from . import rooms
from .models import Team, TeamInvite, TeamMember


class TeamMemberSerializer(serializers.ModelSerializer):
    user_id = serializers.IntegerField(source="user.id", read_only=True)
    email = serializers.EmailField(source="user.email", read_only=True)
    full_name = serializers.CharField(source="user.display_name", read_only=True)
    is_leader = serializers.SerializerMethodField()

    class Meta:
        model = TeamMember
        fields = ["id", "user_id", "email", "full_name", "status", "is_leader", "joined_at"]

    def get_is_leader(self, obj):
        return obj.team.leader_id == obj.user_id


class TeamInviteSerializer(serializers.ModelSerializer):
    team_name = serializers.CharField(source="team.name", read_only=True)
    inviter_email = serializers.EmailField(source="inviter.email", read_only=True)
    inviter_name = serializers.CharField(source="inviter.display_name", read_only=True)

    class Meta:
        model = TeamInvite
        fields = [
            "id",
            "team",
            "team_name",
            "inviter_email",
            "inviter_name",
            "invitee_email",
            "status",
            "created_at",
            "expires_at",
        ]
        read_only_fields = fields


class TeamSerializer(serializers.ModelSerializer):
    leader_id = serializers.IntegerField(read_only=True)
    leader_email = serializers.EmailField(source="leader.email", read_only=True)
    members = serializers.SerializerMethodField()
    member_count = serializers.SerializerMethodField()
    room_name = serializers.SerializerMethodField()

    class Meta:
        model = Team
        fields = [
            "id",
            "name",
            "leader_id",
            "leader_email",
            "room",
            "room_name",
            "is_finalized",
            "confirmed",
            "members",
            "member_count",
            "created_at",
            "updated_at",
        ]
        read_only_fields = fields

    def _accepted(self, obj):
        return [m for m in obj.members.all() if m.status == TeamMember.STATUS_ACCEPTED]

    def get_members(self, obj):
        return TeamMemberSerializer(self._accepted(obj), many=True).data

    def get_member_count(self, obj):
        return len(self._accepted(obj))

    def get_room_name(self, obj):
        room = rooms.get_room(obj.room)
        return room.name if room else None


class MyTeamSerializer(TeamSerializer):
    """Team as seen by one of its members; leaders also see pending invites."""
    pending_invites = serializers.SerializerMethodField()
    is_leader = serializers.SerializerMethodField()

    class Meta(TeamSerializer.Meta):
        fields = TeamSerializer.Meta.fields + ["pending_invites", "is_leader"]
        read_only_fields = fields

    def _viewer(self):
        request = self.context.get("request")
        return getattr(request, "user", None)

    def get_is_leader(self, obj):
        viewer = self._viewer()
        return bool(viewer and viewer.id == obj.leader_id)

    def get_pending_invites(self, obj):
        if not self.get_is_leader(obj):
            return []
        from .services import live_pending_invites

        invites = live_pending_invites(obj).select_related("team", "inviter")
        return TeamInviteSerializer(invites, many=True).data


class CreateTeamSerializer(serializers.Serializer):
    # Length is checked by the service so it can raise NameTooLong
    name = serializers.CharField(allow_blank=True, trim_whitespace=False)


class InviteBatchSerializer(serializers.Serializer):
    emails = serializers.JSONField()

    def validate_emails(self, value):
        if isinstance(value, str):
            return value
        if isinstance(value, list) and all(isinstance(v, str) for v in value):
            return value
        raise serializers.ValidationError("Provide a list of e-mails or a comma separated string.")


class RespondInviteSerializer(serializers.Serializer):
    ACTION_ACCEPT = "accept"
    ACTION_DECLINE = "decline"

    action = serializers.ChoiceField(choices=[ACTION_ACCEPT, ACTION_DECLINE])


class FinalizeSerializer(serializers.Serializer):
    room = serializers.CharField(required=False, allow_blank=True, allow_null=True)


class MoveTeamSerializer(serializers.Serializer):
    room = serializers.CharField()


class ConfirmTeamSerializer(serializers.Serializer):
    # Omitted -> toggle
    confirmed = serializers.BooleanField(required=False)


class TeamNotificationSerializer(serializers.Serializer):
    title = serializers.CharField(max_length=200)
    message = serializers.CharField()


def serialize_board(board):
    return [
        {
            "id": room.id,
            "name": room.name,
            "max_teams": room.max_teams,
            "teams": TeamSerializer(teams, many=True).data,
        }
        for room, teams in board
    ]
