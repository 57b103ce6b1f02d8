from django.shortcuts import get_object_or_404
from rest_framework import status
from rest_framework.exceptions import PermissionDenied
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from events.services import require_checked_in
from notifications.serializers import NotificationSerializer
from notifications.services import send_team_notification
from teams import services
from teams.models import Team, TeamInvite
from teams.policies import TeamPolicy
from teams.serializers import (
    CreateTeamSerializer,
    FinalizeSerializer,
    InviteBatchSerializer,
    MyTeamSerializer,
    RespondInviteSerializer,
    TeamInviteSerializer,
    TeamNotificationSerializer,
)
from teams.throttles import TeamInviteThrottle


def _team_queryset():
    return Team.objects.select_related("leader").prefetch_related("members__user")


class MyTeamView(APIView):
    """
    GET  /api/teams/  -> {"team": <my accepted team or null>}
    POST /api/teams/  -> create a team, caller becomes leader
    """
    permission_classes = [IsAuthenticated]

    def get(self, request):
        team = services.accepted_team_for(request.user)
        if team is None:
            return Response({"team": None})
        team = _team_queryset().get(pk=team.pk)
        return Response({"team": MyTeamSerializer(team, context={"request": request}).data})

    def post(self, request):
        serializer = CreateTeamSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        team = services.create_team(request.user, serializer.validated_data["name"])
        team = _team_queryset().get(pk=team.pk)
        return Response(
            {"team": MyTeamSerializer(team, context={"request": request}).data},
            status=status.HTTP_201_CREATED,
        )


class RoomListView(APIView):
    """GET /api/teams/rooms/ -> rooms a leader can pick, with occupancy."""
    permission_classes = [IsAuthenticated]

    def get(self, request):
        return Response({"rooms": services.selectable_room_status()})


class TeamInviteCreateView(APIView):
    """
    POST /api/teams/<team_id>/invites/
    Body: {"emails": ["a@x.com", "b@x.com"]}

    201 when every address was invited, 200 on partial success,
    400 when none were.
    """
    permission_classes = [IsAuthenticated]
    throttle_classes = [TeamInviteThrottle]
    throttle_scope = "team-invite"

    def post(self, request, team_id):
        team = get_object_or_404(Team, pk=team_id)
        serializer = InviteBatchSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        result = services.invite_members(team, request.user, serializer.validated_data["emails"])

        if result["failed"] == 0:
            code = status.HTTP_201_CREATED
        elif result["succeeded"] > 0:
            code = status.HTTP_200_OK
        else:
            code = status.HTTP_400_BAD_REQUEST
        return Response(result, status=code)


class FinalizeTeamView(APIView):
    """
    POST /api/teams/<team_id>/finalize/
    Body: {"room": "124"}  (ignored for solo teams)
    """
    permission_classes = [IsAuthenticated]

    def post(self, request, team_id):
        team = get_object_or_404(Team, pk=team_id)
        serializer = FinalizeSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        team = services.finalize(team, request.user, serializer.validated_data.get("room"))
        team = _team_queryset().get(pk=team.pk)
        return Response({"team": MyTeamSerializer(team, context={"request": request}).data})


class TeamNotifyView(APIView):
    """
    POST /api/teams/<team_id>/notify/
    Body: {"title": "...", "message": "..."}
    One notification per accepted member (leader included).
    """
    permission_classes = [IsAuthenticated]

    def post(self, request, team_id):
        team = get_object_or_404(Team, pk=team_id)
        if not TeamPolicy.can_notify(request.user, team):
            raise PermissionDenied("Only admins or the team leader can notify this team.")
        if not TeamPolicy.is_admin(request.user):
            require_checked_in(request.user)

        serializer = TeamNotificationSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        rows = send_team_notification(
            team,
            request.user,
            serializer.validated_data["title"],
            serializer.validated_data["message"],
        )
        return Response(
            {
                "count": len(rows),
                "batch": str(rows[0].batch) if rows else None,
                "notifications": NotificationSerializer(rows, many=True).data,
            },
            status=status.HTTP_201_CREATED,
        )


class MyInvitesView(APIView):
    """GET /api/teams/invites/ -> live invites addressed to me."""
    permission_classes = [IsAuthenticated]

    def get(self, request):
        invites = services.pending_invites_for(request.user)
        return Response(TeamInviteSerializer(invites, many=True).data)


class RespondInviteView(APIView):
    """
    POST /api/teams/invites/<invite_id>/respond/
    Body: {"action": "accept" | "decline"}
    """
    permission_classes = [IsAuthenticated]

    def post(self, request, invite_id):
        invite = get_object_or_404(TeamInvite.objects.select_related("team"), pk=invite_id)
        serializer = RespondInviteSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        accept = serializer.validated_data["action"] == RespondInviteSerializer.ACTION_ACCEPT
        invite = services.respond_to_invite(invite, request.user, accept)
        invite.refresh_from_db()
        return Response(TeamInviteSerializer(invite).data)
