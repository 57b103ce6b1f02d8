from django.db.models import Q
from django.shortcuts import get_object_or_404
from rest_framework import status
from rest_framework.response import Response
from rest_framework.views import APIView

from core.permissions import IsHackathonAdmin
from teams import services
from teams.models import Team
from teams.serializers import (
    ConfirmTeamSerializer,
    MoveTeamSerializer,
    TeamSerializer,
    serialize_board,
)


def _team_queryset():
    return Team.objects.select_related("leader").prefetch_related("members__user")


class AdminTeamListView(APIView):
    """
    GET /api/teams/admin/?q=foo&finalized=true
    """
    permission_classes = [IsHackathonAdmin]

    def get(self, request):
        qs = _team_queryset().order_by("created_at")

        q = (request.query_params.get("q") or "").strip()
        if q:
            qs = qs.filter(
                Q(name__icontains=q)
                | Q(leader__email__icontains=q)
                | Q(members__user__email__icontains=q)
            ).distinct()

        finalized = request.query_params.get("finalized")
        if finalized is not None:
            qs = qs.filter(is_finalized=finalized.lower() in ("1", "true", "yes"))

        return Response(TeamSerializer(qs, many=True).data)


class AdminBoardView(APIView):
    """GET /api/teams/admin/board/ -> every room with its teams."""
    permission_classes = [IsHackathonAdmin]

    def get(self, request):
        return Response({"rooms": serialize_board(services.build_board())})


class AdminTeamDetailView(APIView):
    """
    GET    /api/teams/admin/<team_id>/
    DELETE /api/teams/admin/<team_id>/
    """
    permission_classes = [IsHackathonAdmin]

    def get(self, request, team_id):
        team = get_object_or_404(_team_queryset(), pk=team_id)
        return Response(TeamSerializer(team).data)

    def delete(self, request, team_id):
        team = get_object_or_404(Team, pk=team_id)
        services.delete_team(team)
        return Response(status=status.HTTP_204_NO_CONTENT)


class AdminMoveTeamView(APIView):
    """
    POST /api/teams/admin/<team_id>/move/
    Body: {"room": "124" | "Library" | "unassigned" | ...}
    """
    permission_classes = [IsHackathonAdmin]

    def post(self, request, team_id):
        team = get_object_or_404(Team, pk=team_id)
        serializer = MoveTeamSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        team = services.move_team(team, request.user, serializer.validated_data["room"])
        team = _team_queryset().get(pk=team.pk)
        return Response(TeamSerializer(team).data)


class AdminConfirmTeamView(APIView):
    """
    POST /api/teams/admin/<team_id>/confirm/
    Body: {"confirmed": true|false}, or empty to toggle.
    """
    permission_classes = [IsHackathonAdmin]

    def post(self, request, team_id):
        team = get_object_or_404(Team, pk=team_id)
        serializer = ConfirmTeamSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        team = services.set_confirmed(team, serializer.validated_data.get("confirmed"))
        team = _team_queryset().get(pk=team.pk)
        return Response(TeamSerializer(team).data)
