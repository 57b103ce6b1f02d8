from django.urls import path

from .views import (
    MyTeamView,
    RoomListView,
    TeamInviteCreateView,
    FinalizeTeamView,
    TeamNotifyView,
    MyInvitesView,
    RespondInviteView,
    AdminTeamListView,
    AdminBoardView,
    AdminTeamDetailView,
    AdminMoveTeamView,
    AdminConfirmTeamView,
)

urlpatterns = [
    path("", MyTeamView.as_view(), name="my-team"),
    path("rooms/", RoomListView.as_view(), name="team-rooms"),
    path("invites/", MyInvitesView.as_view(), name="my-invites"),
    path("invites/<int:invite_id>/respond/", RespondInviteView.as_view(), name="invite-respond"),
    path("<int:team_id>/invites/", TeamInviteCreateView.as_view(), name="team-invites"),
    path("<int:team_id>/finalize/", FinalizeTeamView.as_view(), name="team-finalize"),
    path("<int:team_id>/notify/", TeamNotifyView.as_view(), name="team-notify"),

    # Organiser console
    path("admin/", AdminTeamListView.as_view(), name="admin-teams"),
    path("admin/board/", AdminBoardView.as_view(), name="admin-team-board"),
    path("admin/<int:team_id>/", AdminTeamDetailView.as_view(), name="admin-team-detail"),
    path("admin/<int:team_id>/move/", AdminMoveTeamView.as_view(), name="admin-team-move"),
    path("admin/<int:team_id>/confirm/", AdminConfirmTeamView.as_view(), name="admin-team-confirm"),
]
