from .participant import (
    MyTeamView,
    RoomListView,
    TeamInviteCreateView,
    FinalizeTeamView,
    TeamNotifyView,
    MyInvitesView,
    RespondInviteView,
)
from .admin import (
    AdminTeamListView,
    AdminBoardView,
    AdminTeamDetailView,
    AdminMoveTeamView,
    AdminConfirmTeamView,
)
