from django.contrib import admin
from .models import Team, TeamMember, TeamInvite


class TeamMemberInline(admin.TabularInline):
    model = TeamMember
    extra = 0
    raw_id_fields = ('user',)


@admin.register(Team)
class TeamAdmin(admin.ModelAdmin):
    list_display = ('name', 'leader', 'room', 'room_slot', 'is_finalized', 'confirmed', 'created_at')
    list_filter = ('is_finalized', 'confirmed', 'room')
    search_fields = ('name', 'leader__email')
    raw_id_fields = ('leader',)
    inlines = [TeamMemberInline]


@admin.register(TeamInvite)
class TeamInviteAdmin(admin.ModelAdmin):
    list_display = ('invitee_email', 'team', 'inviter', 'status', 'created_at', 'expires_at')
    list_filter = ('status',)
    search_fields = ('invitee_email', 'team__name')
    raw_id_fields = ('team', 'inviter')
