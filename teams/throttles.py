# teams/throttles.py

from rest_framework.throttling import ScopedRateThrottle


class TeamInviteThrottle(ScopedRateThrottle):
    """
    Throttle invite batches per leader per team.

    Scope key: 'team-invite' (the view sets throttle_scope)
    Cache key shape:
      throttle_team-invite_u<user_id>_t<team_id>
    """
    scope = "team-invite"

    def get_cache_key(self, request, view):
        if request.method != "POST":
            return None

        user = getattr(request, "user", None)
        if not user or not user.is_authenticated:
            return None

        team_id = getattr(view, "kwargs", {}).get("team_id", "none")
        return f"throttle_{self.scope}_u{user.id}_t{team_id}"
