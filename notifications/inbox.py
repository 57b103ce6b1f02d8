# notifications/inbox.py
"""
Client-side delivery bookkeeping for a single signed-in user.

Nothing on the server imports this module. It is a helper for Python
dashboard clients and bots: each holds one NotificationInbox fed by the
`notifications` change feed, the replay broadcast channels and periodic
refetches of /api/notifications/.

Persisted rows move  unseen → visible → read → dismissed.
Replays move         received → visible → dismissed | expired,
expiring `display_seconds` after they arrive.

Sound is best-effort: SoundPlayer walks an ordered chain of backends
(audio, then vibration) and gives up quietly.
"""
import logging
import time

from django.conf import settings

from core.constants import (
    EVENT_INSERT,
    EVENT_REPLAY_NOTIFICATION,
    EVENT_REPLAY_TEAM_NOTIFICATION,
    TABLE_NOTIFICATIONS,
)

logger = logging.getLogger("hackathon.notifications")

STATE_UNSEEN = "unseen"
STATE_VISIBLE = "visible"
STATE_READ = "read"
STATE_DISMISSED = "dismissed"
STATE_EXPIRED = "expired"


class SoundPlayer:
    """
    Try each backend in order until one reports success.

    A backend is any callable returning truthy when it played something.
    Exceptions from a backend count as failure; play() itself never raises.
    """

    def __init__(self, backends=None):
        self.backends = list(backends or [])

    def play(self) -> bool:
        for backend in self.backends:
            try:
                if backend():
                    return True
            except Exception as e:
                logger.debug(f"Sound backend {getattr(backend, '__name__', backend)!r} failed: {e}")
        return False


class ReplayPopup:
    def __init__(self, original_id, notification, received_at, display_seconds):
        self.original_id = original_id
        self.notification = notification
        self.received_at = received_at
        self.expires_at = received_at + display_seconds
        self.state = STATE_VISIBLE

    def __repr__(self):
        return f"<ReplayPopup {self.original_id} {self.state}>"


class NotificationInbox:
    def __init__(self, user_id, sound=None, clock=None, display_seconds=None):
        self.user_id = user_id
        self.sound = sound or SoundPlayer()
        self.clock = clock or time.monotonic
        if display_seconds is None:
            display_seconds = getattr(settings, "HACKATHON_REPLAY_DISPLAY_SECONDS", 10)
        self.display_seconds = display_seconds

        self._rows = {}
        self._states = {}
        self._dismissed = set()
        self._replays = {}
        self.needs_refresh = False

    # -------------------------------------------------------------
    # Persisted rows
    # -------------------------------------------------------------
    def sync(self, rows):
        """Replace local rows with a fresh fetch (dicts as served by the API)."""
        self._rows = {row["id"]: row for row in rows}
        states = {}
        for pk, row in self._rows.items():
            if pk in self._dismissed:
                states[pk] = STATE_DISMISSED
            elif row.get("read_at"):
                states[pk] = STATE_READ
            else:
                states[pk] = self._states.get(pk, STATE_UNSEEN)
                if states[pk] not in (STATE_UNSEEN, STATE_VISIBLE):
                    states[pk] = STATE_UNSEEN
        self._states = states
        self.needs_refresh = False

    def _addressed_to_me(self, row) -> bool:
        if row.get("scope") == "user":
            return row.get("recipient_id") == self.user_id
        return True

    def handle_change(self, payload) -> bool:
        """
        Feed one change-feed event. A newly inserted, active row meant for
        this user pops up and plays a sound. Any event asks for a refetch.
        Returns True when a popup was shown.
        """
        if payload.get("table") != TABLE_NOTIFICATIONS:
            return False
        self.needs_refresh = True

        row = payload.get("new") or {}
        if payload.get("eventType") != EVENT_INSERT:
            return False
        if not row.get("is_active", True) or not self._addressed_to_me(row):
            return False

        pk = row.get("id")
        self._rows[pk] = row
        self._states[pk] = STATE_VISIBLE
        self.sound.play()
        return True

    def show(self, notification_id):
        if self._states.get(notification_id) == STATE_UNSEEN:
            self._states[notification_id] = STATE_VISIBLE

    def mark_read(self, notification_id):
        if notification_id in self._states and self._states[notification_id] != STATE_DISMISSED:
            self._states[notification_id] = STATE_READ

    def dismiss(self, notification_id):
        self._dismissed.add(notification_id)
        if notification_id in self._states:
            self._states[notification_id] = STATE_DISMISSED
        replay = self._replays.get(notification_id)
        if replay and replay.state == STATE_VISIBLE:
            replay.state = STATE_DISMISSED

    def state_of(self, notification_id):
        return self._states.get(notification_id)

    def is_dismissed(self, notification_id) -> bool:
        return notification_id in self._dismissed

    def popups(self):
        """Persisted rows currently on screen."""
        return [self._rows[pk] for pk, state in self._states.items() if state == STATE_VISIBLE]

    def unread_count(self) -> int:
        return sum(1 for state in self._states.values() if state in (STATE_UNSEEN, STATE_VISIBLE))

    # -------------------------------------------------------------
    # Replays
    # -------------------------------------------------------------
    def handle_replay(self, message):
        """
        Feed one broadcast message `{"event", "payload"}`.
        Team replays for other users are ignored. Returns the popup or None.
        """
        event = message.get("event")
        payload = message.get("payload") or {}

        if event not in (EVENT_REPLAY_NOTIFICATION, EVENT_REPLAY_TEAM_NOTIFICATION):
            return None

        target = payload.get("user_id")
        if event == EVENT_REPLAY_TEAM_NOTIFICATION and target != self.user_id:
            return None
        if target is not None and target != self.user_id:
            return None

        original_id = payload.get("original_id")
        self._dismissed.discard(original_id)
        if self._states.get(original_id) == STATE_DISMISSED:
            self._states[original_id] = STATE_VISIBLE

        popup = ReplayPopup(
            original_id,
            payload.get("notification") or {},
            self.clock(),
            payload.get("display_seconds") or self.display_seconds,
        )
        self._replays[original_id] = popup
        self.sound.play()
        return popup

    def dismiss_replay(self, original_id):
        popup = self._replays.get(original_id)
        if popup and popup.state == STATE_VISIBLE:
            popup.state = STATE_DISMISSED

    def active_replays(self):
        """
        Visible replay popups. Anything past its display window expires, and
        expired or dismissed popups are forgotten.
        """
        now = self.clock()
        active = {}
        for original_id, popup in self._replays.items():
            if popup.state == STATE_VISIBLE and now >= popup.expires_at:
                popup.state = STATE_EXPIRED
            if popup.state == STATE_VISIBLE:
                active[original_id] = popup
        self._replays = active
        return list(active.values())
