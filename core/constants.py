# core/constants.py

# --- Realtime change-feed tables ---
TABLE_REGISTRATIONS = "registrations"
TABLE_TEAMS = "teams"
TABLE_TEAM_MEMBERS = "team_members"
TABLE_TEAM_INVITES = "team_invites"
TABLE_NOTIFICATIONS = "notifications"
TABLE_SCHEDULE = "schedule"
TABLE_SYSTEM_CONFIG = "system_config"

CHANGE_FEED_TABLES = (
    TABLE_REGISTRATIONS,
    TABLE_TEAMS,
    TABLE_TEAM_MEMBERS,
    TABLE_TEAM_INVITES,
    TABLE_NOTIFICATIONS,
    TABLE_SCHEDULE,
    TABLE_SYSTEM_CONFIG,
)

# Change event types
EVENT_INSERT = "INSERT"
EVENT_UPDATE = "UPDATE"
EVENT_DELETE = "DELETE"

# --- Broadcast channels (ephemeral replay signalling) ---
CHANNEL_NOTIFICATION_REPLAY = "notification-replay"
CHANNEL_TEAM_NOTIFICATION_REPLAY = "team-notification-replay"

EVENT_REPLAY_NOTIFICATION = "replay-notification"
EVENT_REPLAY_TEAM_NOTIFICATION = "replay-team-notification"

BROADCAST_CHANNELS = (
    CHANNEL_NOTIFICATION_REPLAY,
    CHANNEL_TEAM_NOTIFICATION_REPLAY,
)

# --- System config keys ---
CONFIG_REGISTRATION_OPEN = "registration_open"
