"""
WebSocket consumers for the realtime change feeds and broadcast channels.

Clients connect to:
- ws://host/ws/realtime/changes/{table}/
- ws://host/ws/realtime/broadcast/{channel}/

Both are receive-only from the client's point of view.
"""

import json
import logging
from channels.db import database_sync_to_async
from channels.generic.websocket import AsyncWebsocketConsumer

from events.services import is_checked_in

from .constants import (
    BROADCAST_CHANNELS,
    CHANGE_FEED_TABLES,
    TABLE_NOTIFICATIONS,
    TABLE_REGISTRATIONS,
)
from .permissions import is_hackathon_admin
from .realtime import broadcast_group, change_group

logger = logging.getLogger("hackathon.realtime")


def _row_of(payload):
    return payload.get("new") or payload.get("old") or {}


def notification_visible_to(row, user) -> bool:
    """Global rows go to everyone; user rows only to their recipient."""
    if row.get("scope") == "user":
        return row.get("recipient_id") == user.id
    return True


def registration_visible_to(row, user) -> bool:
    return is_hackathon_admin(user) or row.get("user_id") == user.id


@database_sync_to_async
def may_see_notifications(user) -> bool:
    return is_hackathon_admin(user) or is_checked_in(user)


ROW_FILTERS = {
    TABLE_NOTIFICATIONS: notification_visible_to,
    TABLE_REGISTRATIONS: registration_visible_to,
}


class ChangeFeedConsumer(AsyncWebsocketConsumer):
    """
    Forwards `{table, eventType, new, old}` events for one table.
    """

    async def connect(self):
        self.table = self.scope["url_route"]["kwargs"]["table"]
        self.user = self.scope.get("user")

        if not self.user or not self.user.is_authenticated:
            logger.warning(f"Unauthorized change-feed connection attempt to {self.table}")
            await self.close(code=4001)
            return

        if self.table not in CHANGE_FEED_TABLES:
            await self.close(code=4004)
            return

        self.group_name = change_group(self.table)
        await self.channel_layer.group_add(self.group_name, self.channel_name)
        await self.accept()

    async def disconnect(self, close_code):
        if hasattr(self, "group_name"):
            await self.channel_layer.group_discard(self.group_name, self.channel_name)

    async def receive(self, text_data=None, bytes_data=None):
        # Clients only listen
        pass

    async def notifications_open(self) -> bool:
        # Participants see nothing until checked in; once open it stays open
        if not getattr(self, "_notifications_open", False):
            self._notifications_open = await may_see_notifications(self.user)
        return self._notifications_open

    async def change_event(self, event):
        payload = event["payload"]
        if self.table == TABLE_NOTIFICATIONS and not await self.notifications_open():
            return
        row_filter = ROW_FILTERS.get(self.table)
        if row_filter and not row_filter(_row_of(payload), self.user):
            return
        await self.send(text_data=json.dumps(payload))


class BroadcastConsumer(AsyncWebsocketConsumer):
    """
    Relays ephemeral broadcast events (notification replays).

    Events carrying a `user_id` are only delivered to that user.
    """

    async def connect(self):
        self.channel = self.scope["url_route"]["kwargs"]["channel"]
        self.user = self.scope.get("user")

        if not self.user or not self.user.is_authenticated:
            logger.warning(f"Unauthorized broadcast connection attempt to {self.channel}")
            await self.close(code=4001)
            return

        if self.channel not in BROADCAST_CHANNELS:
            await self.close(code=4004)
            return

        self.group_name = broadcast_group(self.channel)
        await self.channel_layer.group_add(self.group_name, self.channel_name)
        await self.accept()

    async def disconnect(self, close_code):
        if hasattr(self, "group_name"):
            await self.channel_layer.group_discard(self.group_name, self.channel_name)

    async def receive(self, text_data=None, bytes_data=None):
        pass

    async def broadcast_event(self, event):
        payload = event["payload"]
        target = payload.get("user_id")
        if target is not None and target != self.user.id:
            return
        await self.send(
            text_data=json.dumps({"event": event["event"], "payload": payload})
        )
