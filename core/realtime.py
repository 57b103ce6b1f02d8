"""
Realtime publishing over the Channels layer.

Two kinds of traffic:

- change feeds: every write to a watched table is published to the group
  ``changes.<table>`` once the surrounding transaction commits, as
  ``{table, eventType, new, old}``. Clients re-query on each event.
- broadcast channels: ephemeral signals (notification replays) pushed to
  ``broadcast.<channel>`` right away. Nothing is persisted.

Delivery is at-most-once. Publishing never fails the caller; errors are
logged and dropped.
"""

import json
import logging

from asgiref.sync import async_to_sync
from channels.layers import get_channel_layer
from django.core.serializers.json import DjangoJSONEncoder
from django.db import transaction

logger = logging.getLogger("hackathon.realtime")


def change_group(table: str) -> str:
    return f"changes.{table}"


def broadcast_group(channel: str) -> str:
    return f"broadcast.{channel}"


def serialize_row(instance) -> dict:
    """
    Flatten a model instance into a JSON-safe dict of its concrete columns.
    Foreign keys are emitted by column name (``team_id``).
    """
    data = {}
    for field in instance._meta.concrete_fields:
        data[field.attname] = getattr(instance, field.attname)
    return json.loads(json.dumps(data, cls=DjangoJSONEncoder))


def _group_send(group: str, message: dict) -> None:
    try:
        channel_layer = get_channel_layer()
        if channel_layer is None:
            return
        async_to_sync(channel_layer.group_send)(group, message)
    except Exception as e:
        logger.warning(f"Realtime publish to {group} failed: {e}")


def publish_change(table: str, event_type: str, new: dict | None = None, old: dict | None = None) -> None:
    """
    Queue a change-feed event for ``table``; it is sent after commit
    (immediately when no transaction is open).
    """
    payload = {
        "table": table,
        "eventType": event_type,
        "new": new or {},
        "old": old or {},
    }

    def _send():
        _group_send(change_group(table), {"type": "change.event", "payload": payload})

    transaction.on_commit(_send)


def broadcast(channel: str, event: str, payload: dict) -> None:
    """Send an ephemeral event to every subscriber of a broadcast channel."""
    message = {
        "type": "broadcast.event",
        "event": event,
        "payload": json.loads(json.dumps(payload, cls=DjangoJSONEncoder)),
    }
    _group_send(broadcast_group(channel), message)
    logger.debug(f"Broadcast {event} on {channel}")
