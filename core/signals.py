from django.apps import apps
from django.db.models.signals import post_save, post_delete, pre_save
import logging

from .constants import (
    EVENT_DELETE,
    EVENT_INSERT,
    EVENT_UPDATE,
    TABLE_NOTIFICATIONS,
    TABLE_REGISTRATIONS,
    TABLE_SCHEDULE,
    TABLE_SYSTEM_CONFIG,
    TABLE_TEAM_INVITES,
    TABLE_TEAM_MEMBERS,
    TABLE_TEAMS,
)
from .realtime import publish_change, serialize_row

logger = logging.getLogger("hackathon.realtime")

# model label -> change-feed table
WATCHED_MODELS = {
    "events.Registration": TABLE_REGISTRATIONS,
    "events.ScheduleItem": TABLE_SCHEDULE,
    "teams.Team": TABLE_TEAMS,
    "teams.TeamMember": TABLE_TEAM_MEMBERS,
    "teams.TeamInvite": TABLE_TEAM_INVITES,
    "notifications.Notification": TABLE_NOTIFICATIONS,
    "core.SystemConfig": TABLE_SYSTEM_CONFIG,
}


def table_for(sender):
    return WATCHED_MODELS.get(sender._meta.label)


def cache_old_row(sender, instance, raw=False, **kwargs):
    """Remember the row as stored before an update so UPDATE events carry `old`."""
    if raw or not instance.pk or table_for(sender) is None:
        return
    try:
        old_instance = sender.objects.filter(pk=instance.pk).first()
        instance._realtime_old = serialize_row(old_instance) if old_instance else None
    except Exception as e:
        logger.warning(f"Failed to cache old {sender._meta.label} row: {e}")


def publish_saved_row(sender, instance, created, raw=False, **kwargs):
    if raw:
        return
    table = table_for(sender)
    if table is None:
        return
    try:
        old = None if created else getattr(instance, "_realtime_old", None)
        publish_change(
            table,
            EVENT_INSERT if created else EVENT_UPDATE,
            new=serialize_row(instance),
            old=old,
        )
    except Exception as e:
        logger.warning(f"Failed to publish {table} change: {e}")


def publish_deleted_row(sender, instance, **kwargs):
    table = table_for(sender)
    if table is None:
        return
    try:
        publish_change(table, EVENT_DELETE, old=serialize_row(instance))
    except Exception as e:
        logger.warning(f"Failed to publish {table} delete: {e}")


def connect_watched_models():
    for label in WATCHED_MODELS:
        model = apps.get_model(label)
        uid = f"realtime:{label}"
        pre_save.connect(cache_old_row, sender=model, dispatch_uid=f"{uid}:pre")
        post_save.connect(publish_saved_row, sender=model, dispatch_uid=f"{uid}:save")
        post_delete.connect(publish_deleted_row, sender=model, dispatch_uid=f"{uid}:delete")


connect_watched_models()
