# notifications/services.py
"""
Notification fan-out, read state and replay.

Global notifications are single rows; team notifications are fanned out
as one user-scoped row per recipient, inserted in bulk under a shared
batch id. Read state lives in NotificationReceipt for both scopes.

Replays never write: they push an ephemeral event on a broadcast channel
and clients show it for a few seconds.
"""
import logging
import uuid

from django.conf import settings
from django.db import transaction
from django.db.models import OuterRef, Q, Subquery
from django.utils import timezone

from core.constants import (
    CHANNEL_NOTIFICATION_REPLAY,
    CHANNEL_TEAM_NOTIFICATION_REPLAY,
    EVENT_INSERT,
    EVENT_REPLAY_NOTIFICATION,
    EVENT_REPLAY_TEAM_NOTIFICATION,
    TABLE_NOTIFICATIONS,
)
from core.permissions import is_hackathon_admin
from core.realtime import broadcast, publish_change, serialize_row
from core.sanitizers import sanitize_text
from events.services import is_checked_in
from .models import Notification, NotificationReceipt

logger = logging.getLogger("hackathon.notifications")


# -------------------------------------------------------------------
# Visibility + read state
# -------------------------------------------------------------------
def visible_notifications(user):
    """
    Active global rows plus active rows addressed to the user, newest
    first, each annotated with the user's `read_at` (or None).
    Participants see nothing until they are checked in; admins always do.
    """
    if not user or not user.is_authenticated:
        return Notification.objects.none()
    if not is_hackathon_admin(user) and not is_checked_in(user):
        return Notification.objects.none()

    read_at = NotificationReceipt.objects.filter(
        user=user, notification=OuterRef("pk")
    ).values("read_at")[:1]

    return (
        Notification.objects.filter(is_active=True)
        .filter(
            Q(scope=Notification.SCOPE_GLOBAL)
            | Q(scope=Notification.SCOPE_USER, recipient=user)
        )
        .select_related("team")
        .annotate(read_at=Subquery(read_at))
        .order_by("-created_at", "-id")
    )


def mark_read(user, notification) -> NotificationReceipt:
    """Idempotent: the first read_at is kept."""
    receipt, created = NotificationReceipt.objects.get_or_create(
        user=user,
        notification=notification,
        defaults={"read_at": timezone.now()},
    )
    if created:
        logger.debug(f"User {user.id} read notification {notification.id}")
    return receipt


def mark_unread(user, notification) -> None:
    NotificationReceipt.objects.filter(user=user, notification=notification).delete()


def mark_many_read(user, ids=None) -> int:
    """
    Mark the given visible notifications (or every visible unread one when
    `ids` is empty) as read. Returns how many receipts this call added;
    rows a concurrent call already marked are not counted.
    """
    qs = visible_notifications(user).filter(read_at__isnull=True)
    if ids:
        qs = qs.filter(id__in=ids)

    now = timezone.now()
    pks = list(qs.values_list("id", flat=True))
    existing = NotificationReceipt.objects.filter(user=user, notification_id__in=pks)

    with transaction.atomic():
        before = existing.count()
        NotificationReceipt.objects.bulk_create(
            [NotificationReceipt(user=user, notification_id=pk, read_at=now) for pk in pks],
            ignore_conflicts=True,
        )
        return existing.count() - before


# -------------------------------------------------------------------
# Global notifications
# -------------------------------------------------------------------
def create_global_notification(sender, title, message, is_active=True) -> Notification:
    notification = Notification.objects.create(
        scope=Notification.SCOPE_GLOBAL,
        title=sanitize_text(title, max_length=200),
        message=sanitize_text(message),
        is_active=is_active,
        created_by=sender,
    )
    logger.info(f"Global notification {notification.id} created by {sender.id}")
    return notification


def toggle_active(notification) -> Notification:
    notification.is_active = not notification.is_active
    notification.save(update_fields=["is_active"])
    return notification


# -------------------------------------------------------------------
# Team fan-out
# -------------------------------------------------------------------
def team_recipients(team):
    """Leader first, then accepted members; each user once."""
    from teams.models import TeamMember

    recipients = [team.leader]
    members = (
        TeamMember.objects.filter(team=team, status=TeamMember.STATUS_ACCEPTED)
        .select_related("user")
        .order_by("joined_at")
    )
    for member in members:
        if all(member.user_id != r.id for r in recipients):
            recipients.append(member.user)
    return recipients


def send_team_notification(team, sender, title, message):
    """
    One user-scoped row per recipient, inserted in one bulk write under a
    shared batch id. bulk_create fires no signals, so each row is
    published on the change feed here.
    """
    batch = uuid.uuid4()
    title = sanitize_text(title, max_length=200)
    message = sanitize_text(message)

    rows = [
        Notification(
            scope=Notification.SCOPE_USER,
            title=title,
            message=message,
            recipient=user,
            team=team,
            created_by=sender,
            batch=batch,
        )
        for user in team_recipients(team)
    ]

    with transaction.atomic():
        created = Notification.objects.bulk_create(rows)
        if any(row.pk is None for row in created):
            created = list(Notification.objects.filter(batch=batch).order_by("id"))
        for row in created:
            publish_change(TABLE_NOTIFICATIONS, EVENT_INSERT, new=serialize_row(row))

    logger.info(
        f"Team notification batch {batch} sent to team {team.id} "
        f"({len(created)} recipients) by {sender.id}"
    )
    return created


# -------------------------------------------------------------------
# Replay
# -------------------------------------------------------------------
def _replay_notification_body(notification):
    return {
        "id": notification.id,
        "scope": notification.scope,
        "title": notification.title,
        "message": notification.message,
        "created_at": notification.created_at,
        "team_id": notification.team_id,
    }


def replay(notification, actor=None):
    """
    Re-deliver a notification's popup and sound without writing anything.

    Global: one event on `notification-replay`.
    User scope: one event per row of the fan-out batch on
    `team-notification-replay`, each addressed by `user_id`.

    Returns the payloads that were sent.
    """
    replayed_at = timezone.now()
    display_seconds = settings.HACKATHON_REPLAY_DISPLAY_SECONDS
    sent = []

    if notification.is_global:
        payload = {
            "original_id": notification.id,
            "notification": _replay_notification_body(notification),
            "replayed_at": replayed_at,
            "display_seconds": display_seconds,
        }
        broadcast(CHANNEL_NOTIFICATION_REPLAY, EVENT_REPLAY_NOTIFICATION, payload)
        sent.append(payload)
    else:
        rows = Notification.objects.filter(
            batch=notification.batch,
            scope=Notification.SCOPE_USER,
        ).order_by("id")
        for row in rows:
            payload = {
                "original_id": row.id,
                "notification": _replay_notification_body(row),
                "user_id": row.recipient_id,
                "replayed_at": replayed_at,
                "display_seconds": display_seconds,
            }
            broadcast(CHANNEL_TEAM_NOTIFICATION_REPLAY, EVENT_REPLAY_TEAM_NOTIFICATION, payload)
            sent.append(payload)

    logger.info(
        f"Notification {notification.id} replayed ({len(sent)} events) "
        f"by {getattr(actor, 'id', 'unknown')}"
    )
    return sent
