# notifications/models.py
import uuid

from django.db import models
from django.conf import settings
from django.db.models import Q


class Notification(models.Model):
    """
    One entity for both kinds of notification:

    - global: a single row every checked-in participant sees while active
    - user: one row per recipient, written by a team fan-out that shares
      a `batch` id
    """
    SCOPE_GLOBAL = "global"
    SCOPE_USER = "user"

    SCOPE_CHOICES = [
        (SCOPE_GLOBAL, "Global"),
        (SCOPE_USER, "User"),
    ]

    scope = models.CharField(max_length=16, choices=SCOPE_CHOICES, default=SCOPE_GLOBAL)
    title = models.CharField(max_length=200)
    message = models.TextField()
    is_active = models.BooleanField(default=True)
    created_at = models.DateTimeField(auto_now_add=True)

    created_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="sent_notifications",
    )
    # user scope only
    recipient = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        null=True,
        blank=True,
        related_name="notifications",
    )
    team = models.ForeignKey(
        "teams.Team",
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="notifications",
    )
    batch = models.UUIDField(default=uuid.uuid4, db_index=True)

    class Meta:
        ordering = ["-created_at", "-id"]
        constraints = [
            models.CheckConstraint(
                condition=(
                    Q(scope="global", recipient__isnull=True)
                    | Q(scope="user", recipient__isnull=False)
                ),
                name="notification_scope_recipient",
            ),
        ]
        indexes = [
            models.Index(fields=["scope", "is_active"], name="notif_scope_active_idx"),
            models.Index(fields=["recipient", "is_active"], name="notif_recipient_idx"),
        ]

    def __str__(self):
        target = self.recipient if self.scope == self.SCOPE_USER else "everyone"
        return f"{self.title} -> {target}"

    @property
    def is_global(self) -> bool:
        return self.scope == self.SCOPE_GLOBAL


class NotificationReceipt(models.Model):
    """Server-side read state: a row means the user has read the notification."""
    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="notification_receipts",
    )
    notification = models.ForeignKey(
        Notification,
        on_delete=models.CASCADE,
        related_name="receipts",
    )
    read_at = models.DateTimeField()

    class Meta:
        constraints = [
            models.UniqueConstraint(fields=["user", "notification"], name="notif_receipt_unique"),
        ]

    def __str__(self):
        return f"{self.user} read {self.notification_id} at {self.read_at}"
