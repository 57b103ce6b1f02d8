#  hackathon-backend/core/models.py
from django.db import models
from django.conf import settings


class SystemConfig(models.Model):
    """
    Key/value switches the organisers flip at runtime
    (e.g. `registration_open`).
    """
    key = models.CharField(max_length=64, unique=True)
    value = models.JSONField(default=dict, blank=True)
    updated_at = models.DateTimeField(auto_now=True)
    updated_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="+",
    )

    class Meta:
        verbose_name = "system config"
        verbose_name_plural = "system config"

    def __str__(self):
        return f"{self.key}={self.value!r}"
