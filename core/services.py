# core/services.py
import logging

from django.db import DatabaseError

from .constants import CONFIG_REGISTRATION_OPEN
from .models import SystemConfig

logger = logging.getLogger("hackathon")


def get_config(key, default=None):
    try:
        row = SystemConfig.objects.filter(key=key).first()
    except DatabaseError as e:
        logger.warning(f"Could not read system config {key}: {e}")
        return default
    if row is None:
        return default
    return row.value


def set_config(key, value, user=None):
    row, _ = SystemConfig.objects.update_or_create(
        key=key,
        defaults={"value": value, "updated_by": user},
    )
    logger.info(f"System config {key} set to {value!r}")
    return row


def is_registration_open() -> bool:
    """Missing or unreadable flag means registration is open."""
    value = get_config(CONFIG_REGISTRATION_OPEN, default=True)
    if isinstance(value, dict):
        value = value.get("enabled", True)
    return bool(value)


def set_registration_open(is_open: bool, user=None):
    return set_config(CONFIG_REGISTRATION_OPEN, bool(is_open), user=user)
