import logging

from core.exceptions import NotCheckedIn, NotRegistered
from .models import Registration

logger = logging.getLogger("hackathon")


def get_registration(user):
    if not user or not user.is_authenticated:
        return None
    return Registration.objects.filter(user=user).first()


def is_checked_in(user) -> bool:
    registration = get_registration(user)
    return bool(registration and registration.checked_in)


def require_checked_in(user) -> Registration:
    """
    Return the caller's registration, raising NotRegistered / NotCheckedIn
    when they cannot take part yet.
    """
    registration = get_registration(user)
    if registration is None:
        raise NotRegistered()
    if not registration.checked_in:
        raise NotCheckedIn()
    return registration


def set_checked_in(registration: Registration, checked_in=None) -> Registration:
    """Set the flag, or toggle it when `checked_in` is None."""
    if checked_in is None:
        checked_in = not registration.checked_in
    registration.checked_in = checked_in
    registration.save(update_fields=["checked_in"])
    logger.info(
        f"Registration {registration.id} ({registration.email}) checked_in={checked_in}"
    )
    return registration
