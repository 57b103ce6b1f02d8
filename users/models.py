# users/models.py
from django.contrib.auth.models import AbstractUser
from django.db import models


class User(AbstractUser):
    """
    Participant / admin account.

    The Supabase auth user owns the identity (OTP login); this row is the
    profile the rest of the app joins against.
    """
    email = models.EmailField(unique=True)
    full_name = models.CharField(max_length=255, blank=True, null=True)

    is_admin = models.BooleanField(
        default=False,
        help_text="Grants access to the admin console endpoints",
    )

    supabase_id = models.UUIDField(
        unique=True,
        null=True,
        blank=True,
        help_text="Supabase auth user id (JWT 'sub' claim)",
    )

    class Meta:
        indexes = [
            models.Index(fields=["email"], name="user_email_idx"),
        ]

    def __str__(self):
        return self.email or self.username

    @property
    def is_hackathon_admin(self) -> bool:
        return bool(self.is_admin or self.is_superuser)

    @property
    def display_name(self) -> str:
        return self.full_name or self.email.split("@")[0]
