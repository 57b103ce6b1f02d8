from django.db import models
from django.conf import settings


class Registration(models.Model):
    """
    One hackathon sign-up per user. `checked_in` gates every team and
    notification action; only organisers flip it.
    """
    user = models.OneToOneField(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="registration",
    )
    email = models.EmailField()
    full_name = models.CharField(max_length=255)
    checked_in = models.BooleanField(default=False, db_index=True)
    registered_at = models.DateTimeField(auto_now_add=True)

    phone = models.CharField(max_length=32, blank=True, null=True)
    school_name = models.CharField(max_length=255, blank=True, null=True)
    school_name_other = models.CharField(max_length=255, blank=True, null=True)
    grade = models.CharField(max_length=32, blank=True, null=True)
    year_of_study = models.CharField(max_length=32, blank=True, null=True)
    university = models.CharField(max_length=255, blank=True, null=True)
    github_username = models.CharField(max_length=100, blank=True, null=True)
    hackathons_attended = models.PositiveIntegerField(blank=True, null=True)
    dietary_restrictions = models.CharField(max_length=64, blank=True, null=True)
    dietary_restrictions_other = models.CharField(max_length=255, blank=True, null=True)
    t_shirt_size = models.CharField(max_length=8, blank=True, null=True)
    emergency_contact_name = models.CharField(max_length=255, blank=True, null=True)
    emergency_contact_phone = models.CharField(max_length=32, blank=True, null=True)
    team_name = models.CharField(max_length=100, blank=True, null=True)

    class Meta:
        ordering = ["-registered_at"]
        indexes = [
            models.Index(fields=["email"], name="registration_email_idx"),
        ]

    def __str__(self):
        return f"{self.full_name} <{self.email}>"


class ScheduleItem(models.Model):
    TYPE_EVENT = "event"
    TYPE_WORKSHOP = "workshop"
    TYPE_MEAL = "meal"
    TYPE_PRESENTATION = "presentation"
    TYPE_SOCIAL = "social"

    TYPE_CHOICES = [
        (TYPE_EVENT, "General Event"),
        (TYPE_WORKSHOP, "Workshop"),
        (TYPE_MEAL, "Meal"),
        (TYPE_PRESENTATION, "Presentation"),
        (TYPE_SOCIAL, "Social"),
    ]

    title = models.CharField(max_length=255)
    description = models.TextField(blank=True, null=True)
    start_time = models.DateTimeField()
    end_time = models.DateTimeField()
    location = models.CharField(max_length=255, blank=True, null=True)
    type = models.CharField(max_length=32, choices=TYPE_CHOICES, default=TYPE_EVENT)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["start_time"]
        indexes = [
            models.Index(fields=["start_time"], name="schedule_start_idx"),
        ]

    def __str__(self):
        return f"{self.title} @ {self.start_time:%Y-%m-%d %H:%M}"
