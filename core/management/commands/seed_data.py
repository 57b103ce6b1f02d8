from datetime import timedelta

from django.contrib.auth import get_user_model
from django.core.management.base import BaseCommand
from django.utils import timezone

from core.services import set_registration_open
from events.models import Registration, ScheduleItem
from notifications.models import Notification

User = get_user_model()

PARTICIPANTS = [
    ("alice@example.com", "Alice Chen", True),
    ("bob@example.com", "Bob Singh", True),
    ("carol@example.com", "Carol Diaz", True),
    ("dave@example.com", "Dave Okafor", False),
]


class Command(BaseCommand):
    help = "Seeds the database with an admin, sample participants, a schedule and a welcome notification"

    def handle(self, *args, **options):
        self.stdout.write("Seeding data...")

        admin, _ = User.objects.get_or_create(
            email="admin@example.com",
            defaults={"username": "admin", "full_name": "Organiser", "is_admin": True},
        )
        if not admin.check_password("admin"):
            admin.set_password("admin")
            admin.save()

        for email, name, checked_in in PARTICIPANTS:
            user, _ = User.objects.get_or_create(
                email=email,
                defaults={"username": email.split("@")[0], "full_name": name},
            )
            Registration.objects.update_or_create(
                user=user,
                defaults={
                    "email": email,
                    "full_name": name,
                    "checked_in": checked_in,
                    "grade": "11",
                    "school_name": "other",
                    "school_name_other": "Sample High School",
                    "t_shirt_size": "M",
                },
            )
        self.stdout.write(f"Participants: {len(PARTICIPANTS)} ({sum(p[2] for p in PARTICIPANTS)} checked in)")

        start = timezone.now().replace(minute=0, second=0, microsecond=0) + timedelta(days=1)
        schedule = [
            ("Opening Ceremony", ScheduleItem.TYPE_PRESENTATION, 0, 1, "Gym"),
            ("Team Formation", ScheduleItem.TYPE_EVENT, 1, 2, "Cafeteria"),
            ("Intro to APIs", ScheduleItem.TYPE_WORKSHOP, 2, 3, "Room 124"),
            ("Lunch", ScheduleItem.TYPE_MEAL, 4, 5, "Cafeteria"),
            ("Judging", ScheduleItem.TYPE_PRESENTATION, 10, 12, "Library"),
        ]
        for title, kind, begin, end, location in schedule:
            ScheduleItem.objects.get_or_create(
                title=title,
                defaults={
                    "type": kind,
                    "start_time": start + timedelta(hours=begin),
                    "end_time": start + timedelta(hours=end),
                    "location": location,
                },
            )

        Notification.objects.get_or_create(
            scope=Notification.SCOPE_GLOBAL,
            title="Welcome!",
            defaults={
                "message": "Check in at the front desk, then form your team.",
                "created_by": admin,
            },
        )

        set_registration_open(True, user=admin)
        self.stdout.write(self.style.SUCCESS("Done."))
