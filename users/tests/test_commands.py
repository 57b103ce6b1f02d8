from io import StringIO

from django.contrib.auth import get_user_model
from django.core.management import call_command
from django.core.management.base import CommandError
from django.test import TestCase

from core.services import is_registration_open
from events.models import Registration, ScheduleItem
from notifications.models import Notification


User = get_user_model()


class PromoteAdminCommandTests(TestCase):
    def setUp(self):
        self.user = User.objects.create_user(username="alice", email="alice@example.com", password="x")

    def test_promote_and_revoke(self):
        call_command("promote_admin", "ALICE@example.com", stdout=StringIO())
        self.user.refresh_from_db()
        self.assertTrue(self.user.is_hackathon_admin)

        call_command("promote_admin", "alice@example.com", "--revoke", stdout=StringIO())
        self.user.refresh_from_db()
        self.assertFalse(self.user.is_hackathon_admin)

    def test_unknown_email(self):
        with self.assertRaises(CommandError):
            call_command("promote_admin", "nobody@example.com", stdout=StringIO())


class SeedDataCommandTests(TestCase):
    def test_seed_is_repeatable(self):
        call_command("seed_data", stdout=StringIO())
        call_command("seed_data", stdout=StringIO())

        self.assertTrue(User.objects.get(email="admin@example.com").is_hackathon_admin)
        self.assertEqual(Registration.objects.count(), 4)
        self.assertEqual(Registration.objects.filter(checked_in=True).count(), 3)
        self.assertEqual(ScheduleItem.objects.count(), 5)
        self.assertEqual(Notification.objects.filter(scope=Notification.SCOPE_GLOBAL).count(), 1)
        self.assertTrue(is_registration_open())
