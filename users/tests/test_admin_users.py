import uuid
from unittest import mock

from django.contrib.auth import get_user_model
from django.utils import timezone
from rest_framework import status
from rest_framework.test import APITestCase, APIClient

from core.supabase_client import SupabaseError
from events.models import Registration
from notifications.models import Notification, NotificationReceipt
from teams.models import Team, TeamInvite, TeamMember


User = get_user_model()


class AdminUserTests(APITestCase):
    def setUp(self):
        self.client = APIClient()
        self.admin = User.objects.create_user(
            username="admin", email="admin@example.com", password="pass1234", is_admin=True
        )
        self.client.force_authenticate(user=self.admin)

        self.alice = User.objects.create_user(
            username="alice", email="alice@example.com", password="pass1234",
            full_name="Alice", supabase_id=uuid.uuid4(),
        )
        self.bob = User.objects.create_user(
            username="bob", email="bob@example.com", password="pass1234", full_name="Bob"
        )
        Registration.objects.create(user=self.alice, email=self.alice.email, full_name="Alice", checked_in=True)
        Registration.objects.create(user=self.bob, email=self.bob.email, full_name="Bob", checked_in=True)

        # Alice leads a team with Bob on it and has inbox state
        self.team = Team.objects.create(name="Foo", leader=self.alice)
        TeamMember.objects.create(team=self.team, user=self.alice, status=TeamMember.STATUS_ACCEPTED)
        TeamMember.objects.create(team=self.team, user=self.bob, status=TeamMember.STATUS_ACCEPTED)
        TeamInvite.objects.create(team=self.team, inviter=self.alice, invitee_email="carol@example.com")

        self.announcement = Notification.objects.create(title="Hi", message="Welcome")
        NotificationReceipt.objects.create(user=self.alice, notification=self.announcement, read_at=timezone.now())
        Notification.objects.create(
            scope=Notification.SCOPE_USER, title="Team", message="x", recipient=self.alice, team=self.team
        )

    def test_list_and_filters(self):
        resp = self.client.get("/api/users/admin/")
        self.assertEqual(resp.status_code, status.HTTP_200_OK)
        self.assertEqual(len(resp.data), 3)

        resp = self.client.get("/api/users/admin/", {"q": "ali"})
        self.assertEqual([u["email"] for u in resp.data], ["alice@example.com"])
        self.assertTrue(resp.data[0]["registered"])
        self.assertTrue(resp.data[0]["checked_in"])

        resp = self.client.get("/api/users/admin/", {"admin": "true"})
        self.assertEqual([u["email"] for u in resp.data], ["admin@example.com"])

    def assert_alice_is_gone(self):
        self.assertFalse(User.objects.filter(pk=self.alice.pk).exists())
        self.assertFalse(Registration.objects.filter(email="alice@example.com").exists())
        self.assertFalse(Team.objects.filter(pk=self.team.pk).exists())
        self.assertFalse(TeamMember.objects.filter(team_id=self.team.id).exists())
        self.assertFalse(TeamInvite.objects.filter(team_id=self.team.id).exists())
        self.assertFalse(NotificationReceipt.objects.exists())
        self.assertFalse(Notification.objects.filter(scope=Notification.SCOPE_USER).exists())
        # shared rows and other people survive
        self.assertTrue(Notification.objects.filter(pk=self.announcement.pk).exists())
        self.assertTrue(User.objects.filter(pk=self.bob.pk).exists())

    def test_delete_falls_back_to_local_when_rpc_fails(self):
        with mock.patch("users.services.call_rpc", side_effect=SupabaseError("not configured")) as rpc:
            resp = self.client.delete(f"/api/users/admin/{self.alice.id}/")

        self.assertEqual(resp.status_code, status.HTTP_200_OK, resp.content)
        self.assertEqual(resp.data, {"deleted": True, "method": "local"})
        rpc.assert_called_once_with(
            "delete_user_completely", {"user_id_to_delete": str(self.alice.supabase_id)}
        )
        self.assert_alice_is_gone()

    def test_rpc_error_message_counts_as_failure(self):
        with mock.patch("users.services.call_rpc", return_value="Error: permission denied"):
            resp = self.client.delete(f"/api/users/admin/{self.alice.id}/")

        self.assertEqual(resp.data["method"], "local")
        self.assert_alice_is_gone()

    def test_rpc_success_still_cleans_up_leftovers(self):
        # The database function only removed the auth identity here
        with mock.patch("users.services.call_rpc", return_value="User deleted") as rpc:
            resp = self.client.delete(f"/api/users/admin/{self.alice.id}/")

        self.assertEqual(resp.data["method"], "rpc")
        rpc.assert_called_once()
        self.assert_alice_is_gone()

    def test_user_without_supabase_id_skips_rpc(self):
        with mock.patch("users.services.call_rpc") as rpc:
            resp = self.client.delete(f"/api/users/admin/{self.bob.id}/")

        self.assertEqual(resp.data["method"], "local")
        rpc.assert_not_called()
        self.assertFalse(User.objects.filter(pk=self.bob.pk).exists())
        self.assertFalse(TeamMember.objects.filter(user_id=self.bob.id).exists())
        self.assertTrue(Team.objects.filter(pk=self.team.pk).exists())

    def test_admin_cannot_delete_self(self):
        resp = self.client.delete(f"/api/users/admin/{self.admin.id}/")
        self.assertEqual(resp.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertTrue(User.objects.filter(pk=self.admin.pk).exists())

    def test_participant_forbidden(self):
        self.client.force_authenticate(user=self.bob)
        resp = self.client.delete(f"/api/users/admin/{self.alice.id}/")
        self.assertEqual(resp.status_code, status.HTTP_403_FORBIDDEN)
        self.assertTrue(User.objects.filter(pk=self.alice.pk).exists())
