from unittest import mock

from django.contrib.auth import get_user_model
from django.db.models import DateTimeField, Value
from django.utils import timezone

from rest_framework.test import APITestCase, APIClient
from rest_framework import status

from events.models import Registration
from notifications.models import Notification, NotificationReceipt
from notifications import services
from teams.models import Team, TeamMember


User = get_user_model()


def make_participant(email, checked_in=True, **extra):
    user = User.objects.create_user(
        username=email.split("@")[0], email=email, password="pass1234", **extra
    )
    Registration.objects.create(user=user, email=email, full_name=email, checked_in=checked_in)
    return user


class NotificationTestBase(APITestCase):
    def setUp(self):
        self.client = APIClient()
        self.admin = User.objects.create_user(
            username="admin", email="admin@example.com", password="pass1234", is_admin=True
        )
        self.leader = make_participant("leader@example.com")
        self.members = [make_participant(f"m{i}@example.com") for i in range(3)]
        self.outsider = make_participant("outsider@example.com")

        self.team = Team.objects.create(name="Foo", leader=self.leader)
        for user in [self.leader] + self.members:
            TeamMember.objects.create(team=self.team, user=user, status=TeamMember.STATUS_ACCEPTED)

    def as_user(self, user):
        self.client.force_authenticate(user=user)
        return self.client


class TeamFanOutTests(NotificationTestBase):
    def test_leader_fans_out_one_row_per_member(self):
        with mock.patch("core.realtime._group_send") as group_send:
            with self.captureOnCommitCallbacks(execute=True):
                resp = self.as_user(self.leader).post(
                    f"/api/teams/{self.team.id}/notify/",
                    {"title": "Standup", "message": "Meet at the stage"},
                    format="json",
                )

        self.assertEqual(resp.status_code, status.HTTP_201_CREATED, resp.content)
        self.assertEqual(resp.data["count"], 4)

        rows = Notification.objects.filter(team=self.team)
        self.assertEqual(rows.count(), 4)
        self.assertEqual(len({row.batch for row in rows}), 1)
        self.assertEqual(str(rows[0].batch), resp.data["batch"])
        self.assertTrue(all(row.scope == Notification.SCOPE_USER for row in rows))
        self.assertEqual(
            sorted(rows.values_list("recipient_id", flat=True)),
            sorted(u.id for u in [self.leader] + self.members),
        )
        self.assertFalse(NotificationReceipt.objects.exists())

        change_events = [
            call.args[1]["payload"]
            for call in group_send.call_args_list
            if call.args[0] == "changes.notifications"
        ]
        self.assertEqual(len(change_events), 4)
        self.assertTrue(all(event["eventType"] == "INSERT" for event in change_events))

    def test_member_cannot_notify_team(self):
        resp = self.as_user(self.members[0]).post(
            f"/api/teams/{self.team.id}/notify/",
            {"title": "Hi", "message": "Hello"},
            format="json",
        )
        self.assertEqual(resp.status_code, status.HTTP_403_FORBIDDEN)
        self.assertFalse(Notification.objects.exists())

    def test_admin_can_notify_any_team(self):
        resp = self.as_user(self.admin).post(
            f"/api/teams/{self.team.id}/notify/",
            {"title": "Judging", "message": "You are up next"},
            format="json",
        )
        self.assertEqual(resp.status_code, status.HTTP_201_CREATED, resp.content)
        self.assertEqual(Notification.objects.filter(team=self.team).count(), 4)

    def test_recipients_are_deduplicated(self):
        recipients = services.team_recipients(self.team)
        self.assertEqual(recipients[0], self.leader)
        self.assertEqual(len(recipients), 4)


class VisibilityTests(NotificationTestBase):
    def setUp(self):
        super().setUp()
        self.announcement = services.create_global_notification(self.admin, "Welcome", "Doors open")
        services.send_team_notification(self.team, self.leader, "Team", "Hello team")

    def test_member_sees_global_and_own_rows(self):
        resp = self.as_user(self.members[0]).get("/api/notifications/")
        self.assertEqual(resp.status_code, status.HTTP_200_OK)

        self.assertEqual(len(resp.data), 2)
        scopes = sorted(n["scope"] for n in resp.data)
        self.assertEqual(scopes, ["global", "user"])
        own = [n for n in resp.data if n["scope"] == "user"][0]
        self.assertEqual(own["recipient"], self.members[0].id)
        self.assertFalse(own["is_read"])

    def test_outsider_sees_only_global(self):
        resp = self.as_user(self.outsider).get("/api/notifications/")
        self.assertEqual([n["id"] for n in resp.data], [self.announcement.id])

    def test_not_checked_in_sees_nothing(self):
        Registration.objects.filter(user=self.outsider).update(checked_in=False)
        resp = self.as_user(self.outsider).get("/api/notifications/")
        self.assertEqual(resp.status_code, status.HTTP_200_OK)
        self.assertEqual(resp.data, [])

    def test_inactive_rows_are_hidden(self):
        services.toggle_active(self.announcement)
        resp = self.as_user(self.outsider).get("/api/notifications/")
        self.assertEqual(resp.data, [])

    def test_requires_authentication(self):
        self.client.force_authenticate(user=None)
        resp = self.client.get("/api/notifications/")
        self.assertIn(resp.status_code, (status.HTTP_401_UNAUTHORIZED, status.HTTP_403_FORBIDDEN))


class ReadStateTests(NotificationTestBase):
    def setUp(self):
        super().setUp()
        self.announcement = services.create_global_notification(self.admin, "Welcome", "Doors open")
        self.url = f"/api/notifications/{self.announcement.id}/read/"

    def test_mark_read_is_idempotent(self):
        first = self.as_user(self.outsider).post(self.url)
        self.assertEqual(first.status_code, status.HTTP_200_OK)
        self.assertIsNotNone(first.data["read_at"])

        second = self.client.post(self.url)
        self.assertEqual(second.data["read_at"], first.data["read_at"])
        self.assertEqual(NotificationReceipt.objects.filter(user=self.outsider).count(), 1)

    def test_read_state_is_per_user(self):
        self.as_user(self.outsider).post(self.url)

        resp = self.as_user(self.leader).get("/api/notifications/", {"unread": "true"})
        self.assertIn(self.announcement.id, [n["id"] for n in resp.data])

        resp = self.as_user(self.outsider).get("/api/notifications/", {"unread": "true"})
        self.assertNotIn(self.announcement.id, [n["id"] for n in resp.data])

    def test_mark_unread(self):
        self.as_user(self.outsider).post(self.url)
        resp = self.client.delete(self.url)
        self.assertEqual(resp.status_code, status.HTTP_200_OK)
        self.assertIsNone(resp.data["read_at"])
        self.assertFalse(NotificationReceipt.objects.filter(user=self.outsider).exists())

    def test_cannot_read_someone_elses_row(self):
        rows = services.send_team_notification(self.team, self.leader, "Team", "Hi")
        resp = self.as_user(self.outsider).post(f"/api/notifications/{rows[0].id}/read/")
        self.assertEqual(resp.status_code, status.HTTP_404_NOT_FOUND)

    def test_bulk_mark_read(self):
        services.create_global_notification(self.admin, "Lunch", "Pizza is here")
        resp = self.as_user(self.outsider).post("/api/notifications/mark-read/", {}, format="json")
        self.assertEqual(resp.status_code, status.HTTP_200_OK)
        self.assertEqual(resp.data["marked_read"], 2)

        resp = self.client.post("/api/notifications/mark-read/", {}, format="json")
        self.assertEqual(resp.data["marked_read"], 0)

    def test_bulk_mark_read_selected_ids(self):
        other = services.create_global_notification(self.admin, "Lunch", "Pizza is here")
        resp = self.as_user(self.outsider).post(
            "/api/notifications/mark-read/", {"ids": [other.id]}, format="json"
        )
        self.assertEqual(resp.data["marked_read"], 1)
        self.assertTrue(
            NotificationReceipt.objects.filter(user=self.outsider, notification=other).exists()
        )
        self.assertFalse(
            NotificationReceipt.objects.filter(user=self.outsider, notification=self.announcement).exists()
        )

    def test_bulk_mark_read_counts_only_new_receipts(self):
        other = services.create_global_notification(self.admin, "Lunch", "Pizza is here")
        # Another request marked the announcement after this one listed it as unread
        NotificationReceipt.objects.create(
            user=self.outsider, notification=self.announcement, read_at=timezone.now()
        )
        stale = Notification.objects.annotate(
            read_at=Value(None, output_field=DateTimeField())
        )

        with mock.patch.object(services, "visible_notifications", return_value=stale):
            marked = services.mark_many_read(self.outsider)

        self.assertEqual(marked, 1)
        self.assertEqual(NotificationReceipt.objects.filter(user=self.outsider).count(), 2)
        self.assertTrue(
            NotificationReceipt.objects.filter(user=self.outsider, notification=other).exists()
        )


class AdminNotificationTests(NotificationTestBase):
    def setUp(self):
        super().setUp()
        self.as_user(self.admin)

    def test_create_global(self):
        resp = self.client.post(
            "/api/notifications/admin/",
            {"title": "  Welcome ", "message": "Doors open at 9"},
            format="json",
        )
        self.assertEqual(resp.status_code, status.HTTP_201_CREATED, resp.content)
        self.assertEqual(resp.data["scope"], "global")
        self.assertEqual(resp.data["title"], "Welcome")
        self.assertIsNone(resp.data["recipient"])

    def test_blank_title_rejected(self):
        resp = self.client.post(
            "/api/notifications/admin/", {"title": "   ", "message": "x"}, format="json"
        )
        self.assertEqual(resp.status_code, status.HTTP_400_BAD_REQUEST)

    def test_list_filters_by_scope(self):
        services.create_global_notification(self.admin, "Welcome", "Doors open")
        services.send_team_notification(self.team, self.leader, "Team", "Hi")

        resp = self.client.get("/api/notifications/admin/", {"scope": "global"})
        self.assertEqual(len(resp.data), 1)
        resp = self.client.get("/api/notifications/admin/", {"scope": "user"})
        self.assertEqual(len(resp.data), 4)

    def test_patch_toggle_delete(self):
        notification = services.create_global_notification(self.admin, "Welcome", "Doors open")
        base = f"/api/notifications/admin/{notification.id}/"

        resp = self.client.patch(base, {"title": "Updated"}, format="json")
        self.assertEqual(resp.status_code, status.HTTP_200_OK, resp.content)
        self.assertEqual(resp.data["title"], "Updated")

        resp = self.client.post(base + "toggle/")
        self.assertFalse(resp.data["is_active"])
        resp = self.client.post(base + "toggle/")
        self.assertTrue(resp.data["is_active"])

        resp = self.client.delete(base)
        self.assertEqual(resp.status_code, status.HTTP_204_NO_CONTENT)
        self.assertFalse(Notification.objects.filter(pk=notification.pk).exists())

    def test_participant_cannot_manage(self):
        resp = self.as_user(self.leader).post(
            "/api/notifications/admin/", {"title": "x", "message": "y"}, format="json"
        )
        self.assertEqual(resp.status_code, status.HTTP_403_FORBIDDEN)


class ReplayTests(NotificationTestBase):
    def setUp(self):
        super().setUp()
        self.as_user(self.admin)

    def test_global_replay_broadcasts_once_and_writes_nothing(self):
        notification = services.create_global_notification(self.admin, "Welcome", "Doors open")
        before = Notification.objects.count()

        with mock.patch("notifications.services.broadcast") as broadcast:
            resp = self.client.post(f"/api/notifications/admin/{notification.id}/replay/")

        self.assertEqual(resp.status_code, status.HTTP_202_ACCEPTED)
        self.assertEqual(resp.data, {"original_id": notification.id, "events_sent": 1})
        self.assertEqual(Notification.objects.count(), before)
        self.assertFalse(NotificationReceipt.objects.exists())

        channel, event, payload = broadcast.call_args.args
        self.assertEqual(channel, "notification-replay")
        self.assertEqual(event, "replay-notification")
        self.assertEqual(payload["original_id"], notification.id)
        self.assertEqual(payload["notification"]["title"], "Welcome")
        self.assertEqual(payload["display_seconds"], 10)
        self.assertNotIn("user_id", payload)

    def test_team_replay_addresses_each_member(self):
        rows = services.send_team_notification(self.team, self.leader, "Team", "Hi")
        before = Notification.objects.count()

        with mock.patch("notifications.services.broadcast") as broadcast:
            resp = self.client.post(f"/api/notifications/admin/{rows[0].id}/replay/")

        self.assertEqual(resp.status_code, status.HTTP_202_ACCEPTED)
        self.assertEqual(resp.data["events_sent"], 4)
        self.assertEqual(Notification.objects.count(), before)

        payloads = [call.args[2] for call in broadcast.call_args_list]
        self.assertTrue(all(call.args[0] == "team-notification-replay" for call in broadcast.call_args_list))
        self.assertEqual(
            sorted(p["user_id"] for p in payloads),
            sorted(u.id for u in [self.leader] + self.members),
        )
        self.assertEqual(
            sorted(p["original_id"] for p in payloads),
            sorted(row.id for row in rows),
        )
