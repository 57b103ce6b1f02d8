from unittest import mock

from django.contrib.auth import get_user_model
from django.db import DatabaseError
from django.test import SimpleTestCase
from rest_framework import status
from rest_framework.exceptions import NotFound, Throttled
from rest_framework.test import APITestCase, APIClient

from core.exceptions import RoomFull, custom_exception_handler
from core.models import SystemConfig
from core.services import get_config, is_registration_open, set_registration_open


User = get_user_model()


class ExceptionHandlerTests(SimpleTestCase):
    def test_domain_error_shape(self):
        resp = custom_exception_handler(RoomFull("Room 124 is full"), {})
        self.assertEqual(resp.status_code, status.HTTP_409_CONFLICT)
        self.assertEqual(
            resp.data,
            {
                "success": False,
                "status_code": 409,
                "errors": {"detail": "Room 124 is full", "code": "room_full"},
            },
        )

    def test_drf_error_keeps_code(self):
        resp = custom_exception_handler(NotFound(), {})
        self.assertEqual(resp.status_code, status.HTTP_404_NOT_FOUND)
        self.assertEqual(resp.data["errors"]["code"], "not_found")

    def test_retry_after_is_kept(self):
        resp = custom_exception_handler(Throttled(wait=30), {})
        self.assertEqual(resp.status_code, status.HTTP_429_TOO_MANY_REQUESTS)
        self.assertEqual(resp["Retry-After"], "30")

    def test_database_error_is_503(self):
        resp = custom_exception_handler(DatabaseError("connection reset"), {})
        self.assertEqual(resp.status_code, status.HTTP_503_SERVICE_UNAVAILABLE)
        self.assertEqual(resp.data["errors"]["code"], "backend_error")

    def test_unexpected_error_is_500(self):
        resp = custom_exception_handler(ValueError("boom"), {})
        self.assertEqual(resp.status_code, status.HTTP_500_INTERNAL_SERVER_ERROR)
        self.assertFalse(resp.data["success"])


class SystemConfigTests(APITestCase):
    def setUp(self):
        self.client = APIClient()
        self.admin = User.objects.create_user(
            username="admin", email="admin@example.com", password="pass1234", is_admin=True
        )
        self.participant = User.objects.create_user(
            username="bob", email="bob@example.com", password="pass1234"
        )
        self.url = "/api/core/settings/registration/"

    def test_missing_flag_means_open(self):
        self.assertFalse(SystemConfig.objects.exists())
        self.assertTrue(is_registration_open())

    def test_unreadable_flag_means_open(self):
        with mock.patch("core.services.SystemConfig.objects.filter", side_effect=DatabaseError("down")):
            self.assertEqual(get_config("registration_open", default=True), True)

    def test_legacy_dict_value(self):
        SystemConfig.objects.create(key="registration_open", value={"enabled": False})
        self.assertFalse(is_registration_open())

    def test_admin_toggles_registration(self):
        self.client.force_authenticate(user=self.admin)
        resp = self.client.put(self.url, {"registration_open": False}, format="json")
        self.assertEqual(resp.status_code, status.HTTP_200_OK)
        self.assertEqual(resp.data, {"registration_open": False})
        self.assertEqual(SystemConfig.objects.get(key="registration_open").updated_by, self.admin)

        self.client.force_authenticate(user=self.participant)
        resp = self.client.get(self.url)
        self.assertEqual(resp.data, {"registration_open": False})

    def test_participant_cannot_toggle(self):
        self.client.force_authenticate(user=self.participant)
        resp = self.client.put(self.url, {"registration_open": False}, format="json")
        self.assertEqual(resp.status_code, status.HTTP_403_FORBIDDEN)
        self.assertTrue(is_registration_open())

    def test_health_is_public(self):
        resp = self.client.get("/api/health/")
        self.assertEqual(resp.status_code, status.HTTP_200_OK)
        self.assertEqual(resp.data["status"], "ok")
        self.assertTrue(resp.data["db"])


class ChangeFeedSignalTests(APITestCase):
    def setUp(self):
        self.user = User.objects.create_user(
            username="alice", email="alice@example.com", password="pass1234"
        )

    def events_for(self, group_send, group):
        return [
            call.args[1]["payload"]
            for call in group_send.call_args_list
            if call.args[0] == group
        ]

    def test_insert_update_delete_are_published_after_commit(self):
        from events.models import Registration

        with mock.patch("core.realtime._group_send") as group_send:
            with self.captureOnCommitCallbacks(execute=True) as callbacks:
                registration = Registration.objects.create(
                    user=self.user, email=self.user.email, full_name="Alice"
                )
                # nothing leaves before commit
                self.assertEqual(self.events_for(group_send, "changes.registrations"), [])
            self.assertTrue(callbacks)

            with self.captureOnCommitCallbacks(execute=True):
                registration.checked_in = True
                registration.save()

            registration_id = registration.id
            with self.captureOnCommitCallbacks(execute=True):
                registration.delete()

        events = self.events_for(group_send, "changes.registrations")
        self.assertEqual([e["eventType"] for e in events], ["INSERT", "UPDATE", "DELETE"])
        self.assertEqual(events[0]["table"], "registrations")
        self.assertEqual(events[0]["new"]["user_id"], self.user.id)
        self.assertFalse(events[1]["old"]["checked_in"])
        self.assertTrue(events[1]["new"]["checked_in"])
        self.assertEqual(events[2]["old"]["id"], registration_id)

    def test_config_changes_are_published(self):
        with mock.patch("core.realtime._group_send") as group_send:
            with self.captureOnCommitCallbacks(execute=True):
                set_registration_open(False)

        events = self.events_for(group_send, "changes.system_config")
        self.assertEqual(len(events), 1)
        self.assertEqual(events[0]["new"]["value"], False)

    def test_publish_failure_never_reaches_caller(self):
        with mock.patch("core.realtime.get_channel_layer", side_effect=RuntimeError("layer down")):
            with self.captureOnCommitCallbacks(execute=True):
                set_registration_open(True)
        self.assertTrue(is_registration_open())
