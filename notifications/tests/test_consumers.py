import pytest
from channels.db import database_sync_to_async
from channels.layers import get_channel_layer
from channels.routing import URLRouter
from channels.testing import WebsocketCommunicator
from django.contrib.auth import get_user_model
from django.contrib.auth.models import AnonymousUser

from core.routing import websocket_urlpatterns
from events.models import Registration


User = get_user_model()

application = URLRouter(websocket_urlpatterns)


@database_sync_to_async
def make_user(email, checked_in=True, is_admin=False, registered=True):
    user = User.objects.create_user(
        username=email.split("@")[0], email=email, password="pass1234", is_admin=is_admin
    )
    if registered:
        Registration.objects.create(
            user=user, email=email, full_name=email, checked_in=checked_in
        )
    return user


@database_sync_to_async
def check_in(user):
    Registration.objects.filter(user=user).update(checked_in=True)


def notification_insert(pk, scope="global", recipient_id=None):
    return {
        "table": "notifications",
        "eventType": "INSERT",
        "new": {"id": pk, "scope": scope, "recipient_id": recipient_id, "is_active": True},
        "old": {},
    }


def connect(path, user):
    async def app(scope, receive, send):
        return await application(dict(scope, user=user), receive, send)

    return WebsocketCommunicator(app, path)


async def send_change(table, payload):
    await get_channel_layer().group_send(
        f"changes.{table}", {"type": "change.event", "payload": payload}
    )


async def send_broadcast(channel, event, payload):
    await get_channel_layer().group_send(
        f"broadcast.{channel}",
        {"type": "broadcast.event", "event": event, "payload": payload},
    )


@pytest.mark.asyncio
async def test_anonymous_is_rejected():
    communicator = connect("/ws/realtime/changes/notifications/", AnonymousUser())
    connected, code = await communicator.connect()
    assert not connected
    assert code == 4001


@pytest.mark.asyncio
async def test_unknown_table_is_rejected():
    communicator = connect("/ws/realtime/changes/secrets/", User(id=1, email="a@example.com"))
    connected, code = await communicator.connect()
    assert not connected
    assert code == 4004


@pytest.mark.asyncio
@pytest.mark.django_db(transaction=True)
async def test_notification_feed_filters_user_rows():
    me = await make_user("me@example.com")
    communicator = connect("/ws/realtime/changes/notifications/", me)
    connected, _ = await communicator.connect()
    assert connected

    await send_change("notifications", notification_insert(1, "user", me.id + 1))
    await send_change("notifications", notification_insert(2, "user", me.id))

    event = await communicator.receive_json_from()
    assert event["new"]["id"] == 2
    assert event["eventType"] == "INSERT"
    assert await communicator.receive_nothing()

    await communicator.disconnect()


@pytest.mark.asyncio
@pytest.mark.django_db(transaction=True)
async def test_global_rows_reach_checked_in_participants():
    communicator = connect("/ws/realtime/changes/notifications/", await make_user("x@example.com"))
    await communicator.connect()

    await send_change("notifications", notification_insert(3))
    event = await communicator.receive_json_from()
    assert event["new"]["id"] == 3

    await communicator.disconnect()


@pytest.mark.asyncio
@pytest.mark.django_db(transaction=True)
async def test_participant_not_checked_in_gets_no_notification_rows():
    me = await make_user("late@example.com", checked_in=False)
    communicator = connect("/ws/realtime/changes/notifications/", me)
    connected, _ = await communicator.connect()
    assert connected

    await send_change("notifications", notification_insert(4))
    await send_change("notifications", notification_insert(5, "user", me.id))
    assert await communicator.receive_nothing()

    await check_in(me)
    await send_change("notifications", notification_insert(6))
    event = await communicator.receive_json_from()
    assert event["new"]["id"] == 6

    await communicator.disconnect()


@pytest.mark.asyncio
@pytest.mark.django_db(transaction=True)
async def test_admin_without_registration_sees_notification_rows():
    admin = await make_user("boss@example.com", is_admin=True, registered=False)
    communicator = connect("/ws/realtime/changes/notifications/", admin)
    await communicator.connect()

    await send_change("notifications", notification_insert(7))
    event = await communicator.receive_json_from()
    assert event["new"]["id"] == 7

    await communicator.disconnect()


@pytest.mark.asyncio
@pytest.mark.django_db(transaction=True)
async def test_team_replay_only_reaches_addressed_user():
    me = User(id=31, email="me@example.com")
    communicator = connect("/ws/realtime/broadcast/team-notification-replay/", me)
    connected, _ = await communicator.connect()
    assert connected

    await send_broadcast("team-notification-replay", "replay-team-notification",
                         {"original_id": 1, "user_id": 32})
    await send_broadcast("team-notification-replay", "replay-team-notification",
                         {"original_id": 2, "user_id": 31})

    message = await communicator.receive_json_from()
    assert message["event"] == "replay-team-notification"
    assert message["payload"]["original_id"] == 2
    assert await communicator.receive_nothing()

    await communicator.disconnect()


@pytest.mark.asyncio
@pytest.mark.django_db(transaction=True)
async def test_unknown_broadcast_channel_is_rejected():
    communicator = connect("/ws/realtime/broadcast/gossip/", User(id=41, email="g@example.com"))
    connected, code = await communicator.connect()
    assert not connected
    assert code == 4004
