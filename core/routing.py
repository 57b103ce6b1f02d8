"""
WebSocket URL routing for Channels.
"""

from django.urls import re_path
from core.consumers import BroadcastConsumer, ChangeFeedConsumer

websocket_urlpatterns = [
    re_path(r"ws/realtime/changes/(?P<table>[\w-]+)/$", ChangeFeedConsumer.as_asgi()),
    re_path(r"ws/realtime/broadcast/(?P<channel>[\w-]+)/$", BroadcastConsumer.as_asgi()),
]
