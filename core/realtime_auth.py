"""
Channels middleware: authenticate WebSocket connections with a Supabase
access token passed as ``?token=<jwt>``. Falls back to the Django session.
"""

import logging
from urllib.parse import parse_qs

from channels.auth import AuthMiddlewareStack
from channels.db import database_sync_to_async
from channels.middleware import BaseMiddleware
from rest_framework.exceptions import AuthenticationFailed

from .supabase_auth import decode_supabase_token, get_or_create_supabase_user

logger = logging.getLogger("hackathon.realtime")


@database_sync_to_async
def get_user_for_token(token):
    try:
        payload = decode_supabase_token(token)
        if not payload or not payload.get("sub"):
            return None
        user = get_or_create_supabase_user(payload["sub"], payload.get("email"))
    except AuthenticationFailed as e:
        logger.info(f"Rejected WebSocket token: {e.detail}")
        return None
    return user if user.is_active else None


class SupabaseTokenAuthMiddleware(BaseMiddleware):
    async def __call__(self, scope, receive, send):
        query = parse_qs(scope.get("query_string", b"").decode())
        token = (query.get("token") or [None])[0]

        if token:
            user = await get_user_for_token(token)
            if user is not None:
                scope = dict(scope, user=user)

        return await super().__call__(scope, receive, send)


def SupabaseTokenAuthMiddlewareStack(inner):
    # Session auth runs first; a valid token in the query string wins
    return AuthMiddlewareStack(SupabaseTokenAuthMiddleware(inner))
