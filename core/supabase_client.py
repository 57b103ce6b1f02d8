# core/supabase_client.py
# Supabase client for auth (OTP) and database function calls

import logging

from django.conf import settings

logger = logging.getLogger("hackathon")

_supabase_client = None


class SupabaseError(Exception):
    """Raised when a Supabase call fails or returns an error payload."""


def get_supabase_client():
    """
    Get the Supabase client instance (singleton pattern).
    Uses service_role key for admin access.
    """
    global _supabase_client

    if _supabase_client is None:
        url = getattr(settings, "SUPABASE_URL", None)
        key = getattr(settings, "SUPABASE_SERVICE_ROLE_KEY", None)

        if not url or not key:
            logger.warning("Supabase credentials not configured")
            return None

        try:
            from supabase import create_client

            _supabase_client = create_client(url, key)
            logger.info("Supabase client initialized")
        except Exception as e:
            logger.error(f"Failed to create Supabase client: {e}")
            return None

    return _supabase_client


def reset_supabase_client():
    global _supabase_client
    _supabase_client = None


def send_email_otp(email: str) -> bool:
    """
    Ask Supabase Auth to e-mail a one-time 6-digit code.

    Returns True if the request was accepted, False if Supabase is not
    configured. Errors from Supabase are raised as SupabaseError.
    """
    client = get_supabase_client()
    if not client:
        return False

    try:
        client.auth.sign_in_with_otp(
            {"email": email, "options": {"should_create_user": True}}
        )
    except Exception as e:
        logger.warning(f"OTP request failed for {email}: {e}")
        raise SupabaseError(str(e)) from e

    logger.info(f"OTP sent to {email}")
    return True


def verify_email_otp(email: str, token: str) -> dict | None:
    """
    Exchange an e-mailed code for a Supabase session.

    Returns a dict with the session tokens and the auth user, or None if
    Supabase is not configured.
    """
    client = get_supabase_client()
    if not client:
        return None

    try:
        result = client.auth.verify_otp(
            {"email": email, "token": token, "type": "email"}
        )
    except Exception as e:
        logger.info(f"OTP verification failed for {email}: {e}")
        raise SupabaseError(str(e)) from e

    session = getattr(result, "session", None)
    user = getattr(result, "user", None)
    if session is None or user is None:
        raise SupabaseError("Supabase returned no session")

    return {
        "access_token": session.access_token,
        "refresh_token": session.refresh_token,
        "expires_in": getattr(session, "expires_in", None),
        "user_id": str(user.id),
        "email": user.email or email,
    }


def call_rpc(function_name: str, params: dict):
    """
    Call a Postgres function exposed through Supabase (PostgREST rpc).

    Returns the function's data. Raises SupabaseError when Supabase is not
    configured or the call fails.
    """
    client = get_supabase_client()
    if not client:
        raise SupabaseError("Supabase is not configured")

    try:
        response = client.rpc(function_name, params).execute()
    except Exception as e:
        logger.error(f"RPC {function_name} failed: {e}")
        raise SupabaseError(str(e)) from e

    return getattr(response, "data", None)
