# core/supabase_auth.py
# Custom DRF authentication class to verify Supabase JWTs

import logging
import jwt
from django.conf import settings
from django.contrib.auth import get_user_model
from rest_framework.authentication import BaseAuthentication
from rest_framework.exceptions import AuthenticationFailed

logger = logging.getLogger("hackathon")

User = get_user_model()


def decode_supabase_token(token: str) -> dict | None:
    """
    Verify a Supabase access token and return its claims.

    Returns None when the secret is not configured or the token is not a
    Supabase token, so other backends can try. Expired tokens raise.
    """
    supabase_jwt_secret = getattr(settings, "SUPABASE_JWT_SECRET", None)

    if not supabase_jwt_secret:
        logger.warning("SUPABASE_JWT_SECRET not configured")
        return None

    try:
        # Supabase uses HS256 by default
        return jwt.decode(
            token,
            supabase_jwt_secret,
            algorithms=["HS256"],
            audience="authenticated",
        )
    except jwt.ExpiredSignatureError:
        raise AuthenticationFailed("Token has expired")
    except jwt.InvalidTokenError as e:
        logger.debug(f"Invalid Supabase token: {e}")
        return None


def get_or_create_supabase_user(supabase_user_id: str, email: str):
    """
    Map a Supabase auth user onto a local user row.

    Looks up by Supabase id first, then by e-mail (linking the id on first
    sight), and finally creates the user.
    """
    if not email:
        raise AuthenticationFailed("Token missing email claim")

    user = User.objects.filter(supabase_id=supabase_user_id).first()
    if user:
        return user

    user = User.objects.filter(email__iexact=email).first()
    if user:
        if user.supabase_id is None:
            user.supabase_id = supabase_user_id
            user.save(update_fields=["supabase_id"])
        return user

    username = email.split("@")[0]
    # Ensure unique username
    base_username = username
    counter = 1
    while User.objects.filter(username=username).exists():
        username = f"{base_username}_{counter}"
        counter += 1

    user = User.objects.create(
        username=username,
        email=email.lower(),
        supabase_id=supabase_user_id,
        # Password is not used for Supabase auth
    )
    user.set_unusable_password()
    user.save(update_fields=["password"])
    logger.info(f"Created new user from Supabase: {email}")
    return user


class SupabaseJWTAuthentication(BaseAuthentication):
    """
    Custom authentication class that validates Supabase JWTs.

    This authenticator:
    1. Extracts the JWT from the Authorization header
    2. Verifies the token signature using the Supabase JWT secret
    3. Looks up or creates a Django user based on the Supabase user ID
    """

    def authenticate(self, request):
        auth_header = request.headers.get("Authorization", "")

        if not auth_header.startswith("Bearer "):
            return None  # Let other auth backends handle it

        token = auth_header.split(" ")[1]

        payload = decode_supabase_token(token)
        if payload is None:
            return None  # Let other auth backends try

        supabase_user_id = payload.get("sub")
        if not supabase_user_id:
            raise AuthenticationFailed("Invalid token: missing user ID")

        user = get_or_create_supabase_user(supabase_user_id, payload.get("email"))
        if not user.is_active:
            raise AuthenticationFailed("User is inactive")

        return (user, payload)

    def authenticate_header(self, request):
        return 'Bearer realm="api"'
