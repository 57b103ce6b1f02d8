"""
Test settings that inherit from base settings but use SQLite.
"""

from config.settings import *  # noqa: F401,F403

SECRET_KEY = "test-secret-key-long-enough-for-hs256-token-signing"
DEBUG = False
SECURE_SSL_REDIRECT = False
SESSION_COOKIE_SECURE = False
CSRF_COOKIE_SECURE = False
SECURE_HSTS_SECONDS = 0

DATABASES = {
    "default": {
        "ENGINE": "django.db.backends.sqlite3",
        "NAME": ":memory:",
        "TEST": {
            "NAME": "file:memorydb_default?mode=memory&cache=shared",
        },
    }
}

CHANNEL_LAYERS = {
    "default": {"BACKEND": "channels.layers.InMemoryChannelLayer"}
}

CACHES = {
    "default": {
        "BACKEND": "django.core.cache.backends.locmem.LocMemCache",
        "LOCATION": "test-cache",
    }
}

# Speed up password hashing in tests
PASSWORD_HASHERS = [
    "django.contrib.auth.hashers.MD5PasswordHasher",
]

STORAGES = {
    "default": {
        "BACKEND": "django.core.files.storage.FileSystemStorage",
    },
    "staticfiles": {
        "BACKEND": "django.contrib.staticfiles.storage.StaticFilesStorage",
    },
}

SUPABASE_URL = None
SUPABASE_SERVICE_ROLE_KEY = None
SUPABASE_JWT_SECRET = "test-jwt-secret-with-enough-length-for-hs256"

REST_FRAMEWORK = {
    **REST_FRAMEWORK,
    "DEFAULT_THROTTLE_RATES": {
        "otp-request": "1000/minute",
        "team-invite": "1000/minute",
        "notification-replay": "1000/minute",
    },
}


# Tables are created straight from the models
class DisableMigrations:
    def __contains__(self, item):
        return True

    def __getitem__(self, item):
        return None


MIGRATION_MODULES = DisableMigrations()
