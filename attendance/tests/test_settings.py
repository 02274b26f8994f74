"""
Test-specific settings.

The test database is a file rather than SQLite's default in-memory database
so the threaded concurrency tests share one database across connections.
"""
from RollCall.settings.base import *

SECRET_KEY = 'test-secret-key-not-for-production'
DEBUG = False

# Allow Django test client host
ALLOWED_HOSTS = ['testserver', 'localhost']

DATABASES = {
    'default': {
        'ENGINE': 'django.db.backends.sqlite3',
        'NAME': BASE_DIR / 'test_db.sqlite3',
        'OPTIONS': {
            'timeout': 20,
            'transaction_mode': 'IMMEDIATE',
        },
        'TEST': {
            'NAME': BASE_DIR / 'test_db.sqlite3',
        },
    }
}

# Suppress rate limiting cache warnings for tests
# LocMemCache works for testing even though it's not shared
SILENCED_SYSTEM_CHECKS = ['django_ratelimit.E003', 'django_ratelimit.W001']

POSTHOG_ENABLED = False

PASSWORD_HASHERS = ['django.contrib.auth.hashers.MD5PasswordHasher']

LOGGING['loggers']['attendance']['level'] = 'CRITICAL'
