"""
Production settings for RollCall project.

These settings are for production deployment.
"""

from .base import *
import os
import logging

# SECURITY WARNING: keep the secret key used in production secret!
SECRET_KEY = os.environ.get('SECRET_KEY')
if not SECRET_KEY:
    raise ValueError("SECRET_KEY environment variable must be set in production")

# SECURITY WARNING: don't run with debug turned on in production!
DEBUG = os.environ.get('DEBUG', 'False') == 'True'

raw_allowed_hosts = os.environ.get('ALLOWED_HOSTS', '')
ALLOWED_HOSTS = [host.strip() for host in raw_allowed_hosts.split(',') if host.strip()]

# Configure CSRF trusted origins from environment; default to HTTPS versions of allowed hosts.
raw_csrf_origins = os.environ.get('CSRF_TRUSTED_ORIGINS', '')
CSRF_TRUSTED_ORIGINS = [origin.strip() for origin in raw_csrf_origins.split(',') if origin.strip()]
if not CSRF_TRUSTED_ORIGINS:
    CSRF_TRUSTED_ORIGINS = [f'https://{host}' for host in ALLOWED_HOSTS]

# Honor the X-Forwarded-Proto header set by the reverse proxy.
SECURE_PROXY_SSL_HEADER = ('HTTP_X_FORWARDED_PROTO', 'https')

# Database
# https://docs.djangoproject.com/en/5.2/ref/settings/#databases
# CONN_MAX_AGE keeps scanner round-trips short; statement_timeout turns a stuck
# store into an OperationalError, which the engine reports as a transient failure.

DATABASES = {
    'default': {
        'ENGINE': 'django.db.backends.postgresql',
        'NAME': os.environ.get('DB_NAME'),
        'USER': os.environ.get('DB_USER'),
        'PASSWORD': os.environ.get('DB_PASSWORD'),
        'HOST': os.environ.get('DB_HOST', 'localhost'),
        'PORT': os.environ.get('DB_PORT', '5432'),
        'CONN_MAX_AGE': int(os.environ.get('DB_CONN_MAX_AGE', '60')),
        'OPTIONS': {
            'connect_timeout': int(os.environ.get('DB_CONNECT_TIMEOUT', '5')),
            'options': f"-c statement_timeout={os.environ.get('DB_STATEMENT_TIMEOUT_MS', '5000')}",
        },
    }
}

# Rate limit counters must be shared between workers.
# Run `python manage.py createcachetable` once after deploying.
CACHES = {
    'default': {
        'BACKEND': 'django.core.cache.backends.db.DatabaseCache',
        'LOCATION': 'rollcall_cache',
    }
}
SILENCED_SYSTEM_CHECKS = ['django_ratelimit.W001']

# Security settings for production
SECURE_SSL_REDIRECT = True
SESSION_COOKIE_SECURE = True
CSRF_COOKIE_SECURE = True
SECURE_HSTS_SECONDS = 31536000  # 1 year
SECURE_HSTS_INCLUDE_SUBDOMAINS = True
SECURE_HSTS_PRELOAD = True

# Create logs directory if it doesn't exist
LOGS_DIR = BASE_DIR / 'logs'
LOGS_DIR.mkdir(exist_ok=True)

# Logging
LOGGING['handlers']['file'] = {
    'level': 'INFO',
    'class': 'logging.FileHandler',
    'filename': LOGS_DIR / 'rollcall.log',
    'formatter': 'verbose',
}
LOGGING['loggers']['attendance']['handlers'] = ['file', 'console']
LOGGING['root'] = {
    'handlers': ['file', 'console'],
    'level': 'INFO',
}

STATIC_ROOT = str(BASE_DIR / 'staticfiles')

# Validate analytics configuration on startup (warn but don't fail)
logger = logging.getLogger(__name__)

if POSTHOG_ENABLED and not POSTHOG_API_KEY:
    logger.warning(
        "POSTHOG_ENABLED is set but POSTHOG_API_KEY is empty. "
        "Attendance analytics will not be delivered."
    )
