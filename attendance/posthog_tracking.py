"""
PostHog tracking utility for RollCall.
Handles server-side event tracking.
"""
import logging

import posthog
from django.conf import settings

logger = logging.getLogger(__name__)

# Initialize PostHog if enabled
if settings.POSTHOG_ENABLED:
    posthog.api_key = settings.POSTHOG_API_KEY
    posthog.host = settings.POSTHOG_HOST


def track_event(user, event_name, properties=None):
    """
    Track an event in PostHog.

    Args:
        user: Django User instance (can be None for anonymous events)
        event_name: Name of the event (e.g., 'attendance_validated')
        properties: Dictionary of event properties
    """
    if not settings.POSTHOG_ENABLED:
        return

    try:
        user_id = str(user.id) if user and user.is_authenticated else None
        props = dict(properties or {})

        # Add user info if authenticated
        if user and user.is_authenticated:
            props['username'] = user.username
            profile = getattr(user, 'profile', None)
            if profile is not None:
                props['user_role'] = profile.role
                props['team_id'] = profile.team_id

        posthog.capture(
            distinct_id=user_id or 'anonymous',
            event=event_name,
            properties=props
        )
    except Exception as e:
        # Tracking must never break a scan
        logger.warning(f"PostHog tracking error: {e}")
