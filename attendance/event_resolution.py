"""
Resolve which event a day's attendance is recorded against.
"""

import logging
from datetime import date, datetime
from typing import Optional

from django.db import DatabaseError
from django.db.models import F
from django.utils import timezone

from .audit_logging import log_event_action
from .exceptions import TransientStoreError
from .models import Event, Team

logger = logging.getLogger(__name__)


def find_event_for_date(team: Team, day: date) -> Optional[Event]:
    """
    Return the team's event for ``day`` without creating anything.

    When a day has several events the earliest start time wins; events
    without a start time sort last.
    """
    return (
        Event.objects
        .filter(team=team, event_date=day)
        .order_by(F('start_time').asc(nulls_last=True), 'id')
        .first()
    )


def resolve_event_for_today(team: Team, today: date, now: Optional[datetime] = None) -> Event:
    """
    Return the team's event for ``today``, auto-creating a training event if none exists.

    Only the redemption flow calls this. Concurrent first scans of the day are
    arbitrated by the partial unique constraint on auto-created events, so they
    all end up with the same row.

    Raises:
        TransientStoreError: the database was unreachable or timed out
    """
    now = now or timezone.now()
    try:
        event = find_event_for_date(team, today)
        if event is not None:
            return event

        start_time = timezone.localtime(now).time().replace(second=0, microsecond=0)
        event, created = Event.objects.get_or_create(
            team=team,
            event_date=today,
            is_auto_created=True,
            defaults={
                'event_type': Event.EventType.TRAINING,
                'start_time': start_time,
            },
        )
    except DatabaseError as exc:
        logger.error(f"Event resolution failed for team {team.id} on {today}: {exc}")
        raise TransientStoreError(f"Could not resolve today's event: {exc}") from exc

    if created:
        log_event_action(
            'event_auto_created',
            None,
            event.id,
            team.id,
            details={'event_date': today.isoformat(), 'start_time': start_time.strftime('%H:%M')},
        )
    return event
