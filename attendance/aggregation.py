"""
Read-side attendance reporting: per-date rosters and per-month calendar summaries.

Nothing here writes; every function is safe to call concurrently.
"""

import calendar
import logging
from datetime import date

from django.contrib.auth.models import User
from django.db import DatabaseError
from django.db.models import Count

from .event_resolution import find_event_for_date
from .exceptions import TransientStoreError
from .models import AttendanceRecord, Event, Profile, Team

logger = logging.getLogger(__name__)


def team_players(team: Team):
    """Active players on the team, ordered by name. This is the roster."""
    return (
        User.objects
        .filter(profile__team=team, profile__role=Profile.Role.PLAYER, is_active=True)
        .select_related('profile')
        .order_by('first_name', 'last_name', 'username')
    )


def get_roster_for_date(team: Team, day: date) -> dict:
    """
    Every player on the team with whether they attended on ``day``.

    Players without an attendance fact for the day are listed with
    attended=False and record=None. Never creates an event.

    Raises:
        TransientStoreError: the database was unreachable or timed out
    """
    try:
        event = find_event_for_date(team, day)
        players = list(team_players(team))

        records_by_user = {}
        if event is not None:
            records = (
                AttendanceRecord.objects
                .filter(event__team=team, event__event_date=day)
                .order_by('validated_at', 'id')
            )
            for record in records:
                # Earliest fact wins if a player was recorded at two events that day
                records_by_user.setdefault(record.user_id, record)
    except DatabaseError as exc:
        logger.error(f"Roster lookup failed for team {team.id} on {day}: {exc}")
        raise TransientStoreError(f"Could not load attendance: {exc}") from exc

    player_rows = []
    for player in players:
        record = records_by_user.get(player.id)
        player_rows.append({
            'id': player.id,
            'name': player.profile.display_name,
            'email': player.email,
            'attended': record is not None,
            'record': record.as_dict() if record else None,
        })

    return {
        'date': day.isoformat(),
        'event': event.as_dict() if event else None,
        'players': player_rows,
    }


def get_calendar_summary(team: Team, year: int, month: int) -> dict:
    """
    Events and attendance counts for one calendar month.

    ``counts`` maps YYYY-MM-DD to the number of distinct players with an
    attendance fact that day. Only days with at least one event appear;
    callers treat a missing date as "no activity".

    Raises:
        TransientStoreError: the database was unreachable or timed out
    """
    first_day = date(year, month, 1)
    last_day = date(year, month, calendar.monthrange(year, month)[1])

    try:
        events = list(
            Event.objects
            .filter(team=team, event_date__range=(first_day, last_day))
            .order_by('event_date', 'start_time', 'id')
        )
        daily_counts = (
            Event.objects
            .filter(team=team, event_date__range=(first_day, last_day))
            .values('event_date')
            .annotate(attended=Count('attendance_records__user', distinct=True))
            .order_by('event_date')
        )
        counts = {row['event_date'].isoformat(): row['attended'] for row in daily_counts}
        total_players = team_players(team).count()
    except DatabaseError as exc:
        logger.error(f"Calendar summary failed for team {team.id} ({year}-{month:02d}): {exc}")
        raise TransientStoreError(f"Could not load calendar: {exc}") from exc

    return {
        'year': year,
        'month': month,
        'events': [event.as_dict() for event in events],
        'counts': counts,
        'total_players': total_players,
    }
