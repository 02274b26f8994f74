"""
Tests for per-date rosters and monthly calendar summaries.
"""
from datetime import date, time
from unittest import mock

from django.db import OperationalError
from django.test import TestCase

from attendance import aggregation
from attendance.aggregation import get_calendar_summary, get_roster_for_date, team_players
from attendance.exceptions import TransientStoreError
from attendance.models import Event
from attendance.tests.test_utils import (
    create_test_admin, create_test_attendance, create_test_event, create_test_player,
    create_test_team, create_test_token, create_test_user,
)


class AggregationTestCase(TestCase):

    def setUp(self):
        self.team = create_test_team()
        self.admin = create_test_admin(team=self.team)
        self.ana = create_test_player(team=self.team, username='ana', first_name='Ana', last_name='Lee')
        self.ben = create_test_player(team=self.team, username='ben', first_name='Ben', last_name='Ortiz')
        self.cara = create_test_player(team=self.team, username='cara', first_name='Cara', last_name='Ng')


class TeamPlayersTests(AggregationTestCase):

    def test_only_active_players_of_the_team(self):
        other_team = create_test_team(name='Other Team')
        create_test_player(team=other_team, username='outsider')
        create_test_user(username='inactive', team=self.team, is_active=False)

        self.assertEqual(list(team_players(self.team)), [self.ana, self.ben, self.cara])


class RosterTests(AggregationTestCase):

    def test_day_without_event_lists_everyone_absent(self):
        roster = get_roster_for_date(self.team, date(2024, 6, 3))

        self.assertEqual(roster['date'], '2024-06-03')
        self.assertIsNone(roster['event'])
        self.assertEqual([row['name'] for row in roster['players']], ['Ana Lee', 'Ben Ortiz', 'Cara Ng'])
        self.assertTrue(all(row['attended'] is False and row['record'] is None for row in roster['players']))
        self.assertFalse(Event.objects.exists())

    def test_attendance_marked_per_player(self):
        event = create_test_event(self.team, date(2024, 6, 1), start_time=time(18, 0))
        record = create_test_attendance(self.ana, event, validated_by=self.admin)

        roster = get_roster_for_date(self.team, date(2024, 6, 1))

        self.assertEqual(roster['event']['id'], event.id)
        rows = {row['id']: row for row in roster['players']}
        self.assertTrue(rows[self.ana.id]['attended'])
        self.assertEqual(rows[self.ana.id]['record']['id'], record.id)
        self.assertEqual(rows[self.ana.id]['email'], 'ana@example.com')
        self.assertFalse(rows[self.ben.id]['attended'])
        self.assertFalse(rows[self.cara.id]['attended'])

    def test_attendance_at_any_event_that_day_counts(self):
        create_test_event(self.team, date(2024, 6, 1), start_time=time(10, 0))
        evening = create_test_event(self.team, date(2024, 6, 1), start_time=time(19, 0))
        create_test_attendance(self.ben, evening)

        roster = get_roster_for_date(self.team, date(2024, 6, 1))
        rows = {row['id']: row for row in roster['players']}
        self.assertTrue(rows[self.ben.id]['attended'])

    def test_other_days_do_not_leak(self):
        event = create_test_event(self.team, date(2024, 6, 1))
        create_test_attendance(self.ana, event)
        create_test_event(self.team, date(2024, 6, 2))

        roster = get_roster_for_date(self.team, date(2024, 6, 2))
        self.assertFalse(any(row['attended'] for row in roster['players']))

    def test_store_failure_is_transient_error(self):
        with mock.patch.object(aggregation, 'find_event_for_date', side_effect=OperationalError('locked')):
            with self.assertRaises(TransientStoreError):
                get_roster_for_date(self.team, date(2024, 6, 1))


class CalendarSummaryTests(AggregationTestCase):

    def test_empty_month(self):
        summary = get_calendar_summary(self.team, 2024, 6)
        self.assertEqual(summary, {
            'year': 2024,
            'month': 6,
            'events': [],
            'counts': {},
            'total_players': 3,
        })

    def test_counts_distinct_players_per_day(self):
        morning = create_test_event(self.team, date(2024, 6, 1), start_time=time(9, 0))
        evening = create_test_event(self.team, date(2024, 6, 1), start_time=time(18, 0),
                                    event_type=Event.EventType.MATCH)
        create_test_attendance(self.ana, morning)
        # A second fact for the same player that day, backed by a separate token
        create_test_attendance(self.ana, evening, daily_token=create_test_token(self.ana, date(2024, 5, 31), is_used=True))
        create_test_attendance(self.ben, evening)
        create_test_event(self.team, date(2024, 6, 15))

        summary = get_calendar_summary(self.team, 2024, 6)

        self.assertEqual(summary['counts'], {'2024-06-01': 2, '2024-06-15': 0})
        self.assertEqual([e['id'] for e in summary['events']][:2], [morning.id, evening.id])
        self.assertEqual(len(summary['events']), 3)

    def test_month_bounds(self):
        create_test_event(self.team, date(2024, 1, 31))
        create_test_event(self.team, date(2024, 2, 1))
        create_test_event(self.team, date(2024, 2, 29))
        create_test_event(self.team, date(2024, 3, 1))

        summary = get_calendar_summary(self.team, 2024, 2)
        self.assertEqual([e['event_date'] for e in summary['events']], ['2024-02-01', '2024-02-29'])

    def test_december_does_not_spill_into_next_year(self):
        create_test_event(self.team, date(2024, 12, 31))
        create_test_event(self.team, date(2025, 1, 1))

        summary = get_calendar_summary(self.team, 2024, 12)
        self.assertEqual(list(summary['counts']), ['2024-12-31'])

    def test_other_team_excluded(self):
        other_team = create_test_team(name='Other Team')
        outsider = create_test_player(team=other_team, username='outsider')
        other_event = create_test_event(other_team, date(2024, 6, 1))
        create_test_attendance(outsider, other_event)

        summary = get_calendar_summary(self.team, 2024, 6)
        self.assertEqual(summary['events'], [])
        self.assertEqual(summary['counts'], {})
