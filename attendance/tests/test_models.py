"""
Tests for model constraints and serialization.
"""
from datetime import date, time

from django.db import IntegrityError, transaction
from django.test import TestCase

from attendance.models import DailyToken, Event, Profile
from attendance.tests.test_utils import (
    create_test_admin, create_test_attendance, create_test_event, create_test_player,
    create_test_team, create_test_token,
)


class ProfileTests(TestCase):

    def test_profile_created_with_player_role(self):
        player = create_test_player()
        self.assertEqual(player.profile.role, Profile.Role.PLAYER)
        self.assertFalse(player.profile.is_admin)

    def test_display_name_falls_back_to_username(self):
        named = create_test_player(username='named', first_name='Ana', last_name='Lee')
        unnamed = create_test_player(username='unnamed')
        self.assertEqual(named.profile.display_name, 'Ana Lee')
        self.assertEqual(unnamed.profile.display_name, 'unnamed')

    def test_admin_flag(self):
        admin = create_test_admin()
        self.assertTrue(admin.profile.is_admin)


class DailyTokenModelTests(TestCase):

    def setUp(self):
        self.team = create_test_team()
        self.player = create_test_player(team=self.team)

    def test_generated_tokens_are_long_and_distinct(self):
        tokens = {DailyToken.generate_token() for _ in range(50)}
        self.assertEqual(len(tokens), 50)
        for token in tokens:
            self.assertEqual(len(token), 32)

    def test_one_token_per_user_per_day(self):
        create_test_token(self.player, date(2024, 6, 1))
        with self.assertRaises(IntegrityError):
            with transaction.atomic():
                create_test_token(self.player, date(2024, 6, 1))

    def test_same_user_may_hold_tokens_for_different_days(self):
        create_test_token(self.player, date(2024, 6, 1))
        create_test_token(self.player, date(2024, 6, 2))
        self.assertEqual(self.player.daily_tokens.count(), 2)

    def test_token_string_globally_unique(self):
        other = create_test_player(team=self.team, username='other')
        create_test_token(self.player, date(2024, 6, 1), token='same-token')
        with self.assertRaises(IntegrityError):
            with transaction.atomic():
                create_test_token(other, date(2024, 6, 1), token='same-token')

    def test_state_and_as_dict(self):
        token = create_test_token(self.player, date(2024, 6, 1))
        self.assertEqual(token.state, DailyToken.State.UNUSED)
        self.assertEqual(token.as_dict(), {
            'token': token.token,
            'valid_date': '2024-06-01',
            'is_used': False,
            'used_at': None,
        })
        token.is_used = True
        self.assertEqual(token.state, DailyToken.State.USED)


class EventModelTests(TestCase):

    def setUp(self):
        self.team = create_test_team()

    def test_only_one_auto_created_event_per_team_day(self):
        create_test_event(self.team, date(2024, 6, 1), is_auto_created=True)
        with self.assertRaises(IntegrityError):
            with transaction.atomic():
                create_test_event(self.team, date(2024, 6, 1), is_auto_created=True)

    def test_manual_events_may_share_a_day(self):
        create_test_event(self.team, date(2024, 6, 1), is_auto_created=True)
        create_test_event(self.team, date(2024, 6, 1))
        create_test_event(self.team, date(2024, 6, 1), event_type=Event.EventType.MATCH)
        self.assertEqual(self.team.events.count(), 3)

    def test_auto_created_constraint_is_per_team(self):
        other_team = create_test_team(name='Other Team')
        create_test_event(self.team, date(2024, 6, 1), is_auto_created=True)
        create_test_event(other_team, date(2024, 6, 1), is_auto_created=True)
        self.assertEqual(Event.objects.filter(is_auto_created=True).count(), 2)

    def test_as_dict_formats_start_time(self):
        event = create_test_event(self.team, date(2024, 6, 1), start_time=time(18, 30))
        data = event.as_dict()
        self.assertEqual(data['start_time'], '18:30')
        self.assertEqual(data['type'], 'training')
        self.assertEqual(data['event_date'], '2024-06-01')


class AttendanceRecordModelTests(TestCase):

    def setUp(self):
        self.team = create_test_team()
        self.player = create_test_player(team=self.team)
        self.event = create_test_event(self.team, date(2024, 6, 1))

    def test_one_record_per_user_per_event(self):
        create_test_attendance(self.player, self.event)
        other_token = create_test_token(self.player, date(2024, 6, 2), is_used=True)
        with self.assertRaises(IntegrityError):
            with transaction.atomic():
                self.event.attendance_records.create(user=self.player, daily_token=other_token)

    def test_token_backs_at_most_one_record(self):
        record = create_test_attendance(self.player, self.event)
        second_event = create_test_event(self.team, date(2024, 6, 1), event_type=Event.EventType.MATCH)
        with self.assertRaises(IntegrityError):
            with transaction.atomic():
                second_event.attendance_records.create(user=self.player, daily_token=record.daily_token)

    def test_as_dict_references_token(self):
        record = create_test_attendance(self.player, self.event)
        data = record.as_dict()
        self.assertEqual(data['qr_token_id'], record.daily_token_id)
        self.assertEqual(data['event_id'], self.event.id)
        self.assertEqual(data['user_id'], self.player.id)
