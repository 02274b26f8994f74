"""
Tests for input validation and sanitization helpers.
"""
from datetime import date

from django.test import TestCase

from attendance.forms import EventForm
from attendance.sanitization import sanitize_text_field, validate_no_html
from attendance.tests.test_utils import create_test_admin, create_test_player, create_test_team
from attendance.validation import (
    validate_date_string, validate_month_string, validate_team_id, validate_year_month,
)


class DateValidationTests(TestCase):

    def test_valid_date(self):
        self.assertEqual(validate_date_string('2024-06-01'), (True, date(2024, 6, 1), None))

    def test_invalid_dates(self):
        for value in ('', '2024-6-1', '2024-02-30', '2024/06/01', None):
            is_valid, parsed, error = validate_date_string(value)
            self.assertFalse(is_valid)
            self.assertIsNone(parsed)
            self.assertTrue(error)

    def test_param_name_in_message(self):
        _, _, error = validate_date_string('bad', 'from')
        self.assertIn('from', error)


class MonthValidationTests(TestCase):

    def test_month_string(self):
        self.assertEqual(validate_month_string('2024-06'), (True, 2024, 6, None))

    def test_year_month_pair(self):
        self.assertEqual(validate_year_month('2024', '12'), (True, 2024, 12, None))

    def test_invalid_months(self):
        for year, month in (('2024', '13'), ('2024', '0'), ('abc', '1'), ('1999', '5'), ('2024', None)):
            self.assertFalse(validate_year_month(year, month)[0])
        for value in ('2024-6', '202406', '', '2024-13'):
            self.assertFalse(validate_month_string(value)[0])


class TeamValidationTests(TestCase):

    def setUp(self):
        self.team = create_test_team()
        self.admin = create_test_admin(team=self.team)

    def test_own_team(self):
        is_valid, team, error = validate_team_id(str(self.team.id), self.admin)
        self.assertTrue(is_valid)
        self.assertEqual(team, self.team)

    def test_other_team(self):
        other_team = create_test_team(name='Other Team')
        is_valid, team, error = validate_team_id(other_team.id, self.admin)
        self.assertFalse(is_valid)
        self.assertIsNone(team)

    def test_bad_ids(self):
        for value in (None, 'abc', -1, 0, 99999):
            self.assertFalse(validate_team_id(value, self.admin)[0])


class SanitizationTests(TestCase):

    def test_strips_html(self):
        self.assertEqual(sanitize_text_field('<b>Main</b>   Pitch'), 'Main Pitch')

    def test_decodes_entities(self):
        self.assertEqual(sanitize_text_field('Fish &amp; Chips'), 'Fish & Chips')

    def test_truncates(self):
        self.assertEqual(len(sanitize_text_field('x' * 300, max_length=200)), 200)

    def test_keeps_newlines_when_asked(self):
        text = 'Bring boots\r\n\n  Warm-up   at 6'
        self.assertEqual(sanitize_text_field(text, keep_newlines=True), 'Bring boots\nWarm-up at 6')
        self.assertEqual(sanitize_text_field(text), 'Bring boots Warm-up at 6')

    def test_empty(self):
        self.assertEqual(sanitize_text_field(None), '')
        self.assertEqual(sanitize_text_field(''), '')

    def test_validate_no_html(self):
        self.assertEqual(validate_no_html('Plain text'), (True, None))
        self.assertFalse(validate_no_html('<i>x</i>', 'Location')[0])


class EventFormTests(TestCase):

    def setUp(self):
        self.team = create_test_team()
        self.admin = create_test_admin(team=self.team)

    def test_valid_form_sets_team_and_creator(self):
        form = EventForm(
            {'event_type': 'training', 'event_date': '2024-06-01', 'location': 'Pitch 1'},
            team=self.team,
            created_by=self.admin,
        )
        self.assertTrue(form.is_valid(), form.errors)
        event = form.save()
        self.assertEqual(event.team, self.team)
        self.assertEqual(event.created_by, self.admin)
        self.assertIsNone(event.start_time)

    def test_description_is_sanitized(self):
        form = EventForm(
            {'event_type': 'match', 'event_date': '2024-06-01', 'description': '<p>Cup</p>\nfinal'},
            team=self.team,
        )
        self.assertTrue(form.is_valid(), form.errors)
        self.assertEqual(form.cleaned_data['description'], 'Cup\nfinal')

    def test_date_required(self):
        form = EventForm({'event_type': 'training'}, team=self.team)
        self.assertFalse(form.is_valid())
        self.assertIn('event_date', form.errors)
