"""
Tests for admin configuration.
"""
from datetime import date

from django.contrib.admin.sites import AdminSite
from django.test import RequestFactory, TestCase

from attendance.admin import EventAdmin
from attendance.models import Event
from attendance.tests.test_utils import (
    create_test_attendance, create_test_event, create_test_player, create_test_team,
)


class EventAdminTests(TestCase):

    def setUp(self):
        self.team = create_test_team()
        self.player = create_test_player(team=self.team)
        self.model_admin = EventAdmin(Event, AdminSite())
        self.request = RequestFactory().get('/admin/')

    def test_date_editable_without_attendance(self):
        event = create_test_event(self.team, date(2024, 6, 1))
        readonly = self.model_admin.get_readonly_fields(self.request, event)
        self.assertNotIn('event_date', readonly)
        self.assertNotIn('team', readonly)

    def test_date_and_team_locked_with_attendance(self):
        event = create_test_event(self.team, date(2024, 6, 1))
        create_test_attendance(self.player, event)
        readonly = self.model_admin.get_readonly_fields(self.request, event)
        self.assertIn('event_date', readonly)
        self.assertIn('team', readonly)
        self.assertIn('is_auto_created', readonly)

    def test_add_form_not_locked(self):
        readonly = self.model_admin.get_readonly_fields(self.request)
        self.assertNotIn('event_date', readonly)
