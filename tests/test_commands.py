"""
Tests for the notification management commands.
"""

from io import StringIO
from unittest import mock

from django.core.management import call_command
from django.test import TestCase, override_settings
from django_q.models import Schedule


class SetupSchedulesCommandTests(TestCase):

    def test_creates_both_schedules(self):
        out = StringIO()
        call_command('setup_schedules', stdout=out)

        digest = Schedule.objects.get(name='Daily Deadline Digest')
        self.assertEqual(digest.func, 'apps.notifications.tasks.run_daily_digest')
        self.assertEqual(digest.schedule_type, Schedule.CRON)
        self.assertEqual(digest.cron, '0 9 * * *')

        refresh = Schedule.objects.get(name='Deadline Notification Refresh')
        self.assertEqual(refresh.func, 'apps.notifications.tasks.refresh_overdue_notifications')
        self.assertEqual(refresh.schedule_type, Schedule.MINUTES)
        self.assertEqual(refresh.minutes, 30)

        self.assertIn('2 schedule(s) created', out.getvalue())

    def test_is_idempotent(self):
        call_command('setup_schedules', stdout=StringIO())

        out = StringIO()
        with override_settings(DIGEST_SEND_HOUR=8, DIGEST_SEND_MINUTE=30):
            call_command('setup_schedules', stdout=out)

        self.assertEqual(Schedule.objects.count(), 2)
        self.assertEqual(Schedule.objects.get(name='Daily Deadline Digest').cron, '30 8 * * *')
        self.assertIn('2 schedule(s) updated', out.getvalue())


class RunDigestCommandTests(TestCase):

    @mock.patch('apps.notifications.tasks.run_digest_now')
    def test_runs_digest(self, mock_run):
        mock_run.return_value = {
            'users': 2, 'emails_sent': 1, 'emails_skipped': 1, 'emails_failed': 0, 'errors': 0,
        }
        out = StringIO()

        call_command('run_digest', stdout=out)

        mock_run.assert_called_once_with()
        self.assertIn('1 sent, 1 skipped', out.getvalue())

    @mock.patch('apps.notifications.tasks.run_digest_now')
    @mock.patch('apps.notifications.tasks.refresh_overdue_notifications')
    def test_refresh_only(self, mock_refresh, mock_run):
        mock_refresh.return_value = {
            'users': 4, 'created': 1, 'updated': 2, 'unchanged': 1, 'errors': 0,
        }
        out = StringIO()

        call_command('run_digest', '--refresh-only', stdout=out)

        mock_run.assert_not_called()
        self.assertIn('Refreshed notifications for 4 user(s)', out.getvalue())
