"""
Tests for the notification centre and scheduler endpoints.
"""

from unittest import mock

from django.test import TestCase
from django.urls import reverse

from apps.notifications import reconciler
from apps.notifications.models import SystemNotification

from .utils import create_user, local_dt

Kind = SystemNotification.Kind

NOW = local_dt(2024, 1, 18, 10, 0)


class NotificationCentreTests(TestCase):

    def setUp(self):
        self.user = create_user('me@example.com')
        self.other = create_user('them@example.com')

        reconciler.reconcile_count_notification(self.user.pk, Kind.OVERDUE, 2, NOW)
        reconciler.reconcile_count_notification(self.user.pk, Kind.DUE_SOON, 1, NOW)
        reconciler.reconcile_count_notification(self.other.pk, Kind.OVERDUE, 5, NOW)

        self.client.force_login(self.user)

    def test_login_required(self):
        self.client.logout()
        response = self.client.get(reverse('notifications:notification_list'))
        self.assertEqual(response.status_code, 302)

    def test_lists_own_notifications(self):
        response = self.client.get(reverse('notifications:notification_list'))

        self.assertEqual(response.status_code, 200)
        data = response.json()
        self.assertEqual({n['kind'] for n in data['notifications']}, {'OVERDUE', 'DUE_SOON'})
        self.assertEqual(data['unread_count'], 2)

        overdue = next(n for n in data['notifications'] if n['kind'] == 'OVERDUE')
        self.assertEqual(overdue['message'], '2 tasks past the deadline')
        self.assertEqual(overdue['severity'], 'critical')
        self.assertTrue(overdue['unread'])

    def test_filter_by_kind(self):
        response = self.client.get(reverse('notifications:notification_list'), {'kind': 'OVERDUE'})
        kinds = [n['kind'] for n in response.json()['notifications']]
        self.assertEqual(kinds, ['OVERDUE'])

    def test_filter_by_unread(self):
        SystemNotification.objects.filter(user=self.user, kind=Kind.DUE_SOON).update(unread=False)

        response = self.client.get(reverse('notifications:notification_list'), {'unread': 'true'})
        data = response.json()
        self.assertEqual([n['kind'] for n in data['notifications']], ['OVERDUE'])
        self.assertEqual(data['unread_count'], 1)

    def test_invalid_filter(self):
        response = self.client.get(reverse('notifications:notification_list'), {'kind': 'BOGUS'})
        self.assertEqual(response.status_code, 400)
        self.assertIn('kind', response.json()['errors'])

    def test_mark_read(self):
        notification = SystemNotification.objects.get(user=self.user, kind=Kind.OVERDUE)

        response = self.client.post(reverse('notifications:mark_read', args=[notification.pk]))

        self.assertEqual(response.status_code, 200)
        self.assertFalse(response.json()['unread'])
        notification.refresh_from_db()
        self.assertFalse(notification.unread)

    def test_cannot_mark_someone_elses_notification(self):
        notification = SystemNotification.objects.get(user=self.other)

        response = self.client.post(reverse('notifications:mark_read', args=[notification.pk]))

        self.assertEqual(response.status_code, 404)
        notification.refresh_from_db()
        self.assertTrue(notification.unread)

    def test_mark_all_read(self):
        response = self.client.post(reverse('notifications:mark_all_read'))

        self.assertEqual(response.json(), {'updated': 2})
        self.assertFalse(SystemNotification.objects.filter(user=self.user, unread=True).exists())
        self.assertTrue(SystemNotification.objects.get(user=self.other).unread)

    def test_mark_all_read_requires_post(self):
        response = self.client.get(reverse('notifications:mark_all_read'))
        self.assertEqual(response.status_code, 405)


class SchedulerEndpointTests(TestCase):

    def setUp(self):
        self.staff = create_user('admin@example.com', is_staff=True)
        self.user = create_user('me@example.com')

    def test_run_requires_staff(self):
        self.client.force_login(self.user)
        with mock.patch('apps.notifications.views.run_digest_now') as mock_run:
            response = self.client.post(reverse('notifications:scheduler_run'))

        self.assertEqual(response.status_code, 302)
        mock_run.assert_not_called()

    def test_run_digest_now(self):
        self.client.force_login(self.staff)
        stats = {'users': 3, 'emails_sent': 2, 'emails_skipped': 1, 'emails_failed': 0, 'errors': 0}

        with mock.patch('apps.notifications.views.run_digest_now', return_value=stats) as mock_run:
            response = self.client.post(reverse('notifications:scheduler_run'))

        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json(), {'success': True, 'stats': stats})
        mock_run.assert_called_once_with()

    def test_status(self):
        self.client.force_login(self.staff)

        response = self.client.get(reverse('notifications:scheduler_status'))

        data = response.json()
        self.assertEqual(data['timezone'], 'Asia/Ho_Chi_Minh')
        self.assertEqual(data['digest'], '09:00 daily')
        self.assertEqual(data['refresh_minutes'], 30)
        self.assertEqual(data['upcoming_window_hours'], 48)
