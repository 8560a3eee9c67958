"""
Tests for the in-process scheduler (apps.notifications.scheduler).
"""

from datetime import timedelta
from unittest import mock

from apscheduler.triggers.cron import CronTrigger
from apscheduler.triggers.interval import IntervalTrigger
from django.test import SimpleTestCase, override_settings

from apps.notifications import scheduler


@mock.patch('apps.notifications.scheduler.close_old_connections')
class RunJobTests(SimpleTestCase):

    def test_returns_job_result(self, mock_close):
        self.assertEqual(scheduler.run_job('demo', lambda: {'users': 0}), {'users': 0})
        self.assertEqual(mock_close.call_count, 2)

    def test_exception_is_logged_not_raised(self, mock_close):
        def explode():
            raise RuntimeError('boom')

        with self.assertLogs('apps.notifications.scheduler', level='ERROR') as logs:
            self.assertIsNone(scheduler.run_job('demo', explode))

        self.assertIn('Scheduled job demo failed', logs.output[0])
        self.assertEqual(mock_close.call_count, 2)

    @mock.patch('apps.notifications.tasks.run_daily_digest', return_value={'emails_sent': 2})
    def test_digest_job_runs_daily_digest(self, mock_digest, mock_close):
        self.assertEqual(scheduler.run_digest_job(), {'emails_sent': 2})
        mock_digest.assert_called_once_with()

    @mock.patch('apps.notifications.tasks.refresh_overdue_notifications', side_effect=RuntimeError)
    def test_refresh_job_swallows_failures(self, mock_refresh, mock_close):
        with self.assertLogs('apps.notifications.scheduler', level='ERROR'):
            self.assertIsNone(scheduler.run_refresh_job())


@override_settings(DIGEST_SEND_HOUR=7, DIGEST_SEND_MINUTE=15, OVERDUE_REFRESH_MINUTES=20)
class SchedulerLifecycleTests(SimpleTestCase):

    def test_build_registers_both_jobs(self):
        built = scheduler.build_scheduler()
        jobs = {job.id: job for job in built.get_jobs()}

        self.assertEqual(set(jobs), {scheduler.DIGEST_JOB_ID, scheduler.REFRESH_JOB_ID})
        self.assertFalse(built.running)

        digest_trigger = jobs[scheduler.DIGEST_JOB_ID].trigger
        self.assertIsInstance(digest_trigger, CronTrigger)
        fields = {field.name: str(field) for field in digest_trigger.fields}
        self.assertEqual(fields['hour'], '7')
        self.assertEqual(fields['minute'], '15')
        self.assertEqual(str(digest_trigger.timezone), 'Asia/Ho_Chi_Minh')

        refresh_trigger = jobs[scheduler.REFRESH_JOB_ID].trigger
        self.assertIsInstance(refresh_trigger, IntervalTrigger)
        self.assertEqual(refresh_trigger.interval, timedelta(minutes=20))

    def test_initialize_and_stop(self):
        handle = scheduler.initialize()
        try:
            self.assertTrue(handle.running)
            self.assertEqual(handle.job_ids, ['daily_deadline_digest', 'overdue_refresh'])

            next_runs = handle.next_run_times()
            self.assertEqual(set(next_runs), set(handle.job_ids))
            self.assertEqual(next_runs['daily_deadline_digest'].hour, 7)
            self.assertEqual(next_runs['daily_deadline_digest'].minute, 15)
        finally:
            handle.stop(wait=False)

        self.assertFalse(handle.running)
        # Second stop is a no-op
        handle.shutdown()

    def test_context_manager_stops_scheduler(self):
        with scheduler.initialize() as handle:
            self.assertTrue(handle.running)
        self.assertFalse(handle.running)

    def test_each_initialize_owns_its_scheduler(self):
        first = scheduler.initialize()
        second = scheduler.initialize()
        try:
            first.stop()
            self.assertFalse(first.running)
            self.assertTrue(second.running)
        finally:
            first.stop()
            second.stop()
