"""
Tests for deadline evaluation (apps.notifications.deadlines).
"""

from datetime import date, datetime, timedelta, timezone as dt_timezone

from django.test import SimpleTestCase, override_settings

from apps.notifications import deadlines

from .utils import LOCAL_TZ, local_dt, task_stub


# =============================================================================
# Effective deadline
# =============================================================================

class EffectiveDeadlineTests(SimpleTestCase):

    def test_pins_to_end_of_deadline_minute(self):
        deadline = deadlines.effective_deadline(date(2024, 1, 18), '18:30')
        self.assertEqual(deadline, local_dt(2024, 1, 18, 18, 30, 59, 999000))
        self.assertEqual(deadline.tzinfo, LOCAL_TZ)

    def test_no_date_means_no_deadline(self):
        self.assertIsNone(deadlines.effective_deadline(None, '18:30'))
        self.assertIsNone(deadlines.effective_deadline('', '18:30'))

    def test_accepts_iso_date_string(self):
        self.assertEqual(
            deadlines.effective_deadline('2024-01-18', '08:05'),
            local_dt(2024, 1, 18, 8, 5, 59, 999000),
        )

    def test_aware_datetime_uses_its_calendar_date(self):
        # 2024-01-17 20:00 UTC is already the 18th in UTC+7
        moment = datetime(2024, 1, 17, 20, 0, tzinfo=dt_timezone.utc)
        self.assertEqual(
            deadlines.effective_deadline(moment, '09:00'),
            local_dt(2024, 1, 18, 9, 0, 59, 999000),
        )

    def test_unparseable_date_string_is_ignored(self):
        self.assertIsNone(deadlines.effective_deadline('not-a-date', '09:00'))

    def test_missing_time_defaults_to_end_of_day(self):
        expected = local_dt(2024, 1, 18, 23, 59, 59, 999000)
        self.assertEqual(deadlines.effective_deadline(date(2024, 1, 18), None), expected)
        self.assertEqual(deadlines.effective_deadline(date(2024, 1, 18), ''), expected)

    def test_malformed_time_defaults_to_end_of_day(self):
        for value in ('25:99', '1830', 'noon', '18:3', '-1:00'):
            with self.subTest(value=value):
                self.assertEqual(
                    deadlines.effective_deadline(date(2024, 1, 18), value),
                    local_dt(2024, 1, 18, 23, 59, 59, 999000),
                )

    def test_explicit_timezone_override(self):
        deadline = deadlines.effective_deadline(date(2024, 1, 18), '18:30', tz='UTC')
        self.assertEqual(deadline, datetime(2024, 1, 18, 18, 30, 59, 999000, tzinfo=dt_timezone.utc))

    @override_settings(DEADLINE_TIME_ZONE='Europe/London')
    def test_timezone_comes_from_settings(self):
        deadline = deadlines.effective_deadline(date(2024, 1, 18), '18:30')
        self.assertEqual(deadline.utcoffset(), timedelta(0))


class DeadlineTimeValidationTests(SimpleTestCase):

    def test_valid_times(self):
        for value in ('00:00', '9:05', '09:05', '18:30', '23:59'):
            with self.subTest(value=value):
                self.assertTrue(deadlines.is_valid_deadline_time(value))

    def test_invalid_times(self):
        for value in (None, '', '24:00', '12:60', '1230', 'ab:cd', 1230):
            with self.subTest(value=value):
                self.assertFalse(deadlines.is_valid_deadline_time(value))


# =============================================================================
# Classification
# =============================================================================

class ClassifyTests(SimpleTestCase):

    def test_done_is_done_for_any_now(self):
        task = task_stub(deadline_date='2024-01-18', deadline_time='18:30', status='done')
        for now in (
            local_dt(2023, 1, 1),
            local_dt(2024, 1, 18, 18, 30),
            local_dt(2024, 1, 18, 19, 0),
            local_dt(2030, 6, 1),
        ):
            with self.subTest(now=now):
                self.assertEqual(deadlines.classify(task, now), deadlines.DONE)

    def test_done_without_deadline_is_done(self):
        task = task_stub(deadline_date=None, status='done')
        self.assertEqual(deadlines.classify(task, local_dt(2024, 1, 18)), deadlines.DONE)

    def test_overdue_boundary_is_end_of_minute(self):
        task = task_stub(deadline_date='2024-01-18', deadline_time='18:30')

        self.assertFalse(deadlines.is_overdue(task, local_dt(2024, 1, 18, 18, 30, 59, 998000)))
        self.assertFalse(deadlines.is_overdue(task, local_dt(2024, 1, 18, 18, 30, 59, 999000)))
        self.assertTrue(deadlines.is_overdue(task, local_dt(2024, 1, 18, 18, 31, 0, 0)))

    def test_missing_time_behaves_like_2359(self):
        without_time = task_stub(deadline_date='2024-01-18', deadline_time=None)
        empty_time = task_stub(deadline_date='2024-01-18', deadline_time='')
        default_time = task_stub(deadline_date='2024-01-18', deadline_time='23:59')

        start = local_dt(2024, 1, 14)
        for hours in range(0, 24 * 6, 5):
            now = start + timedelta(hours=hours)
            with self.subTest(now=now):
                expected = deadlines.classify(default_time, now)
                self.assertEqual(deadlines.classify(without_time, now), expected)
                self.assertEqual(deadlines.classify(empty_time, now), expected)

    def test_same_day_before_and_after_deadline(self):
        task = task_stub(deadline_date='2024-01-18', deadline_time='18:30', status='in_progress')

        self.assertEqual(
            deadlines.classify(task, local_dt(2024, 1, 18, 17, 0)),
            deadlines.DEADLINE_TODAY,
        )
        self.assertEqual(
            deadlines.classify(task, local_dt(2024, 1, 18, 19, 0)),
            deadlines.OVERDUE,
        )

    def test_no_deadline_is_safe(self):
        task = task_stub(deadline_date=None)
        self.assertEqual(deadlines.classify(task, local_dt(2024, 1, 18)), deadlines.SAFE)

    def test_missing_task_is_safe(self):
        self.assertEqual(deadlines.classify(None, local_dt(2024, 1, 18)), deadlines.SAFE)

    def test_deadline_soon_window(self):
        now = local_dt(2024, 1, 18, 10, 0)

        tomorrow = task_stub(deadline_date='2024-01-19', deadline_time='08:00')
        third_day = task_stub(deadline_date='2024-01-20')
        fourth_day = task_stub(deadline_date='2024-01-21', deadline_time='00:00')

        self.assertEqual(deadlines.classify(tomorrow, now), deadlines.DEADLINE_SOON)
        self.assertEqual(deadlines.classify(third_day, now), deadlines.DEADLINE_SOON)
        self.assertEqual(deadlines.classify(fourth_day, now), deadlines.SAFE)

    def test_soon_days_override(self):
        now = local_dt(2024, 1, 18, 10, 0)
        task = task_stub(deadline_date='2024-01-23')

        self.assertEqual(deadlines.classify(task, now), deadlines.SAFE)
        self.assertEqual(deadlines.classify(task, now, soon_days=7), deadlines.DEADLINE_SOON)

    def test_naive_now_is_taken_as_local(self):
        task = task_stub(deadline_date='2024-01-18', deadline_time='18:30')

        self.assertEqual(
            deadlines.classify(task, datetime(2024, 1, 18, 17, 0)),
            deadlines.DEADLINE_TODAY,
        )
        self.assertEqual(
            deadlines.classify(task, datetime(2024, 1, 18, 19, 0)),
            deadlines.OVERDUE,
        )

    def test_utc_now_is_compared_in_calendar_timezone(self):
        task = task_stub(deadline_date='2024-01-18', deadline_time='18:30')
        # 11:31 UTC is 18:31 in UTC+7
        now = datetime(2024, 1, 18, 11, 31, tzinfo=dt_timezone.utc)
        self.assertEqual(deadlines.classify(task, now), deadlines.OVERDUE)


# =============================================================================
# Display helpers
# =============================================================================

class FormatDeadlineTests(SimpleTestCase):

    def test_format(self):
        self.assertEqual(deadlines.format_deadline(date(2024, 1, 18), '9:05'), '18/01/2024 09:05')

    def test_default_time(self):
        self.assertEqual(deadlines.format_deadline(date(2024, 1, 18), None), '18/01/2024 23:59')

    def test_no_date(self):
        self.assertIsNone(deadlines.format_deadline(None))


class NewlyOverdueTests(SimpleTestCase):

    def test_only_tasks_crossing_the_deadline_between_checks(self):
        last_check = local_dt(2024, 1, 18, 12, 0)
        now = local_dt(2024, 1, 18, 12, 30)

        crossed = task_stub(pk=1, deadline_date='2024-01-18', deadline_time='12:15')
        already_overdue = task_stub(pk=2, deadline_date='2024-01-17', deadline_time='09:00')
        not_yet = task_stub(pk=3, deadline_date='2024-01-18', deadline_time='13:00')
        done = task_stub(pk=4, deadline_date='2024-01-18', deadline_time='12:15', status='done')
        flagged = task_stub(pk=5, deadline_date='2024-01-18', deadline_time='12:15', overdue_notified=True)

        result = deadlines.get_newly_overdue_tasks(
            [crossed, already_overdue, not_yet, done, flagged], last_check, now
        )
        self.assertEqual([task.pk for task in result], [1])
