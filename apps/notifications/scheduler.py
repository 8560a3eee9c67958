"""
In-process scheduler for the notification jobs.

initialize() starts an APScheduler BackgroundScheduler with two jobs and
returns a SchedulerHandle; whoever calls it owns the handle and must call
stop() / shutdown() on teardown. Nothing is kept at module level.

Jobs:
- daily_deadline_digest: run_daily_digest at DIGEST_SEND_HOUR:DIGEST_SEND_MINUTE
- overdue_refresh: refresh_overdue_notifications every OVERDUE_REFRESH_MINUTES

A job that raises is logged by the wrapper; the trigger keeps firing.
"""

import logging

from apscheduler.schedulers.background import BackgroundScheduler
from apscheduler.triggers.cron import CronTrigger
from apscheduler.triggers.interval import IntervalTrigger
from django.conf import settings
from django.db import close_old_connections

from . import deadlines, tasks

logger = logging.getLogger(__name__)

DIGEST_JOB_ID = 'daily_deadline_digest'
REFRESH_JOB_ID = 'overdue_refresh'


def run_job(name, func):
    """
    Execute one scheduled run.

    Exceptions are logged, never re-raised, and stale DB connections are
    closed on both sides of the run since jobs execute on worker threads.
    """
    close_old_connections()
    try:
        logger.info(f'Scheduled job {name} started')
        return func()
    except Exception:
        logger.exception(f'Scheduled job {name} failed')
        return None
    finally:
        close_old_connections()


def run_digest_job():
    return run_job(DIGEST_JOB_ID, tasks.run_daily_digest)


def run_refresh_job():
    return run_job(REFRESH_JOB_ID, tasks.refresh_overdue_notifications)


class SchedulerHandle:
    """
    Owner-facing handle for a running scheduler.

    Usage:
        handle = initialize()
        ...
        handle.shutdown()
    """

    def __init__(self, scheduler):
        self._scheduler = scheduler

    @property
    def running(self):
        return self._scheduler.running

    @property
    def job_ids(self):
        return sorted(job.id for job in self._scheduler.get_jobs())

    def next_run_times(self):
        """dict job id → next fire time (None while paused or stopped)."""
        return {
            job.id: getattr(job, 'next_run_time', None)
            for job in self._scheduler.get_jobs()
        }

    def stop(self, wait=True):
        """Stop both timers. Safe to call more than once."""
        if self._scheduler.running:
            self._scheduler.shutdown(wait=wait)
            logger.info('Notification scheduler stopped')

    shutdown = stop

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        self.stop()


def build_scheduler(tz=None):
    """Create a scheduler with both jobs registered but not started."""
    tz = deadlines.calendar_timezone(tz)
    scheduler = BackgroundScheduler(timezone=tz)

    scheduler.add_job(
        run_digest_job,
        trigger=CronTrigger(
            hour=settings.DIGEST_SEND_HOUR,
            minute=settings.DIGEST_SEND_MINUTE,
            timezone=tz,
        ),
        id=DIGEST_JOB_ID,
        name='Daily deadline digest',
        max_instances=1,
        coalesce=True,
        replace_existing=True,
    )
    scheduler.add_job(
        run_refresh_job,
        trigger=IntervalTrigger(minutes=settings.OVERDUE_REFRESH_MINUTES, timezone=tz),
        id=REFRESH_JOB_ID,
        name='Due-soon / overdue notification refresh',
        max_instances=1,
        coalesce=True,
        replace_existing=True,
    )
    return scheduler


def initialize(tz=None):
    """
    Start the notification scheduler.

    Returns:
        SchedulerHandle owning the running scheduler
    """
    scheduler = build_scheduler(tz)
    scheduler.start()
    logger.info(
        f'Notification scheduler started: digest daily at '
        f'{settings.DIGEST_SEND_HOUR:02d}:{settings.DIGEST_SEND_MINUTE:02d} '
        f'({settings.DEADLINE_TIME_ZONE}), refresh every '
        f'{settings.OVERDUE_REFRESH_MINUTES} minutes'
    )
    return SchedulerHandle(scheduler)
