"""
Scheduled jobs for notifications app.

Background jobs for:
- Daily deadline digest email (daily at 9:00 AM, DEADLINE_TIME_ZONE)
- Due-soon / overdue notification refresh (every 30 minutes)

Both are plain functions so they can be run by the in-process scheduler
(apps.notifications.scheduler), by a Django-Q2 cluster (see the
setup_schedules command) or by hand (run_digest_now / run_digest command).

Users are processed one at a time. A failure for one user is logged and
the loop moves on; the next tick is the retry.
"""

import logging

from datetime import timedelta

from django.conf import settings
from django.contrib.auth import get_user_model
from django.utils import timezone

from . import buckets, deadlines, reconciler, services

logger = logging.getLogger(__name__)


def _new_digest_stats(user_count):
    return {
        'users': user_count,
        'emails_sent': 0,
        'emails_skipped': 0,
        'emails_failed': 0,
        'errors': 0,
    }


def _new_refresh_stats(user_count):
    return {
        'users': user_count,
        'newly_overdue': 0,
        'created': 0,
        'updated': 0,
        'unchanged': 0,
        'errors': 0,
    }


def _count_outcomes(stats, outcomes):
    for outcome in outcomes.values():
        stats[outcome] = stats.get(outcome, 0) + 1


# =============================================================================
# Notification refresh
# =============================================================================

def refresh_notifications_for_user(user_id, now=None):
    """
    Recompute DUE_SOON / OVERDUE for a single user.

    Called right after a task is created, updated or deleted so the
    notification centre reflects the edit without waiting for a tick.

    Returns:
        dict kind → outcome (created / updated / unchanged)
    """
    now = deadlines.localize(now) if now else timezone.now()
    bucket = buckets.get_user_deadline_buckets(user_id, now)
    return reconciler.reconcile_deadline_notifications(user_id, bucket, now)


def refresh_overdue_notifications(now=None):
    """
    Scheduled job (every 30 minutes): reconcile DUE_SOON / OVERDUE for all users.

    No email is sent. Users that dropped out of every bucket but still show
    a non-zero count are reconciled against empty lists. Tasks that crossed
    their deadline since the previous tick are counted as newly_overdue.

    Returns:
        dict with users / newly_overdue / created / updated / unchanged /
        errors counters
    """
    now = deadlines.localize(now) if now else timezone.now()
    active_tasks = list(buckets.get_active_deadline_tasks())
    deadline_buckets = buckets.bucket_tasks(active_tasks, now)
    user_ids = set(deadline_buckets) | reconciler.users_with_open_count_notifications()
    stats = _new_refresh_stats(len(user_ids))

    last_check = now - timedelta(minutes=settings.OVERDUE_REFRESH_MINUTES)
    stats['newly_overdue'] = len(deadlines.get_newly_overdue_tasks(active_tasks, last_check, now))

    for user_id in sorted(user_ids):
        bucket = deadline_buckets.get(user_id, buckets.empty_bucket())
        try:
            outcomes = reconciler.reconcile_deadline_notifications(user_id, bucket, now)
        except Exception:
            stats['errors'] += 1
            logger.exception(f'Notification refresh failed for user {user_id}')
            continue
        _count_outcomes(stats, outcomes)

    logger.info(
        f"Notification refresh: {stats['users']} user(s), {stats['newly_overdue']} newly overdue, "
        f"{stats['created']} created, "
        f"{stats['updated']} updated, {stats['unchanged']} unchanged, {stats['errors']} error(s)"
    )
    return stats


# =============================================================================
# Daily digest
# =============================================================================

def _process_user_digest(user, bucket, digest_date, now, stats):
    """
    Digest flow for one user whose notifications are already reconciled.

    existing log entry → sync EMAIL_SENT from it, no send
    otherwise → render, claim the day (pending), send, settle sent|failed,
    sync EMAIL_SENT when sent
    """
    if user is None or not user.wants_digest_email:
        stats['emails_skipped'] += 1
        return

    entry = services.get_digest_entry(user.pk, digest_date)
    if entry is not None:
        if entry.is_sent:
            reconciler.sync_email_sent_notification(user.pk, entry, now)
        stats['emails_skipped'] += 1
        logger.debug(f'Digest for user {user.pk} on {digest_date} already logged ({entry.status})')
        return

    subject, html_body, text_body = services.render_digest_email(user, bucket)

    entry, claimed = services.claim_digest_slot(user.pk, digest_date, bucket, now)
    if not claimed:
        stats['emails_skipped'] += 1
        return

    result = services.send_notification_email(user.email, subject, html_body, text_body)
    services.record_digest_result(entry, result, now)

    if result['success']:
        stats['emails_sent'] += 1
        reconciler.sync_email_sent_notification(user.pk, entry, now)
        logger.info(
            f"Digest sent to {user.email}: {entry.total_count} task(s), "
            f"{entry.overdue_count} overdue, {entry.upcoming_count} due soon"
        )
    else:
        stats['emails_failed'] += 1
        logger.warning(f"Digest to {user.email} failed: {result['error']}")


def run_daily_digest(now=None):
    """
    Scheduled job (daily at 9:00 AM): deadline digest for every user with
    overdue or upcoming tasks.

    Per user: reconcile DUE_SOON / OVERDUE, then send at most one digest
    email per calendar day (guarded by the digest log).

    Returns:
        dict with users / emails_sent / emails_skipped / emails_failed / errors
    """
    now = deadlines.localize(now) if now else timezone.now()
    digest_date = services.digest_date_for(now)
    deadline_buckets = buckets.get_all_users_deadline_buckets(now)
    stats = _new_digest_stats(len(deadline_buckets))

    logger.info(f'Deadline digest {digest_date}: {len(deadline_buckets)} user(s) with tasks due')

    users = get_user_model().objects.in_bulk(list(deadline_buckets))

    for user_id, bucket in deadline_buckets.items():
        try:
            reconciler.reconcile_deadline_notifications(user_id, bucket, now)
        except Exception:
            stats['errors'] += 1
            logger.exception(f'Notification reconcile failed for user {user_id}')

        try:
            _process_user_digest(users.get(user_id), bucket, digest_date, now, stats)
        except Exception:
            stats['errors'] += 1
            logger.exception(f'Deadline digest failed for user {user_id}')

    logger.info(
        f"Deadline digest {digest_date} done: {stats['emails_sent']} sent, "
        f"{stats['emails_skipped']} skipped, {stats['emails_failed']} failed, "
        f"{stats['errors']} error(s)"
    )
    return stats


def run_digest_now():
    """
    Run the daily digest immediately, outside the schedule.

    Used by the admin trigger endpoint and the run_digest command.
    """
    logger.info('Deadline digest triggered manually')
    return run_daily_digest()
