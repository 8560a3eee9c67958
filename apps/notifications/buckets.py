"""
Deadline buckets: group active tasks per user into overdue / upcoming lists.

- overdue: effective deadline < now
- upcoming: not overdue and effective deadline <= now + UPCOMING_WINDOW_HOURS
- everything else is dropped (nothing to notify about)

The upcoming window (48h by default) drives notifications and digest emails.
It is deliberately separate from the 'deadline-soon' display status in
deadlines.classify, which looks DEADLINE_SOON_DAYS calendar days ahead.
"""

from datetime import timedelta

from django.conf import settings

from . import deadlines


def empty_bucket():
    return {'overdue': [], 'upcoming': []}


def task_summary(task):
    """Minimal projection of a task for notification and email payloads."""
    return {
        'id': task.pk,
        'title': task.title,
        'deadline_date': task.deadline_date,
        'deadline_time': task.deadline_time or deadlines.DEFAULT_DEADLINE_TIME,
        'status': task.status,
        'priority': task.priority,
        'complexity': task.complexity,
    }


def upcoming_window():
    return timedelta(hours=getattr(settings, 'UPCOMING_WINDOW_HOURS', 48))


def bucket_tasks(tasks, now, tz=None):
    """
    Partition tasks per owner into overdue and upcoming summaries.

    Callers pass tasks already filtered to "not done, deadline set"
    (see get_active_deadline_tasks). Rows without an owner or deadline, and
    done rows, are skipped here too.

    Args:
        tasks: Iterable of Task instances
        now: Reference datetime (naive values are taken as calendar-local)
        tz: Calendar timezone override

    Returns:
        dict mapping owner id → {'overdue': [...], 'upcoming': [...]}
        Owners with nothing overdue or upcoming are absent.
    """
    tz = deadlines.calendar_timezone(tz)
    now = deadlines.localize(now, tz)
    upcoming_threshold = now + upcoming_window()
    buckets = {}

    for task in tasks:
        if not task.owner_id or not task.deadline_date:
            continue
        if task.status == deadlines.TASK_STATUS_DONE:
            continue

        deadline = deadlines.effective_deadline(task.deadline_date, task.deadline_time, tz)
        if deadline is None:
            continue

        is_overdue = deadline < now
        is_upcoming = not is_overdue and deadline <= upcoming_threshold
        if not is_overdue and not is_upcoming:
            continue

        bucket = buckets.setdefault(task.owner_id, empty_bucket())
        if is_overdue:
            bucket['overdue'].append(task_summary(task))
        else:
            bucket['upcoming'].append(task_summary(task))

    return buckets


# =============================================================================
# Task store queries
# =============================================================================

def get_active_deadline_tasks(user_id=None):
    """All tasks that are not done and have a deadline date, optionally for one user."""
    from apps.tasks.models import Task

    queryset = Task.objects.exclude(
        status=Task.Status.DONE
    ).filter(
        deadline_date__isnull=False
    )
    if user_id is not None:
        queryset = queryset.filter(owner_id=user_id)
    return queryset.only(
        'id', 'owner_id', 'title', 'deadline_date', 'deadline_time',
        'status', 'priority', 'complexity', 'overdue_notified',
    ).order_by('deadline_date', 'deadline_time', 'id')


def get_all_users_deadline_buckets(now, tz=None):
    """Buckets for every user with overdue or upcoming tasks (scheduler batch)."""
    return bucket_tasks(get_active_deadline_tasks(), now, tz)


def get_user_deadline_buckets(user_id, now, tz=None):
    """Bucket for a single user; empty lists when nothing is due."""
    buckets = bucket_tasks(get_active_deadline_tasks(user_id), now, tz)
    # Query is scoped to one owner, so there is at most one entry
    return next(iter(buckets.values()), empty_bucket())
