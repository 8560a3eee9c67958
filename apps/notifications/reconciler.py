"""
System notification reconciliation.

Each user has at most one SystemNotification per kind. This module decides,
per tick, whether that row needs writing and what its unread flag becomes.

EMAIL_SENT is content based: it mirrors the day's digest log entry. Same
(title, message, severity) → only last_triggered_at moves. Anything new →
content replaced and the row becomes unread again.

DUE_SOON and OVERDUE summarise the current situation and are count based:
- unchanged count → no write at all
- count went up, or first non-zero appearance → unread
- count went down → keep whatever unread state the user left it in
"""

import logging

from django.conf import settings

from .models import SystemNotification

logger = logging.getLogger(__name__)

Kind = SystemNotification.Kind
Severity = SystemNotification.Severity

COUNT_KINDS = (Kind.DUE_SOON, Kind.OVERDUE)

# Outcomes returned to callers (used for job counters)
CREATED = 'created'
UPDATED = 'updated'
UNCHANGED = 'unchanged'
TOUCHED = 'touched'

TRACKED_COUNT_FIELD = 'count'

# Rows written before the canonical 'count' key used per-kind names
LEGACY_COUNT_FIELDS = {
    Kind.DUE_SOON: 'upcomingCount',
    Kind.OVERDUE: 'overdueCount',
}


def read_tracked_count(notification):
    """
    Return the count a notification was last reconciled with.

    Tries the canonical 'count' key, then the legacy per-kind key, then
    falls back to 0. A missing row also counts as 0.
    """
    if notification is None:
        return 0

    metadata = notification.tracking_metadata or {}
    for field in (TRACKED_COUNT_FIELD, LEGACY_COUNT_FIELDS.get(notification.kind)):
        if not field or metadata.get(field) is None:
            continue
        try:
            return int(metadata[field])
        except (TypeError, ValueError):
            continue
    return 0


def _plural(count, word):
    return f"{count} {word}" if count == 1 else f"{count} {word}s"


def build_count_content(kind, count):
    """Title, message and severity for a DUE_SOON / OVERDUE notification."""
    if kind == Kind.DUE_SOON:
        window = getattr(settings, 'UPCOMING_WINDOW_HOURS', 48)
        if count > 0:
            return (
                'Tasks due soon',
                f"{_plural(count, 'task')} due within the next {window} hours",
                Severity.WARN,
            )
        return ('Tasks due soon', f"No tasks due within the next {window} hours", Severity.INFO)

    if kind == Kind.OVERDUE:
        if count > 0:
            return (
                'Overdue tasks',
                f"{_plural(count, 'task')} past the deadline",
                Severity.CRITICAL,
            )
        return ('Overdue tasks', 'No overdue tasks', Severity.INFO)

    raise ValueError(f"Not a count-tracked notification kind: {kind}")


def build_email_sent_content(log_entry):
    """
    Title, message and severity for the EMAIL_SENT notification.

    The digest day is part of the message, so a new day's email always
    reads as changed content while a same-day re-sync does not.
    """
    severity = Severity.CRITICAL if log_entry.overdue_count > 0 else Severity.WARN
    return (
        'Deadline digest sent by email',
        f"{log_entry.digest_date}: {_plural(log_entry.total_count, 'task')}, "
        f"{log_entry.overdue_count} overdue, {log_entry.upcoming_count} due soon",
        severity,
    )


def next_unread_state(previous_count, next_count, existing):
    """
    Unread flag after a count change.

    Called only when the count actually changed.
    """
    if next_count > previous_count:
        return True
    if existing is None:
        return next_count > 0
    return existing.unread


def reconcile_count_notification(user_id, kind, count, now):
    """
    Bring one DUE_SOON / OVERDUE notification in line with ``count``.

    Args:
        user_id: Owner of the notification
        kind: Kind.DUE_SOON or Kind.OVERDUE
        count: Current number of tasks in the matching bucket
        now: Aware datetime stamped as last_triggered_at on change

    Returns:
        CREATED, UPDATED or UNCHANGED (no write issued)
    """
    if kind not in COUNT_KINDS:
        raise ValueError(f"Not a count-tracked notification kind: {kind}")

    existing = SystemNotification.objects.filter(user_id=user_id, kind=kind).first()
    previous_count = read_tracked_count(existing)

    if count == previous_count:
        return UNCHANGED

    title, message, severity = build_count_content(kind, count)
    unread = next_unread_state(previous_count, count, existing)

    _, created = SystemNotification.objects.update_or_create(
        user_id=user_id,
        kind=kind,
        defaults={
            'title': title,
            'message': message,
            'severity': severity,
            'unread': unread,
            'last_triggered_at': now,
            'tracking_metadata': {TRACKED_COUNT_FIELD: count},
        },
    )
    logger.debug(
        'Notification %s for user %s: %s → %s (unread=%s)',
        kind, user_id, previous_count, count, unread,
    )
    return CREATED if created else UPDATED


def reconcile_deadline_notifications(user_id, bucket, now):
    """
    Reconcile DUE_SOON and OVERDUE for one user from a deadline bucket.

    Returns:
        dict kind → outcome
    """
    return {
        Kind.DUE_SOON: reconcile_count_notification(
            user_id, Kind.DUE_SOON, len(bucket['upcoming']), now
        ),
        Kind.OVERDUE: reconcile_count_notification(
            user_id, Kind.OVERDUE, len(bucket['overdue']), now
        ),
    }


def sync_email_sent_notification(user_id, log_entry, now):
    """
    Mirror a digest log entry into the user's EMAIL_SENT notification.

    Returns:
        CREATED, UPDATED (content changed, reset to unread) or
        TOUCHED (same content, only last_triggered_at bumped)
    """
    title, message, severity = build_email_sent_content(log_entry)
    tracking = {
        'upcomingCount': log_entry.upcoming_count,
        'overdueCount': log_entry.overdue_count,
        'digestDate': log_entry.digest_date,
    }

    existing = SystemNotification.objects.filter(
        user_id=user_id, kind=Kind.EMAIL_SENT
    ).first()

    if existing is not None and (
        existing.title, existing.message, existing.severity
    ) == (title, message, severity):
        SystemNotification.objects.filter(pk=existing.pk).update(last_triggered_at=now)
        return TOUCHED

    _, created = SystemNotification.objects.update_or_create(
        user_id=user_id,
        kind=Kind.EMAIL_SENT,
        defaults={
            'title': title,
            'message': message,
            'severity': severity,
            'unread': True,
            'last_triggered_at': now,
            'tracking_metadata': tracking,
        },
    )
    return CREATED if created else UPDATED


def users_with_open_count_notifications():
    """
    Ids of users whose DUE_SOON / OVERDUE notification still tracks a
    non-zero count. Used to zero out users who dropped out of every bucket.
    """
    user_ids = set()
    rows = SystemNotification.objects.filter(kind__in=COUNT_KINDS).only(
        'user_id', 'kind', 'tracking_metadata'
    )
    for notification in rows:
        if read_tracked_count(notification) > 0:
            user_ids.add(notification.user_id)
    return user_ids
