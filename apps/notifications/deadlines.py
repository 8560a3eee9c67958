"""
Deadline evaluation helpers.

A task deadline is a calendar date plus an optional "HH:mm" time, both
interpreted in the calendar timezone (settings.DEADLINE_TIME_ZONE). The
effective deadline instant is pinned to HH:mm:59.999 so a task only
becomes overdue once its deadline minute has fully elapsed.

Every function takes the reference time ``now`` explicitly and accepts an
optional ``tz``; when ``tz`` is omitted the configured calendar timezone is
used. No function reads the host timezone or a global clock.

Functions:
- calendar_timezone: Resolve the configured calendar timezone
- effective_deadline: Date + time → aware datetime
- classify: done / overdue / deadline-today / deadline-soon / safe
- is_overdue: Shortcut for classify(...) == overdue
- format_deadline: DD/MM/YYYY HH:mm display string
- is_valid_deadline_time: Validate an "HH:mm" string
- get_newly_overdue_tasks: Tasks that crossed their deadline between two checks
"""

import re
from datetime import date, datetime, time, timedelta
from zoneinfo import ZoneInfo

from django.conf import settings

DEFAULT_DEADLINE_TIME = '23:59'

# Deadline display statuses
DONE = 'done'
OVERDUE = 'overdue'
DEADLINE_TODAY = 'deadline-today'
DEADLINE_SOON = 'deadline-soon'
SAFE = 'safe'

# Mirrors Task.Status.DONE; kept as a literal so models can import this module
TASK_STATUS_DONE = 'done'

DEADLINE_TIME_RE = re.compile(r'^([0-1]?[0-9]|2[0-3]):[0-5][0-9]$')


def calendar_timezone(tz=None):
    """Return ``tz`` as a tzinfo, defaulting to settings.DEADLINE_TIME_ZONE."""
    if tz is None:
        return ZoneInfo(settings.DEADLINE_TIME_ZONE)
    if isinstance(tz, str):
        return ZoneInfo(tz)
    return tz


def localize(moment, tz=None):
    """Express ``moment`` in the calendar timezone (naive values are taken as local)."""
    tz = calendar_timezone(tz)
    if moment.tzinfo is None:
        return moment.replace(tzinfo=tz)
    return moment.astimezone(tz)


def is_valid_deadline_time(value):
    """Check that ``value`` is an "HH:mm" string (24-hour clock)."""
    if not value or not isinstance(value, str):
        return False
    return bool(DEADLINE_TIME_RE.match(value))


def parse_deadline_time(value):
    """
    Parse an "HH:mm" string into (hour, minute).

    Missing or malformed values fall back to 23:59 instead of raising, so a
    bad time string never drops a task out of deadline tracking.
    """
    if not is_valid_deadline_time(value):
        value = DEFAULT_DEADLINE_TIME
    hours, minutes = value.split(':')
    return int(hours), int(minutes)


def _to_calendar_date(value, tz):
    if isinstance(value, datetime):
        if value.tzinfo is not None:
            return value.astimezone(tz).date()
        return value.date()
    if isinstance(value, date):
        return value
    return date.fromisoformat(str(value)[:10])


def effective_deadline(deadline_date, deadline_time=DEFAULT_DEADLINE_TIME, tz=None):
    """
    Combine a deadline date and "HH:mm" time into an aware datetime.

    Args:
        deadline_date: date, datetime or "YYYY-MM-DD" string (None allowed)
        deadline_time: "HH:mm" string; None/invalid means 23:59
        tz: Calendar timezone override

    Returns:
        Aware datetime at HH:mm:59.999 in the calendar timezone, or None when
        there is no deadline date.
    """
    if not deadline_date:
        return None

    tz = calendar_timezone(tz)
    try:
        day = _to_calendar_date(deadline_date, tz)
    except ValueError:
        return None

    hours, minutes = parse_deadline_time(deadline_time)
    return datetime.combine(day, time(hours, minutes, 59, 999000), tzinfo=tz)


def start_of_day(moment, days=0, tz=None):
    """Local midnight of ``moment`` shifted by ``days`` calendar days."""
    tz = calendar_timezone(tz)
    local_day = localize(moment, tz).date() + timedelta(days=days)
    return datetime.combine(local_day, time.min, tzinfo=tz)


def classify(task, now, tz=None, soon_days=None):
    """
    Classify a task's deadline for display.

    Order matters:
    1. Done tasks are 'done' before any date arithmetic.
    2. Tasks without a deadline are 'safe'.
    3. now past the effective deadline → 'overdue'.
    4. Deadline inside now's calendar day → 'deadline-today'.
    5. Deadline before midnight ``soon_days`` days ahead → 'deadline-soon'.
    6. Otherwise 'safe'.
    """
    if task is None:
        return SAFE
    if getattr(task, 'status', None) == TASK_STATUS_DONE:
        return DONE

    tz = calendar_timezone(tz)
    deadline = effective_deadline(
        getattr(task, 'deadline_date', None),
        getattr(task, 'deadline_time', None),
        tz,
    )
    if deadline is None:
        return SAFE

    now = localize(now, tz)
    if now > deadline:
        return OVERDUE

    if start_of_day(now, tz=tz) <= deadline < start_of_day(now, 1, tz=tz):
        return DEADLINE_TODAY

    if soon_days is None:
        soon_days = getattr(settings, 'DEADLINE_SOON_DAYS', 3)
    if deadline < start_of_day(now, soon_days, tz=tz):
        return DEADLINE_SOON

    return SAFE


def is_overdue(task, now, tz=None):
    """True when a non-done task is past its effective deadline."""
    return classify(task, now, tz) == OVERDUE


def format_deadline(deadline_date, deadline_time=DEFAULT_DEADLINE_TIME, tz=None):
    """Format a deadline as "DD/MM/YYYY HH:mm", or None without a date."""
    deadline = effective_deadline(deadline_date, deadline_time, tz)
    if deadline is None:
        return None
    return deadline.strftime('%d/%m/%Y %H:%M')


def get_newly_overdue_tasks(tasks, last_check, now, tz=None):
    """
    Return tasks that were not overdue at ``last_check`` but are at ``now``.

    Done tasks and tasks already flagged ``overdue_notified`` are skipped.
    """
    newly_overdue = []
    for task in tasks:
        if getattr(task, 'status', None) == TASK_STATUS_DONE:
            continue
        if getattr(task, 'overdue_notified', False):
            continue
        if not is_overdue(task, last_check, tz) and is_overdue(task, now, tz):
            newly_overdue.append(task)
    return newly_overdue
